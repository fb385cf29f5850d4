"""Command-line interface for RepoWarden."""
