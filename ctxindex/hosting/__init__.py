"""Remote hosting and HTTP adapters."""

from .client import DirectoryEntry, GitHubClient, HttpClient, RepoRef, parse_repo

__all__ = ["DirectoryEntry", "GitHubClient", "HttpClient", "RepoRef", "parse_repo"]
