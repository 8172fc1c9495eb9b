"""GitHub client primitives."""

from devfinder.clients.contracts import (
    FailureKind,
    FetchResult,
    FetchState,
    ProfileClient,
    RepositoryList,
    RepositoryListContract,
    UserContract,
)
from devfinder.clients.github import GitHubProfileClient

__all__ = [
    "GitHubProfileClient",
    "ProfileClient",
    "FailureKind",
    "FetchState",
    "FetchResult",
    "RepositoryList",
    "UserContract",
    "RepositoryListContract",
]
