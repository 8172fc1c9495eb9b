"""GitHub entity models"""

from devfinder.models.github import GithubUser, RepositoryRecord

__all__ = [
    "GithubUser",
    "RepositoryRecord",
]
