"""devfinder: GitHub profile lookup and repository listing."""

from devfinder.app import DevFinderApp
from devfinder.controllers import (
    FetchStateController,
    Idle,
    Pending,
    QueryState,
    QueryStatus,
    Rejected,
    Resolved,
)
from devfinder.services.repo_filter import MemoizedProjection, available_languages, project

__all__ = [
    "DevFinderApp",
    "FetchStateController",
    "QueryState",
    "QueryStatus",
    "Idle",
    "Pending",
    "Resolved",
    "Rejected",
    "MemoizedProjection",
    "available_languages",
    "project",
]
