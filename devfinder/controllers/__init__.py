"""Fetch-state controllers and their lifecycle states."""

from devfinder.controllers.fetch_state import FetchStateController
from devfinder.controllers.query_state import (
    IDLE,
    PENDING,
    Idle,
    Pending,
    QueryState,
    QueryStatus,
    Rejected,
    Resolved,
)

__all__ = [
    "FetchStateController",
    "QueryState",
    "QueryStatus",
    "Idle",
    "Pending",
    "Resolved",
    "Rejected",
    "IDLE",
    "PENDING",
]
