"""Lifecycle states of a single fetch cycle."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Generic, TypeVar, Union


T = TypeVar("T")


class QueryStatus(str, Enum):
    """Status tag exposed to renderers."""

    IDLE = "idle"
    PENDING = "pending"
    RESOLVED = "resolved"
    REJECTED = "rejected"


@dataclass(frozen=True, slots=True)
class Idle:
    """No query has been issued yet."""

    status: ClassVar[QueryStatus] = QueryStatus.IDLE


@dataclass(frozen=True, slots=True)
class Pending:
    """A request is in flight."""

    status: ClassVar[QueryStatus] = QueryStatus.PENDING


@dataclass(frozen=True, slots=True)
class Resolved(Generic[T]):
    """The request succeeded with a validated payload."""

    value: T
    status: ClassVar[QueryStatus] = QueryStatus.RESOLVED


@dataclass(frozen=True, slots=True)
class Rejected:
    """The request failed; `reason` is shown to the user as-is."""

    reason: str
    status: ClassVar[QueryStatus] = QueryStatus.REJECTED


QueryState = Union[Idle, Pending, Resolved[T], Rejected]

IDLE = Idle()
PENDING = Pending()
