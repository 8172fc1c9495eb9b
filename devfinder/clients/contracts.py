"""Typed contracts for GitHub client responses."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, Protocol, TypeVar

from devfinder.models.github import GithubUser, RepositoryRecord


T = TypeVar("T")


class FetchState(str, Enum):
    """Normalized response state handed to fetch-state controllers."""

    OK = "ok"
    EMPTY = "empty"
    FAILED = "failed"


class FailureKind(str, Enum):
    """Where a failed fetch broke down."""

    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    DECODE = "decode"
    VALIDATION = "validation"


@dataclass(slots=True)
class FetchResult(Generic[T]):
    """Container that separates payload from fetch semantics."""

    state: FetchState
    data: Optional[T] = None
    status_code: Optional[int] = None
    error: Optional[str] = None
    failure: Optional[FailureKind] = None

    @property
    def is_ok(self) -> bool:
        return self.state == FetchState.OK

    @property
    def is_empty(self) -> bool:
        return self.state == FetchState.EMPTY

    @property
    def is_failed(self) -> bool:
        return self.state == FetchState.FAILED

    @classmethod
    def failed(
        cls,
        failure: FailureKind,
        error: str,
        *,
        status_code: Optional[int] = None,
    ) -> FetchResult[T]:
        return cls(state=FetchState.FAILED, failure=failure, error=error, status_code=status_code)


RepositoryList = tuple[RepositoryRecord, ...]

UserContract = FetchResult[GithubUser]
RepositoryListContract = FetchResult[RepositoryList]


class ProfileClient(Protocol):
    """Network capability the app needs for profile and repository lookups."""

    async def get_user(self, username: str) -> UserContract: ...

    async def list_repositories(self, owner: str, *, per_page: int | None = None) -> RepositoryListContract: ...

    async def aclose(self) -> None: ...
