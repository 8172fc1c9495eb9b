"""Async GitHub REST client returning typed fetch contracts."""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter, ValidationError

from devfinder.clients.contracts import (
    FailureKind,
    FetchResult,
    FetchState,
    RepositoryListContract,
    UserContract,
)
from devfinder.config.settings import settings
from devfinder.models.github import GithubUser, RepositoryRecord

logger = logging.getLogger(__name__)

REDACTED = "***REDACTED***"
SENSITIVE_KEYS = {
    "authorization",
    "token",
    "access_token",
    "api_key",
    "password",
    "secret",
    "session",
    "cookie",
}
PAYLOAD_KEYS = {"body", "content", "payload", "raw"}
MAX_LOGGED_STRING = 300

_BEARER_PATTERN = re.compile(r"(?i)\b(bearer|token)\s+[A-Za-z0-9_\-\.=]+")
_ASSIGNMENT_PATTERN = re.compile(
    r"(?i)\b(access_token|token|api_key|password|secret|session)\s*[=:]\s*[^\s&,;]+"
)

USER_NOT_FOUND_MESSAGE = "User not found"
TRANSPORT_FAILURE_MESSAGE = "Unable to reach GitHub"
DECODE_FAILURE_MESSAGE = "Received an invalid response from GitHub"
MALFORMED_REPOSITORIES_MESSAGE = "Received malformed repository data from GitHub"

_REPOSITORY_LIST = TypeAdapter(list[RepositoryRecord])


def _scrub_text(text: str) -> str:
    text = _BEARER_PATTERN.sub(lambda match: f"{match.group(1)} {REDACTED}", text)
    text = _ASSIGNMENT_PATTERN.sub(lambda match: f"{match.group(1)}={REDACTED}", text)
    if len(text) > MAX_LOGGED_STRING:
        text = text[:MAX_LOGGED_STRING] + "..."
    return text


def sanitize_for_log(value: Any, key: str | None = None) -> Any:
    """Mask credentials and bulky payloads before they reach log records."""
    normalized_key = (key or "").lower()
    if normalized_key in SENSITIVE_KEYS:
        return REDACTED
    if normalized_key in PAYLOAD_KEYS and value is not None:
        return f"<redacted payload: {len(str(value))} chars>"

    if isinstance(value, Mapping):
        return {item_key: sanitize_for_log(item, key=str(item_key)) for item_key, item in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [sanitize_for_log(item) for item in value]
    if isinstance(value, str):
        return _scrub_text(value)
    return value


def sanitize_log_extra(**fields: Any) -> dict[str, Any]:
    """Build a logging `extra` mapping with every field sanitized."""
    return {field: sanitize_for_log(value, key=field) for field, value in fields.items()}


class GitHubProfileClient:
    """Unauthenticated GitHub client for user profiles and repository listings.

    Every outcome, including transport errors, is folded into a FetchResult so
    callers never have to handle httpx exceptions. One call means exactly one
    request; there is no retry.
    """

    def __init__(
        self,
        *,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout_seconds: float | None = None,
        user_agent: str | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.GITHUB_API_BASE_URL,
            transport=transport,
            timeout=timeout_seconds if timeout_seconds is not None else settings.REQUEST_TIMEOUT_SECONDS,
            headers={
                "Accept": "application/vnd.github+json",
                "User-Agent": user_agent or settings.USER_AGENT,
                "X-GitHub-Api-Version": "2022-11-28",
            },
        )

    async def __aenter__(self) -> GitHubProfileClient:
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_user(self, username: str) -> UserContract:
        result = await self._request(f"/users/{quote(username, safe='')}")
        if result.is_failed:
            error = USER_NOT_FOUND_MESSAGE if result.status_code == 404 else result.error
            return FetchResult(
                state=FetchState.FAILED,
                status_code=result.status_code,
                error=error,
                failure=result.failure,
            )

        try:
            user = GithubUser.model_validate(result.data)
        except ValidationError as exc:
            logger.warning(
                "GitHub user payload failed validation",
                extra=sanitize_log_extra(username=username, error=str(exc)),
            )
            return FetchResult.failed(
                FailureKind.VALIDATION,
                USER_NOT_FOUND_MESSAGE,
                status_code=result.status_code,
            )
        return FetchResult(state=FetchState.OK, data=user, status_code=result.status_code)

    async def list_repositories(self, owner: str, *, per_page: int | None = None) -> RepositoryListContract:
        result = await self._request(
            f"/users/{quote(owner, safe='')}/repos",
            params={"per_page": per_page or settings.REPOS_PER_PAGE},
        )
        if result.is_failed:
            return FetchResult(
                state=FetchState.FAILED,
                status_code=result.status_code,
                error=result.error,
                failure=result.failure,
            )

        try:
            records = tuple(_REPOSITORY_LIST.validate_python(result.data))
        except ValidationError as exc:
            logger.warning(
                "GitHub repository payload failed validation",
                extra=sanitize_log_extra(owner=owner, error=str(exc)),
            )
            return FetchResult.failed(
                FailureKind.VALIDATION,
                MALFORMED_REPOSITORIES_MESSAGE,
                status_code=result.status_code,
            )

        state = FetchState.OK if records else FetchState.EMPTY
        return FetchResult(state=state, data=records, status_code=result.status_code)

    async def _request(self, path: str, params: dict[str, Any] | None = None) -> FetchResult[Any]:
        logger.debug("GitHub request", extra=sanitize_log_extra(path=path, params=params))
        try:
            response = await self._client.get(path, params=params)
        except httpx.TransportError as exc:
            logger.warning(
                "GitHub request failed",
                extra=sanitize_log_extra(path=path, params=params, failure=FailureKind.TRANSPORT.value, error=str(exc)),
            )
            return FetchResult.failed(FailureKind.TRANSPORT, TRANSPORT_FAILURE_MESSAGE)

        try:
            payload = response.json()
            decoded = True
        except ValueError:
            payload = None
            decoded = False

        if not response.is_success:
            message = payload.get("message") if isinstance(payload, dict) else None
            error = str(message) if message else f"GitHub request failed with status {response.status_code}"
            logger.warning(
                "GitHub request failed",
                extra=sanitize_log_extra(
                    path=path,
                    params=params,
                    failure=FailureKind.PROTOCOL.value,
                    status_code=response.status_code,
                    error=error,
                ),
            )
            return FetchResult.failed(FailureKind.PROTOCOL, error, status_code=response.status_code)

        if not decoded:
            logger.warning(
                "GitHub response could not be decoded",
                extra=sanitize_log_extra(path=path, status_code=response.status_code, body=response.text),
            )
            return FetchResult.failed(FailureKind.DECODE, DECODE_FAILURE_MESSAGE, status_code=response.status_code)

        return FetchResult(state=FetchState.OK, data=payload, status_code=response.status_code)
