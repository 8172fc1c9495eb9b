"""Wires user input and activation to the profile and repository controllers."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from devfinder.clients.contracts import ProfileClient, RepositoryList, RepositoryListContract
from devfinder.clients.github import GitHubProfileClient, sanitize_log_extra
from devfinder.config.settings import Settings, settings as default_settings
from devfinder.controllers.fetch_state import FetchStateController
from devfinder.controllers.query_state import IDLE, PENDING, QueryState, Resolved
from devfinder.models.github import GithubUser
from devfinder.render import render_profile, render_repository_list
from devfinder.services.repo_filter import NO_FILTER, MemoizedProjection, available_languages
from devfinder.utils.logger import setup_logger

logger = logging.getLogger(__name__)


class DevFinderApp:
    """Profile lookup plus a fixed owner's repository listing.

    `on_submit` and `activate` are the only triggers; each maps to a `start`
    call on its own controller. The two controllers share nothing.
    """

    def __init__(
        self,
        *,
        client: ProfileClient | None = None,
        app_settings: Settings | None = None,
    ) -> None:
        self._settings = app_settings or default_settings
        setup_logger("devfinder", level="DEBUG" if self._settings.DEBUG else self._settings.LOG_LEVEL)
        self._client: ProfileClient = client or GitHubProfileClient(
            base_url=self._settings.GITHUB_API_BASE_URL,
            timeout_seconds=self._settings.REQUEST_TIMEOUT_SECONDS,
            user_agent=self._settings.USER_AGENT,
        )
        cancel_superseded = self._settings.CANCEL_SUPERSEDED_REQUESTS

        self.profile: FetchStateController[GithubUser] = FetchStateController(
            self._client.get_user,
            name="profile",
            initial_state=IDLE,
            cancel_superseded=cancel_superseded,
        )
        self.repositories: FetchStateController[RepositoryList] = FetchStateController(
            self._fetch_repositories,
            name="repositories",
            initial_state=PENDING,
            cancel_superseded=cancel_superseded,
        )

        self._activated = False
        self._language = NO_FILTER
        self._projection = MemoizedProjection()

    async def __aenter__(self) -> DevFinderApp:
        self.activate()
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.aclose()

    @property
    def language(self) -> str:
        return self._language

    def activate(self) -> asyncio.Task[None] | None:
        """Start the repository listing; later calls are no-ops."""
        if self._activated:
            return None
        self._activated = True
        logger.info(
            "Activating repository listing",
            extra=sanitize_log_extra(owner=self._settings.REPO_OWNER, per_page=self._settings.REPOS_PER_PAGE),
        )
        return self.repositories.start(self._settings.REPO_OWNER)

    def on_submit(self, username: str) -> asyncio.Task[None] | None:
        """Look up `username`, superseding any lookup still in flight.

        Blank input and a repeat of the current username issue no request.
        """
        username = username.strip()
        if not username:
            logger.debug("Ignoring empty username submission")
            return None
        if username == self.profile.query_key:
            return None
        return self.profile.start(username)

    def select_language(self, language: str) -> None:
        self._language = language

    def clear_filter(self) -> None:
        self._language = NO_FILTER

    def repository_records(self) -> RepositoryList:
        state = self.repositories.state
        if isinstance(state, Resolved):
            return state.value
        return ()

    def projected_repositories(self) -> RepositoryList:
        return self._projection(self.repository_records(), self._language)

    def filter_languages(self) -> tuple[str, ...]:
        """Configured filter choices, or the languages of the fetched repositories when none are configured."""
        if self._settings.FILTER_LANGUAGES:
            return tuple(self._settings.FILTER_LANGUAGES)
        return available_languages(self.repository_records())

    def render(self) -> str:
        profile_state: QueryState[GithubUser] = self.profile.state
        repository_state: QueryState[RepositoryList] = self.repositories.state
        return "\n\n".join(
            [
                self._settings.APP_NAME,
                render_profile(profile_state),
                render_repository_list(
                    repository_state,
                    self.projected_repositories(),
                    self.filter_languages(),
                    self._language,
                ),
            ]
        )

    async def aclose(self) -> None:
        await self.profile.aclose()
        await self.repositories.aclose()
        await self._client.aclose()

    async def _fetch_repositories(self, owner: str) -> RepositoryListContract:
        return await self._client.list_repositories(owner, per_page=self._settings.REPOS_PER_PAGE)
