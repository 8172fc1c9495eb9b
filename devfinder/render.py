"""Plain-text renderers for the profile card and repository list."""

from __future__ import annotations

from typing import Optional, Sequence, assert_never

from devfinder.controllers.query_state import Idle, Pending, QueryState, Rejected, Resolved
from devfinder.models.github import GithubUser, RepositoryRecord

NOT_AVAILABLE = "Not Available"
LOADING = "Loading..."
SUBMIT_PROMPT = "Submit a github username"


def _or_not_available(value: Optional[str]) -> str:
    return value if value else NOT_AVAILABLE


def render_user_details(user: GithubUser) -> str:
    lines = [
        user.name or user.login,
        f"@{user.login}",
    ]
    if user.created_at:
        lines.append(f"Joined {user.created_at}")
    if user.bio:
        lines.extend(["", user.bio])
    lines.extend(
        [
            "",
            f"Repos: {user.public_repos}  Followers: {user.followers}  Following: {user.following}",
            "",
            f"Location: {_or_not_available(user.location)}",
            f"Website: {_or_not_available(user.blog)}",
            f"Twitter: {_or_not_available(user.twitter_username)}",
            f"Company: {_or_not_available(user.company)}",
        ]
    )
    return "\n".join(lines)


def render_profile(state: QueryState[GithubUser]) -> str:
    if isinstance(state, Idle):
        return SUBMIT_PROMPT
    elif isinstance(state, Pending):
        return LOADING
    elif isinstance(state, Rejected):
        return state.reason
    elif isinstance(state, Resolved):
        return render_user_details(state.value)
    else:
        assert_never(state)


def render_repository_list(
    state: QueryState[tuple[RepositoryRecord, ...]],
    projected: Sequence[RepositoryRecord],
    languages: Sequence[str] = (),
    active_language: str = "",
) -> str:
    if isinstance(state, Idle):
        return "Repositories have not been requested"
    elif isinstance(state, Pending):
        return LOADING
    elif isinstance(state, Rejected):
        return state.reason
    elif isinstance(state, Resolved):
        lines = ["Repo List"]
        if languages:
            buttons = " ".join(
                f"[{language}]" if language == active_language else language for language in languages
            )
            lines.append(f"Filter: {buttons}")
        if not projected:
            lines.append("No repositories match this filter")
        for record in projected:
            lines.append(f"- {record.name} ({record.language or NOT_AVAILABLE})")
        return "\n".join(lines)
    else:
        assert_never(state)
