"""Validated GitHub entities returned by the REST API"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class GithubUser(BaseModel):
    """
    GitHub user profile

    Only `login` is required; a payload without it does not describe a user.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    login: str = Field(..., min_length=1)
    name: Optional[str] = None
    avatar_url: Optional[str] = None
    html_url: Optional[str] = None
    created_at: Optional[str] = None
    bio: Optional[str] = None

    # Profile counters
    public_repos: int = 0
    followers: int = 0
    following: int = 0

    # Contact details, shown as "Not Available" when missing
    location: Optional[str] = None
    blog: Optional[str] = None
    twitter_username: Optional[str] = None
    company: Optional[str] = None

    def __repr__(self):
        return f"<GithubUser {self.login}>"


class RepositoryRecord(BaseModel):
    """A single repository entry from a user's repository listing"""
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    name: str
    language: Optional[str] = None

    def __repr__(self):
        return f"<RepositoryRecord {self.name} ({self.language or 'n/a'})>"
