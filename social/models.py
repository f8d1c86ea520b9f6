"""
social/models.py -- Domain dataclasses for profiles and posts.

These are pure data containers with zero logic. Ownership rules live in
auth/permissions.py; persistence lives in social/store.py.

Every record carries the owning user's id (user_id). That id is the only
thing ownership checks ever compare.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Experience:
    """One job entry on a profile. id is None before the record is written."""

    title: str
    company: str
    from_date: str  # ISO date, as submitted
    id: Optional[int] = None
    profile_id: Optional[int] = None
    location: Optional[str] = None
    to_date: Optional[str] = None
    current: bool = False
    description: Optional[str] = None


@dataclass
class Education:
    """One school entry on a profile. id is None before the record is written."""

    school: str
    degree: str
    fieldofstudy: str
    from_date: str
    id: Optional[int] = None
    profile_id: Optional[int] = None
    to_date: Optional[str] = None
    current: bool = False
    description: Optional[str] = None


@dataclass
class Profile:
    """A developer profile. Exactly one per user (UNIQUE user_id).

    skills is stored as a JSON array; social holds optional links keyed by
    network name ("youtube", "twitter", "facebook", "linkedin", "instagram").
    experience and education are loaded newest first.
    """

    user_id: int
    status: str
    skills: list[str] = field(default_factory=list)
    id: Optional[int] = None
    company: Optional[str] = None
    website: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    githubusername: Optional[str] = None
    social: dict[str, str] = field(default_factory=dict)
    experience: list[Experience] = field(default_factory=list)
    education: list[Education] = field(default_factory=list)
    created_at: str = ""  # ISO 8601, set by store on insert


@dataclass
class Like:
    post_id: int
    user_id: int
    id: Optional[int] = None


@dataclass
class Comment:
    """A comment on a post. name and avatar are copied from the author at write time."""

    post_id: int
    user_id: int
    text: str
    name: str = ""
    avatar: str = ""
    id: Optional[int] = None
    created_at: str = ""


@dataclass
class Post:
    """A post on the shared feed.

    name and avatar are snapshotted from the author at creation, so a post
    still renders after its author's account is gone. likes and comments
    are loaded newest first.
    """

    user_id: int
    text: str
    name: str = ""
    avatar: str = ""
    id: Optional[int] = None
    likes: list[Like] = field(default_factory=list)
    comments: list[Comment] = field(default_factory=list)
    created_at: str = ""
