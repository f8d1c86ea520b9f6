"""
API request and response models for DevConnector REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
social/models.py, which own the internal domain representation. Route
handlers map between the two.

Validation messages are written for people ("Text is required"), because the
client shows them verbatim. The app's RequestValidationError handler turns
them into {"errors": [{"msg": ..., "param": ...}]}.
"""

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from auth.models import User
from auth.passwords import MIN_PASSWORD_LENGTH
from social.models import Comment, Education, Experience, Like, Post, Profile

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Pragmatic address check: one @, no whitespace, a dot in the domain part.
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# bcrypt only looks at the first 72 bytes.
MAX_PASSWORD_LENGTH = 72


def _required(value: Optional[str], message: str) -> str:
    if value is None or not value.strip():
        raise ValueError(message)
    return value.strip()


# ---------------------------------------------------------------------------
# Auth request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/v1/users."""

    name: Optional[str] = Field(default=None, max_length=255, validate_default=True)
    email: Optional[str] = Field(default=None, max_length=255, validate_default=True)
    password: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("name")
    @classmethod
    def name_required(cls, v: Optional[str]) -> str:
        return _required(v, "Name is required")

    @field_validator("email")
    @classmethod
    def valid_email(cls, v: Optional[str]) -> str:
        if v is None or not EMAIL_PATTERN.match(v.strip()):
            raise ValueError("Please include a valid email")
        return v.strip().lower()

    @field_validator("password")
    @classmethod
    def password_length(cls, v: Optional[str]) -> str:
        if v is None or len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Please enter a password with {MIN_PASSWORD_LENGTH} or more characters")
        if len(v.encode("utf-8")) > MAX_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_LENGTH} bytes")
        return v


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/auth."""

    email: Optional[str] = Field(default=None, max_length=255, validate_default=True)
    password: Optional[str] = Field(default=None, validate_default=True)

    @field_validator("email")
    @classmethod
    def valid_email(cls, v: Optional[str]) -> str:
        if v is None or not EMAIL_PATTERN.match(v.strip()):
            raise ValueError("Please include a valid email")
        return v.strip().lower()

    @field_validator("password")
    @classmethod
    def password_present(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("Password is required")
        return v


# ---------------------------------------------------------------------------
# Auth response models
# ---------------------------------------------------------------------------


class TokenResponse(BaseModel):
    """Response for successful registration or login."""

    model_config = ConfigDict(frozen=True)

    token: str


class UserResponse(BaseModel):
    """Account details without the password hash."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    email: str
    avatar: str
    created_at: str

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            avatar=user.avatar,
            created_at=user.created_at or "",
        )


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    msg: str


# ---------------------------------------------------------------------------
# Profile request models
# ---------------------------------------------------------------------------


class ProfileUpsert(BaseModel):
    """Request body for POST /api/v1/profile.

    skills arrives as a comma-separated string ("python, go ,sql") and is
    split and trimmed into a list.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    status: Optional[str] = Field(default=None, max_length=100, validate_default=True)
    skills: Optional[str] = Field(default=None, max_length=1000, validate_default=True)
    company: Optional[str] = Field(default=None, max_length=255)
    website: Optional[str] = Field(default=None, max_length=255)
    location: Optional[str] = Field(default=None, max_length=255)
    bio: Optional[str] = Field(default=None, max_length=2000)
    githubusername: Optional[str] = Field(default=None, max_length=100)
    youtube: Optional[str] = Field(default=None, max_length=255)
    twitter: Optional[str] = Field(default=None, max_length=255)
    facebook: Optional[str] = Field(default=None, max_length=255)
    linkedin: Optional[str] = Field(default=None, max_length=255)
    instagram: Optional[str] = Field(default=None, max_length=255)

    @field_validator("status")
    @classmethod
    def status_required(cls, v: Optional[str]) -> str:
        return _required(v, "Status is required")

    @field_validator("skills")
    @classmethod
    def skills_required(cls, v: Optional[str]) -> str:
        return _required(v, "Skills is required")

    def skill_list(self) -> list[str]:
        return [s.strip() for s in self.skills.split(",") if s.strip()]

    def social_links(self) -> dict[str, str]:
        links = {
            "youtube": self.youtube,
            "twitter": self.twitter,
            "facebook": self.facebook,
            "linkedin": self.linkedin,
            "instagram": self.instagram,
        }
        return {k: v for k, v in links.items() if v}


class ExperienceCreate(BaseModel):
    """Request body for PUT /api/v1/profile/experience.

    The wire names are "from" and "to" (reserved words in Python), mapped to
    from_date / to_date.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, max_length=255, validate_default=True)
    company: Optional[str] = Field(default=None, max_length=255, validate_default=True)
    location: Optional[str] = Field(default=None, max_length=255)
    from_date: Optional[str] = Field(default=None, alias="from", max_length=32, validate_default=True)
    to_date: Optional[str] = Field(default=None, alias="to", max_length=32)
    current: bool = False
    description: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("title")
    @classmethod
    def title_required(cls, v: Optional[str]) -> str:
        return _required(v, "Title is required")

    @field_validator("company")
    @classmethod
    def company_required(cls, v: Optional[str]) -> str:
        return _required(v, "Company is required")

    @field_validator("from_date")
    @classmethod
    def from_required(cls, v: Optional[str]) -> str:
        return _required(v, "From date is required")


class EducationCreate(BaseModel):
    """Request body for PUT /api/v1/profile/education."""

    model_config = ConfigDict(str_strip_whitespace=True)

    school: Optional[str] = Field(default=None, max_length=255, validate_default=True)
    degree: Optional[str] = Field(default=None, max_length=255, validate_default=True)
    fieldofstudy: Optional[str] = Field(default=None, max_length=255, validate_default=True)
    from_date: Optional[str] = Field(default=None, alias="from", max_length=32, validate_default=True)
    to_date: Optional[str] = Field(default=None, alias="to", max_length=32)
    current: bool = False
    description: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("school")
    @classmethod
    def school_required(cls, v: Optional[str]) -> str:
        return _required(v, "School is required")

    @field_validator("degree")
    @classmethod
    def degree_required(cls, v: Optional[str]) -> str:
        return _required(v, "Degree is required")

    @field_validator("fieldofstudy")
    @classmethod
    def fieldofstudy_required(cls, v: Optional[str]) -> str:
        return _required(v, "Field of study is required")

    @field_validator("from_date")
    @classmethod
    def from_required(cls, v: Optional[str]) -> str:
        return _required(v, "From date is required")


# Field name -> JSON key for request fields whose key is a Python keyword.
# A missing "from" is reported under the field name when its default is
# validated, so the error handler maps it back.
WIRE_NAMES = {
    name: info.alias
    for model in (ExperienceCreate, EducationCreate)
    for name, info in model.model_fields.items()
    if info.alias
}


# ---------------------------------------------------------------------------
# Profile response models
# ---------------------------------------------------------------------------


class ProfileUser(BaseModel):
    """The slice of the owning user shown on a profile."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    avatar: str


class ExperienceResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    company: str
    location: Optional[str]
    from_date: str = Field(serialization_alias="from")
    to_date: Optional[str] = Field(serialization_alias="to")
    current: bool
    description: Optional[str]

    @classmethod
    def from_experience(cls, exp: Experience) -> "ExperienceResponse":
        return cls(
            id=exp.id,
            title=exp.title,
            company=exp.company,
            location=exp.location,
            from_date=exp.from_date,
            to_date=exp.to_date,
            current=exp.current,
            description=exp.description,
        )


class EducationResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    school: str
    degree: str
    fieldofstudy: str
    from_date: str = Field(serialization_alias="from")
    to_date: Optional[str] = Field(serialization_alias="to")
    current: bool
    description: Optional[str]

    @classmethod
    def from_education(cls, edu: Education) -> "EducationResponse":
        return cls(
            id=edu.id,
            school=edu.school,
            degree=edu.degree,
            fieldofstudy=edu.fieldofstudy,
            from_date=edu.from_date,
            to_date=edu.to_date,
            current=edu.current,
            description=edu.description,
        )


class ProfileResponse(BaseModel):
    """Full profile. user is None when the owning account no longer exists."""

    model_config = ConfigDict(frozen=True)

    id: int
    user: Optional[ProfileUser]
    status: str
    skills: list[str]
    company: Optional[str]
    website: Optional[str]
    location: Optional[str]
    bio: Optional[str]
    githubusername: Optional[str]
    social: dict[str, str]
    experience: list[ExperienceResponse]
    education: list[EducationResponse]
    created_at: str

    @classmethod
    def from_profile(cls, profile: Profile, owner: Optional[User]) -> "ProfileResponse":
        """Build a ProfileResponse, embedding the owner's name and avatar."""
        return cls(
            id=profile.id,
            user=ProfileUser(id=owner.id, name=owner.name, avatar=owner.avatar) if owner else None,
            status=profile.status,
            skills=profile.skills,
            company=profile.company,
            website=profile.website,
            location=profile.location,
            bio=profile.bio,
            githubusername=profile.githubusername,
            social=profile.social,
            experience=[ExperienceResponse.from_experience(e) for e in profile.experience],
            education=[EducationResponse.from_education(e) for e in profile.education],
            created_at=profile.created_at,
        )


# ---------------------------------------------------------------------------
# Post request/response models
# ---------------------------------------------------------------------------


class TextBody(BaseModel):
    """Request body for POST /posts and POST /posts/comment/{id}."""

    model_config = ConfigDict(str_strip_whitespace=True)

    text: Optional[str] = Field(default=None, max_length=5000, validate_default=True)

    @field_validator("text")
    @classmethod
    def text_required(cls, v: Optional[str]) -> str:
        return _required(v, "Text is required")


class LikeResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    user: int

    @classmethod
    def from_like(cls, like: Like) -> "LikeResponse":
        return cls(id=like.id, user=like.user_id)


class CommentResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    user: int
    text: str
    name: str
    avatar: str
    created_at: str

    @classmethod
    def from_comment(cls, comment: Comment) -> "CommentResponse":
        return cls(
            id=comment.id,
            user=comment.user_id,
            text=comment.text,
            name=comment.name,
            avatar=comment.avatar,
            created_at=comment.created_at,
        )


class PostResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    user: int
    text: str
    name: str
    avatar: str
    likes: list[LikeResponse]
    comments: list[CommentResponse]
    created_at: str

    @classmethod
    def from_post(cls, post: Post) -> "PostResponse":
        return cls(
            id=post.id,
            user=post.user_id,
            text=post.text,
            name=post.name,
            avatar=post.avatar,
            likes=[LikeResponse.from_like(lk) for lk in post.likes],
            comments=[CommentResponse.from_comment(c) for c in post.comments],
            created_at=post.created_at,
        )


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
