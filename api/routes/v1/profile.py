"""
api/routes/v1/profile.py -- Developer profile routes.

Routes:
  GET    /profile/me                      -- own profile (token)
  POST   /profile                         -- create or update own profile (token)
  GET    /profile                         -- all profiles (public)
  GET    /profile/user/{user_id}          -- one user's profile (public)
  DELETE /profile                         -- delete own account, profile and posts (token)
  PUT    /profile/experience              -- add experience (token)
  DELETE /profile/experience/{exp_id}     -- remove own experience (token)
  PUT    /profile/education               -- add education (token)
  DELETE /profile/education/{edu_id}      -- remove own education (token)
  GET    /profile/github/{username}       -- recent public GitHub repos (public)

Ownership: every mutating route here is keyed on identity.subject, so a
caller can only ever reach their own profile. The experience/education
deletes additionally match the owner inside the store's WHERE clause.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError

from api.models import (
    EducationCreate,
    ExperienceCreate,
    MessageResponse,
    ProfileResponse,
    ProfileUpsert,
)
from auth.dependencies import get_identity
from auth.models import AuthenticatedIdentity
from auth.store import UserStore
from core.config import get_settings
from social.github import fetch_user_repos
from social.models import Education, Experience, Profile
from social.store import SocialStore

logger = logging.getLogger("devconnector.api")

router = APIRouter()


def _no_profile() -> HTTPException:
    return HTTPException(status_code=400, detail={"msg": "There is no profile for this user"})


def _to_response(request: Request, profile: Profile) -> ProfileResponse:
    user_store: UserStore = request.app.state.user_store
    return ProfileResponse.from_profile(profile, user_store.get_by_id(profile.user_id))


# ---------------------------------------------------------------------------
# Own profile (authenticated)
# ---------------------------------------------------------------------------


@router.get("/profile/me", response_model=ProfileResponse)
def my_profile(request: Request, identity: AuthenticatedIdentity = Depends(get_identity)) -> ProfileResponse:
    """Return the caller's profile with their name and avatar embedded."""
    social: SocialStore = request.app.state.social
    profile = social.get_profile_by_user(identity.subject)
    if profile is None:
        raise _no_profile()
    return _to_response(request, profile)


@router.post("/profile", response_model=ProfileResponse)
def upsert_profile(
    request: Request,
    body: ProfileUpsert,
    identity: AuthenticatedIdentity = Depends(get_identity),
) -> ProfileResponse:
    """Create the caller's profile, or update it if it already exists.

    Optional fields left out of the body keep their stored value; skills and
    social links are replaced by what was sent.
    """
    social: SocialStore = request.app.state.social
    profile = social.upsert_profile(
        Profile(
            user_id=identity.subject,
            status=body.status,
            skills=body.skill_list(),
            company=body.company,
            website=body.website,
            location=body.location,
            bio=body.bio,
            githubusername=body.githubusername,
            social=body.social_links(),
        )
    )
    return _to_response(request, profile)


@router.delete("/profile", response_model=MessageResponse)
def delete_account(request: Request, identity: AuthenticatedIdentity = Depends(get_identity)) -> MessageResponse:
    """Delete the caller's posts, comments, likes, profile and account.

    Content and account live in separate databases with no shared
    transaction. Content is removed first; if the account delete then fails,
    the account survives without content and the error is logged and
    re-raised. Repeating the request finishes the job.
    """
    social: SocialStore = request.app.state.social
    user_store: UserStore = request.app.state.user_store
    removed = social.delete_user_content(identity.subject)
    try:
        user_store.delete_user(identity.subject)
    except SQLAlchemyError:
        logger.exception("Removed content of user %d but the account delete failed", identity.subject)
        raise
    logger.info("Deleted user %d (%d posts)", identity.subject, removed)
    return MessageResponse(msg="User deleted")


@router.put("/profile/experience", response_model=ProfileResponse)
def add_experience(
    request: Request,
    body: ExperienceCreate,
    identity: AuthenticatedIdentity = Depends(get_identity),
) -> ProfileResponse:
    social: SocialStore = request.app.state.social
    profile = social.add_experience(
        identity.subject,
        Experience(
            title=body.title,
            company=body.company,
            location=body.location,
            from_date=body.from_date,
            to_date=body.to_date,
            current=body.current,
            description=body.description,
        ),
    )
    if profile is None:
        raise _no_profile()
    return _to_response(request, profile)


@router.delete("/profile/experience/{exp_id}", response_model=ProfileResponse)
def delete_experience(
    request: Request,
    exp_id: int,
    identity: AuthenticatedIdentity = Depends(get_identity),
) -> ProfileResponse:
    social: SocialStore = request.app.state.social
    if not social.delete_experience(identity.subject, exp_id):
        raise HTTPException(status_code=404, detail={"msg": "Experience not found"})
    return _to_response(request, social.get_profile_by_user(identity.subject))


@router.put("/profile/education", response_model=ProfileResponse)
def add_education(
    request: Request,
    body: EducationCreate,
    identity: AuthenticatedIdentity = Depends(get_identity),
) -> ProfileResponse:
    social: SocialStore = request.app.state.social
    profile = social.add_education(
        identity.subject,
        Education(
            school=body.school,
            degree=body.degree,
            fieldofstudy=body.fieldofstudy,
            from_date=body.from_date,
            to_date=body.to_date,
            current=body.current,
            description=body.description,
        ),
    )
    if profile is None:
        raise _no_profile()
    return _to_response(request, profile)


@router.delete("/profile/education/{edu_id}", response_model=ProfileResponse)
def delete_education(
    request: Request,
    edu_id: int,
    identity: AuthenticatedIdentity = Depends(get_identity),
) -> ProfileResponse:
    social: SocialStore = request.app.state.social
    if not social.delete_education(identity.subject, edu_id):
        raise HTTPException(status_code=404, detail={"msg": "Education not found"})
    return _to_response(request, social.get_profile_by_user(identity.subject))


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------


@router.get("/profile", response_model=list[ProfileResponse])
def list_profiles(request: Request) -> list[ProfileResponse]:
    social: SocialStore = request.app.state.social
    user_store: UserStore = request.app.state.user_store
    profiles = social.list_profiles()
    owners = user_store.get_many({p.user_id for p in profiles})
    return [ProfileResponse.from_profile(p, owners.get(p.user_id)) for p in profiles]


@router.get("/profile/user/{user_id}", response_model=ProfileResponse)
def profile_by_user(request: Request, user_id: int) -> ProfileResponse:
    social: SocialStore = request.app.state.social
    profile = social.get_profile_by_user(user_id)
    if profile is None:
        raise HTTPException(status_code=400, detail={"msg": "Profile not found"})
    return _to_response(request, profile)


@router.get("/profile/github/{username}")
def github_repos(username: str) -> list[dict]:
    """Proxy the user's most recent public GitHub repositories."""
    settings = get_settings()
    repos = fetch_user_repos(
        username,
        count=settings.github_repo_count,
        token=settings.github_token.get_secret_value() or None,
    )
    if repos is None:
        raise HTTPException(status_code=404, detail={"msg": "No GitHub profile found"})
    return repos
