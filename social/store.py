"""
social/store.py -- SQLAlchemy-backed persistence for profiles and posts.

Uses SQLAlchemy Core (not ORM) so the dataclasses in social/models.py remain
the authoritative domain representation. Swapping SQLite for PostgreSQL is a
connection string change, not a rewrite.

Pattern: Repository + Data Mapper. SocialStore is the repository; the
_row_to_* functions are the mappers. Route handlers never touch SQL directly.

Ownership: the store does not decide who may delete what. Routes call
auth.permissions.require_owner() first. The exceptions are the profile
sub-records (experience, education): their delete methods take the caller's
user_id and match it in the WHERE clause, so a guessed id from someone
else's profile simply matches nothing.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = SocialStore()                               # SQLite default
    store = SocialStore("postgresql://user:pw@host/db") # PostgreSQL
    post_id = store.create_post(Post(user_id=1, text="hello"))
    store.add_like(post_id, user_id=2)
    store.close()
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean,
    Column,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    func,
    select,
)
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError

from core.db import make_engine
from social.models import Comment, Education, Experience, Like, Post, Profile

logger = logging.getLogger("devconnector.social")

_DEFAULT_DB_URL = "sqlite:///devconnector_social.db"

# Scalar profile columns a caller may set through upsert_profile().
_PROFILE_FIELDS = ("status", "company", "website", "location", "bio", "githubusername")

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_profiles = Table(
    "profiles",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, nullable=False, unique=True),
    Column("status", String(100), nullable=False),
    Column("skills", Text, nullable=False, server_default="[]"),  # JSON array
    Column("company", String(255)),
    Column("website", String(255)),
    Column("location", String(255)),
    Column("bio", Text),
    Column("githubusername", String(100)),
    Column("social", Text, nullable=False, server_default="{}"),  # JSON object
    Column("created_at", String(32), nullable=False),
)

_experience = Table(
    "experience",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("profile_id", Integer, nullable=False),
    Column("title", String(255), nullable=False),
    Column("company", String(255), nullable=False),
    Column("location", String(255)),
    Column("from_date", String(32), nullable=False),
    Column("to_date", String(32)),
    Column("current", Boolean, nullable=False, server_default="0"),
    Column("description", Text),
)

_education = Table(
    "education",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("profile_id", Integer, nullable=False),
    Column("school", String(255), nullable=False),
    Column("degree", String(255), nullable=False),
    Column("fieldofstudy", String(255), nullable=False),
    Column("from_date", String(32), nullable=False),
    Column("to_date", String(32)),
    Column("current", Boolean, nullable=False, server_default="0"),
    Column("description", Text),
)

_posts = Table(
    "posts",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("user_id", Integer, nullable=False),
    Column("text", Text, nullable=False),
    Column("name", String(255), nullable=False, server_default=""),
    Column("avatar", Text, nullable=False, server_default=""),
    Column("created_at", String(32), nullable=False),
)

_comments = Table(
    "comments",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("post_id", Integer, nullable=False),
    Column("user_id", Integer, nullable=False),
    Column("text", Text, nullable=False),
    Column("name", String(255), nullable=False, server_default=""),
    Column("avatar", Text, nullable=False, server_default=""),
    Column("created_at", String(32), nullable=False),
)

_likes = Table(
    "likes",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("post_id", Integer, nullable=False),
    Column("user_id", Integer, nullable=False),
    UniqueConstraint("post_id", "user_id", name="uq_post_user_like"),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class SocialStore:
    """Repository for Profile, Experience, Education, Post, Comment and Like."""

    def __init__(self, db_url: str = _DEFAULT_DB_URL) -> None:
        self.engine: Engine = make_engine(db_url)
        metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    def get_profile_by_user(self, user_id: int) -> Optional[Profile]:
        """Return the user's profile with experience and education loaded, or None."""
        with self.engine.connect() as conn:
            row = conn.execute(_profiles.select().where(_profiles.c.user_id == user_id)).fetchone()
            if row is None:
                return None
            return self._load_profile(conn, row)

    def list_profiles(self) -> list[Profile]:
        """Return every profile, oldest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(_profiles.select().order_by(_profiles.c.id)).fetchall()
            return [self._load_profile(conn, r) for r in rows]

    def upsert_profile(self, profile: Profile) -> Profile:
        """Create the user's profile, or update it if one exists.

        On update, scalar fields that are None on `profile` keep their stored
        value. skills and social are replaced wholesale when given.
        """
        values = {name: getattr(profile, name) for name in _PROFILE_FIELDS if getattr(profile, name) is not None}
        values["skills"] = json.dumps(profile.skills)
        values["social"] = json.dumps(profile.social)

        with self.engine.connect() as conn:
            existing = conn.execute(
                select(_profiles.c.id).where(_profiles.c.user_id == profile.user_id)
            ).scalar()
            if existing is None:
                conn.execute(_profiles.insert().values(user_id=profile.user_id, created_at=_now_iso(), **values))
            else:
                conn.execute(_profiles.update().where(_profiles.c.id == existing).values(**values))
            conn.commit()
        return self.get_profile_by_user(profile.user_id)

    def delete_profile(self, user_id: int) -> bool:
        """Delete the user's profile and its experience/education rows."""
        with self.engine.connect() as conn:
            profile_id = conn.execute(select(_profiles.c.id).where(_profiles.c.user_id == user_id)).scalar()
            if profile_id is None:
                return False
            conn.execute(_experience.delete().where(_experience.c.profile_id == profile_id))
            conn.execute(_education.delete().where(_education.c.profile_id == profile_id))
            conn.execute(_profiles.delete().where(_profiles.c.id == profile_id))
            conn.commit()
        return True

    # ------------------------------------------------------------------
    # Experience / education
    # ------------------------------------------------------------------

    def add_experience(self, user_id: int, exp: Experience) -> Optional[Profile]:
        """Attach an experience entry to the user's profile.

        Returns the updated profile, or None if the user has no profile yet.
        """
        return self._add_profile_item(
            user_id,
            _experience,
            title=exp.title,
            company=exp.company,
            location=exp.location,
            from_date=exp.from_date,
            to_date=exp.to_date,
            current=exp.current,
            description=exp.description,
        )

    def delete_experience(self, user_id: int, exp_id: int) -> bool:
        """Remove one experience entry from the user's own profile."""
        return self._delete_profile_item(user_id, _experience, exp_id)

    def add_education(self, user_id: int, edu: Education) -> Optional[Profile]:
        """Attach an education entry to the user's profile (None if no profile)."""
        return self._add_profile_item(
            user_id,
            _education,
            school=edu.school,
            degree=edu.degree,
            fieldofstudy=edu.fieldofstudy,
            from_date=edu.from_date,
            to_date=edu.to_date,
            current=edu.current,
            description=edu.description,
        )

    def delete_education(self, user_id: int, edu_id: int) -> bool:
        """Remove one education entry from the user's own profile."""
        return self._delete_profile_item(user_id, _education, edu_id)

    def _add_profile_item(self, user_id: int, table: Table, **values) -> Optional[Profile]:
        with self.engine.connect() as conn:
            profile_id = conn.execute(select(_profiles.c.id).where(_profiles.c.user_id == user_id)).scalar()
            if profile_id is None:
                return None
            conn.execute(table.insert().values(profile_id=profile_id, **values))
            conn.commit()
        return self.get_profile_by_user(user_id)

    def _delete_profile_item(self, user_id: int, table: Table, item_id: int) -> bool:
        # The owner match is part of the WHERE clause (IDOR guard).
        owned = select(_profiles.c.id).where(_profiles.c.user_id == user_id).scalar_subquery()
        with self.engine.connect() as conn:
            result = conn.execute(table.delete().where((table.c.id == item_id) & (table.c.profile_id == owned)))
            conn.commit()
        return result.rowcount > 0

    def _load_profile(self, conn: Connection, row) -> Profile:
        exp_rows = conn.execute(
            _experience.select().where(_experience.c.profile_id == row.id).order_by(_experience.c.id.desc())
        ).fetchall()
        edu_rows = conn.execute(
            _education.select().where(_education.c.profile_id == row.id).order_by(_education.c.id.desc())
        ).fetchall()
        profile = _row_to_profile(row)
        profile.experience = [_row_to_experience(r) for r in exp_rows]
        profile.education = [_row_to_education(r) for r in edu_rows]
        return profile

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    def create_post(self, post: Post) -> int:
        """Insert a post and return its ID."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _posts.insert().values(
                    user_id=post.user_id,
                    text=post.text,
                    name=post.name,
                    avatar=post.avatar,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def count_posts(self) -> int:
        with self.engine.connect() as conn:
            result = conn.execute(select(func.count()).select_from(_posts)).scalar()
        return result or 0

    def get_post(self, post_id: int) -> Optional[Post]:
        """Return the post with likes and comments loaded, or None."""
        with self.engine.connect() as conn:
            row = conn.execute(_posts.select().where(_posts.c.id == post_id)).fetchone()
            if row is None:
                return None
            return self._load_post(conn, row)

    def list_posts(self) -> list[Post]:
        """Return every post, newest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(_posts.select().order_by(_posts.c.id.desc())).fetchall()
            return [self._load_post(conn, r) for r in rows]

    def delete_post(self, post_id: int) -> bool:
        """Delete a post together with its likes and comments."""
        with self.engine.connect() as conn:
            conn.execute(_likes.delete().where(_likes.c.post_id == post_id))
            conn.execute(_comments.delete().where(_comments.c.post_id == post_id))
            result = conn.execute(_posts.delete().where(_posts.c.id == post_id))
            conn.commit()
        return result.rowcount > 0

    def delete_user_content(self, user_id: int) -> int:
        """Remove everything a user authored: posts (with their likes and
        comments), likes and comments on other posts, and the profile.

        Returns the number of posts removed.
        """
        with self.engine.connect() as conn:
            post_ids = conn.execute(select(_posts.c.id).where(_posts.c.user_id == user_id)).scalars().all()
            if post_ids:
                conn.execute(_likes.delete().where(_likes.c.post_id.in_(post_ids)))
                conn.execute(_comments.delete().where(_comments.c.post_id.in_(post_ids)))
                conn.execute(_posts.delete().where(_posts.c.id.in_(post_ids)))
            conn.execute(_likes.delete().where(_likes.c.user_id == user_id))
            conn.execute(_comments.delete().where(_comments.c.user_id == user_id))
            conn.commit()
        had_profile = self.delete_profile(user_id)
        logger.info(
            "Removed content of user %d: %d posts, profile %s", user_id, len(post_ids), "yes" if had_profile else "none"
        )
        return len(post_ids)

    # ------------------------------------------------------------------
    # Likes
    # ------------------------------------------------------------------

    def add_like(self, post_id: int, user_id: int) -> bool:
        """Record a like. Returns False if this user already liked the post."""
        try:
            with self.engine.connect() as conn:
                conn.execute(_likes.insert().values(post_id=post_id, user_id=user_id))
                conn.commit()
        except IntegrityError:
            logger.debug("Duplicate like ignored (post %d, user %d)", post_id, user_id)
            return False
        return True

    def remove_like(self, post_id: int, user_id: int) -> bool:
        """Remove a like. Returns False if this user had not liked the post."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _likes.delete().where((_likes.c.post_id == post_id) & (_likes.c.user_id == user_id))
            )
            conn.commit()
        return result.rowcount > 0

    def get_likes(self, post_id: int) -> list[Like]:
        with self.engine.connect() as conn:
            return self._likes_for(conn, post_id)

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def add_comment(self, comment: Comment) -> int:
        """Insert a comment and return its ID."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _comments.insert().values(
                    post_id=comment.post_id,
                    user_id=comment.user_id,
                    text=comment.text,
                    name=comment.name,
                    avatar=comment.avatar,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    def get_comment(self, post_id: int, comment_id: int) -> Optional[Comment]:
        """Return the comment only if it belongs to `post_id`."""
        with self.engine.connect() as conn:
            row = conn.execute(
                _comments.select().where((_comments.c.id == comment_id) & (_comments.c.post_id == post_id))
            ).fetchone()
        return _row_to_comment(row) if row is not None else None

    def delete_comment(self, comment_id: int) -> bool:
        with self.engine.connect() as conn:
            result = conn.execute(_comments.delete().where(_comments.c.id == comment_id))
            conn.commit()
        return result.rowcount > 0

    def get_comments(self, post_id: int) -> list[Comment]:
        with self.engine.connect() as conn:
            return self._comments_for(conn, post_id)

    def _likes_for(self, conn: Connection, post_id: int) -> list[Like]:
        rows = conn.execute(_likes.select().where(_likes.c.post_id == post_id).order_by(_likes.c.id.desc())).fetchall()
        return [Like(id=r.id, post_id=r.post_id, user_id=r.user_id) for r in rows]

    def _comments_for(self, conn: Connection, post_id: int) -> list[Comment]:
        rows = conn.execute(
            _comments.select().where(_comments.c.post_id == post_id).order_by(_comments.c.id.desc())
        ).fetchall()
        return [_row_to_comment(r) for r in rows]

    def _load_post(self, conn: Connection, row) -> Post:
        return Post(
            id=row.id,
            user_id=row.user_id,
            text=row.text,
            name=row.name,
            avatar=row.avatar,
            created_at=row.created_at,
            likes=self._likes_for(conn, row.id),
            comments=self._comments_for(conn, row.id),
        )

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_profile(row) -> Profile:
    return Profile(
        id=row.id,
        user_id=row.user_id,
        status=row.status,
        skills=json.loads(row.skills or "[]"),
        company=row.company,
        website=row.website,
        location=row.location,
        bio=row.bio,
        githubusername=row.githubusername,
        social=json.loads(row.social or "{}"),
        created_at=row.created_at,
    )


def _row_to_experience(row) -> Experience:
    return Experience(
        id=row.id,
        profile_id=row.profile_id,
        title=row.title,
        company=row.company,
        location=row.location,
        from_date=row.from_date,
        to_date=row.to_date,
        current=bool(row.current),
        description=row.description,
    )


def _row_to_education(row) -> Education:
    return Education(
        id=row.id,
        profile_id=row.profile_id,
        school=row.school,
        degree=row.degree,
        fieldofstudy=row.fieldofstudy,
        from_date=row.from_date,
        to_date=row.to_date,
        current=bool(row.current),
        description=row.description,
    )


def _row_to_comment(row) -> Comment:
    return Comment(
        id=row.id,
        post_id=row.post_id,
        user_id=row.user_id,
        text=row.text,
        name=row.name,
        avatar=row.avatar,
        created_at=row.created_at,
    )
