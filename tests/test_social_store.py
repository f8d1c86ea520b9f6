"""Unit tests for social/store.py -- profiles, posts, likes and comments.

Covers:
- upsert_profile() creates once, then updates in place keeping omitted fields
- experience/education deletes only match the owner's profile
- likes are unique per (post, user)
- delete_post() and delete_user_content() cascade to dependent rows
"""

import logging

import pytest

from social.models import Comment, Education, Experience, Post, Profile
from social.store import SocialStore


@pytest.fixture
def store():
    s = SocialStore("sqlite:///:memory:")
    yield s
    s.close()


def _profile(user_id=1, **kwargs):
    return Profile(user_id=user_id, status=kwargs.pop("status", "Developer"), skills=["python", "sql"], **kwargs)


class TestProfiles:
    def test_create_then_update(self, store):
        created = store.upsert_profile(_profile(company="Acme", bio="hi"))
        updated = store.upsert_profile(_profile(status="Senior Developer"))
        assert updated.id == created.id
        assert updated.status == "Senior Developer"
        # Omitted scalar fields keep their stored value.
        assert updated.company == "Acme"
        assert updated.bio == "hi"
        assert updated.skills == ["python", "sql"]
        assert len(store.list_profiles()) == 1

    def test_social_links_round_trip(self, store):
        profile = store.upsert_profile(_profile(social={"twitter": "https://twitter.com/ada"}))
        assert profile.social == {"twitter": "https://twitter.com/ada"}

    def test_missing_profile(self, store):
        assert store.get_profile_by_user(42) is None
        assert store.delete_profile(42) is False

    def test_experience_requires_profile(self, store):
        assert store.add_experience(1, Experience(title="Dev", company="Acme", from_date="2020-01-01")) is None

    def test_experience_newest_first(self, store):
        store.upsert_profile(_profile())
        store.add_experience(1, Experience(title="Junior", company="Acme", from_date="2018-01-01"))
        profile = store.add_experience(1, Experience(title="Senior", company="Acme", from_date="2021-01-01"))
        assert [e.title for e in profile.experience] == ["Senior", "Junior"]

    def test_delete_experience_only_from_own_profile(self, store):
        store.upsert_profile(_profile(user_id=1))
        store.upsert_profile(_profile(user_id=2))
        exp_id = store.add_experience(1, Experience(title="Dev", company="Acme", from_date="2020-01-01")).experience[0].id
        assert store.delete_experience(2, exp_id) is False
        assert len(store.get_profile_by_user(1).experience) == 1
        assert store.delete_experience(1, exp_id) is True
        assert store.get_profile_by_user(1).experience == []

    def test_delete_education_only_from_own_profile(self, store):
        store.upsert_profile(_profile(user_id=1))
        store.upsert_profile(_profile(user_id=2))
        edu = Education(school="MIT", degree="BSc", fieldofstudy="CS", from_date="2010-09-01", current=True)
        edu_id = store.add_education(1, edu).education[0].id
        assert store.delete_education(2, edu_id) is False
        assert store.get_profile_by_user(1).education[0].current is True
        assert store.delete_education(1, edu_id) is True

    def test_delete_profile_removes_sub_records(self, store):
        store.upsert_profile(_profile())
        store.add_experience(1, Experience(title="Dev", company="Acme", from_date="2020-01-01"))
        assert store.delete_profile(1) is True
        assert store.get_profile_by_user(1) is None
        store.upsert_profile(_profile())
        assert store.get_profile_by_user(1).experience == []


class TestPosts:
    def test_list_newest_first(self, store):
        first = store.create_post(Post(user_id=1, text="first"))
        second = store.create_post(Post(user_id=1, text="second"))
        assert [p.id for p in store.list_posts()] == [second, first]
        assert store.count_posts() == 2

    def test_like_is_unique_per_user(self, store):
        post_id = store.create_post(Post(user_id=1, text="hello"))
        assert store.add_like(post_id, 2) is True
        assert store.add_like(post_id, 2) is False
        assert store.add_like(post_id, 3) is True
        assert [lk.user_id for lk in store.get_likes(post_id)] == [3, 2]

    def test_unlike(self, store):
        post_id = store.create_post(Post(user_id=1, text="hello"))
        assert store.remove_like(post_id, 2) is False
        store.add_like(post_id, 2)
        assert store.remove_like(post_id, 2) is True
        assert store.get_likes(post_id) == []

    def test_comment_lookup_is_scoped_to_post(self, store):
        p1 = store.create_post(Post(user_id=1, text="one"))
        p2 = store.create_post(Post(user_id=1, text="two"))
        cid = store.add_comment(Comment(post_id=p1, user_id=2, text="nice"))
        assert store.get_comment(p1, cid).text == "nice"
        assert store.get_comment(p2, cid) is None

    def test_delete_comment_removes_only_that_comment(self, store):
        post_id = store.create_post(Post(user_id=1, text="hello"))
        keep = store.add_comment(Comment(post_id=post_id, user_id=2, text="keep"))
        drop = store.add_comment(Comment(post_id=post_id, user_id=2, text="drop"))
        assert store.delete_comment(drop) is True
        assert [c.id for c in store.get_comments(post_id)] == [keep]

    def test_delete_post_cascades(self, store):
        post_id = store.create_post(Post(user_id=1, text="hello"))
        store.add_like(post_id, 2)
        store.add_comment(Comment(post_id=post_id, user_id=2, text="hi"))
        assert store.delete_post(post_id) is True
        assert store.get_post(post_id) is None
        assert store.get_likes(post_id) == []
        assert store.get_comments(post_id) == []

    def test_delete_user_content(self, store):
        store.upsert_profile(_profile(user_id=1))
        own = store.create_post(Post(user_id=1, text="mine"))
        other = store.create_post(Post(user_id=2, text="theirs"))
        store.add_like(other, 1)
        store.add_comment(Comment(post_id=other, user_id=1, text="from 1"))
        store.add_comment(Comment(post_id=other, user_id=2, text="from 2"))

        assert store.delete_user_content(1) == 1

        assert store.get_post(own) is None
        remaining = store.get_post(other)
        assert remaining.likes == []
        assert [c.user_id for c in remaining.comments] == [2]
        assert store.get_profile_by_user(1) is None

    def test_delete_user_content_is_logged(self, store, caplog):
        store.create_post(Post(user_id=3, text="bye"))
        with caplog.at_level(logging.INFO, logger="devconnector.social"):
            store.delete_user_content(3)
        records = [r for r in caplog.records if r.name == "devconnector.social"]
        assert len(records) == 1
        assert "user 3: 1 posts, profile none" in records[0].getMessage()
