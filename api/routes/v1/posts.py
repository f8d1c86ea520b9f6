"""
api/routes/v1/posts.py -- Feed routes: posts, likes and comments.

Routes (all require a token):
  POST   /posts                                -- create post
  GET    /posts                                -- all posts, newest first
  GET    /posts/{post_id}                      -- one post
  DELETE /posts/{post_id}                      -- delete own post
  PUT    /posts/like/{post_id}                 -- like
  PUT    /posts/unlike/{post_id}               -- unlike
  POST   /posts/comment/{post_id}              -- add comment
  DELETE /posts/comment/{post_id}/{comment_id} -- delete own comment

Ownership: post and comment deletes call require_owner() before touching the
store. A mismatch raises Forbidden, which the app maps to 403 and the store
is never called.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from api.models import CommentResponse, LikeResponse, MessageResponse, PostResponse, TextBody
from auth.dependencies import get_identity
from auth.models import AuthenticatedIdentity, User
from auth.permissions import require_owner
from auth.store import UserStore
from social.models import Comment, Post
from social.store import SocialStore

logger = logging.getLogger("devconnector.api")

# Router-level dependency applies the access guard to every route below.
router = APIRouter(dependencies=[Depends(get_identity)])


def _post_not_found() -> HTTPException:
    return HTTPException(status_code=404, detail={"msg": "Post not found"})


def _author(request: Request, identity: AuthenticatedIdentity) -> User:
    """Load the caller's account for the name/avatar snapshot."""
    user_store: UserStore = request.app.state.user_store
    user = user_store.get_by_id(identity.subject)
    if user is None:
        raise HTTPException(status_code=404, detail={"msg": "User not found"})
    return user


def _require_post(social: SocialStore, post_id: int) -> Post:
    post = social.get_post(post_id)
    if post is None:
        raise _post_not_found()
    return post


# ---------------------------------------------------------------------------
# Posts
# ---------------------------------------------------------------------------


@router.post("/posts", response_model=PostResponse)
def create_post(
    request: Request,
    body: TextBody,
    identity: AuthenticatedIdentity = Depends(get_identity),
) -> PostResponse:
    social: SocialStore = request.app.state.social
    author = _author(request, identity)
    post_id = social.create_post(Post(user_id=author.id, text=body.text, name=author.name, avatar=author.avatar))
    return PostResponse.from_post(social.get_post(post_id))


@router.get("/posts", response_model=list[PostResponse])
def list_posts(request: Request) -> list[PostResponse]:
    social: SocialStore = request.app.state.social
    return [PostResponse.from_post(p) for p in social.list_posts()]


@router.get("/posts/{post_id}", response_model=PostResponse)
def get_post(request: Request, post_id: int) -> PostResponse:
    social: SocialStore = request.app.state.social
    return PostResponse.from_post(_require_post(social, post_id))


@router.delete("/posts/{post_id}", response_model=MessageResponse)
def delete_post(
    request: Request,
    post_id: int,
    identity: AuthenticatedIdentity = Depends(get_identity),
) -> MessageResponse:
    """Delete a post. Only its author may do this."""
    social: SocialStore = request.app.state.social
    post = _require_post(social, post_id)
    require_owner(identity, post.user_id)
    social.delete_post(post_id)
    logger.info("Post %d removed by user %d", post_id, identity.subject)
    return MessageResponse(msg="Post removed")


# ---------------------------------------------------------------------------
# Likes
# ---------------------------------------------------------------------------


@router.put("/posts/like/{post_id}", response_model=list[LikeResponse])
def like_post(
    request: Request,
    post_id: int,
    identity: AuthenticatedIdentity = Depends(get_identity),
) -> list[LikeResponse]:
    social: SocialStore = request.app.state.social
    _require_post(social, post_id)
    if not social.add_like(post_id, identity.subject):
        raise HTTPException(status_code=400, detail={"msg": "Post already liked"})
    return [LikeResponse.from_like(lk) for lk in social.get_likes(post_id)]


@router.put("/posts/unlike/{post_id}", response_model=list[LikeResponse])
def unlike_post(
    request: Request,
    post_id: int,
    identity: AuthenticatedIdentity = Depends(get_identity),
) -> list[LikeResponse]:
    social: SocialStore = request.app.state.social
    _require_post(social, post_id)
    if not social.remove_like(post_id, identity.subject):
        raise HTTPException(status_code=400, detail={"msg": "Post has not yet been liked"})
    return [LikeResponse.from_like(lk) for lk in social.get_likes(post_id)]


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------


@router.post("/posts/comment/{post_id}", response_model=list[CommentResponse])
def add_comment(
    request: Request,
    post_id: int,
    body: TextBody,
    identity: AuthenticatedIdentity = Depends(get_identity),
) -> list[CommentResponse]:
    social: SocialStore = request.app.state.social
    _require_post(social, post_id)
    author = _author(request, identity)
    social.add_comment(
        Comment(post_id=post_id, user_id=author.id, text=body.text, name=author.name, avatar=author.avatar)
    )
    return [CommentResponse.from_comment(c) for c in social.get_comments(post_id)]


@router.delete("/posts/comment/{post_id}/{comment_id}", response_model=list[CommentResponse])
def delete_comment(
    request: Request,
    post_id: int,
    comment_id: int,
    identity: AuthenticatedIdentity = Depends(get_identity),
) -> list[CommentResponse]:
    """Delete one comment. Only the comment's author may do this."""
    social: SocialStore = request.app.state.social
    _require_post(social, post_id)
    comment = social.get_comment(post_id, comment_id)
    if comment is None:
        raise HTTPException(status_code=404, detail={"msg": "Comment does not exist"})
    require_owner(identity, comment.user_id)
    social.delete_comment(comment_id)
    return [CommentResponse.from_comment(c) for c in social.get_comments(post_id)]
