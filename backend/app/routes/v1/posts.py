# backend/app/routes/v1/posts.py
"""
Trade post routes - API v1

Versioned post endpoints under /api/v1/posts and /api/v1/users.
All business logic delegated to PostLifecycleService.

Endpoints:
    POST   /posts                       -> Create a post
    GET    /posts                       -> Public listing (private posts hidden)
    GET    /posts/my                    -> Caller's posts, any status
    GET    /posts/{post_id}             -> Post detail
    PUT    /posts/{post_id}             -> Edit text of an active or private post
    POST   /posts/{post_id}/private     -> Hide an active post
    POST   /posts/{post_id}/republish   -> Make a private post active again
    DELETE /posts/{post_id}             -> Delete an active post
    GET    /users/{user_id}/active-posts -> Counter-post candidates for offers
"""

import asyncio
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Response, status

from ...api.dependencies.auth import get_current_user, get_current_user_optional
from ...api.dependencies.services import get_post_lifecycle_service
from ...core.constants import ULID_PATH_PATTERN
from ...core.enums import PostStatus
from ...core.exceptions import DomainException
from ...errors import handle_domain_exception
from ...models.trade_post import TradePost
from ...models.user import User
from ...schemas.post import PostCreate, PostListResponse, PostResponse, PostUpdate
from ...services.post_lifecycle_service import PostLifecycleService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["posts-v1"])


def _to_list(posts: List[TradePost]) -> PostListResponse:
    return PostListResponse(
        posts=[PostResponse.model_validate(p) for p in posts],
        count=len(posts),
    )


@router.post("/posts", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    payload: PostCreate,
    current_user: User = Depends(get_current_user),
    service: PostLifecycleService = Depends(get_post_lifecycle_service),
) -> PostResponse:
    """Create an active give/want listing owned by the caller."""
    try:
        post = await asyncio.to_thread(
            service.create_post,
            owner_id=current_user.id,
            give_description=payload.give_description,
            want_description=payload.want_description,
            description=payload.description,
            location_name=payload.location_name,
            event_id=payload.event_id,
            zone_code=payload.zone_code,
        )
    except DomainException as exc:
        handle_domain_exception(exc)
    return PostResponse.model_validate(post)


@router.get("/posts", response_model=PostListResponse)
async def list_posts(
    status_filter: Optional[PostStatus] = Query(None, alias="status"),
    event_id: Optional[str] = Query(None, max_length=64),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    service: PostLifecycleService = Depends(get_post_lifecycle_service),
) -> PostListResponse:
    posts = await asyncio.to_thread(
        service.list_posts, status=status_filter, event_id=event_id, limit=limit, offset=offset
    )
    return _to_list(posts)


@router.get("/posts/my", response_model=PostListResponse)
async def list_my_posts(
    current_user: User = Depends(get_current_user),
    service: PostLifecycleService = Depends(get_post_lifecycle_service),
) -> PostListResponse:
    posts = await asyncio.to_thread(service.list_user_posts, current_user.id)
    return _to_list(posts)


@router.get("/posts/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user: Optional[User] = Depends(get_current_user_optional),
    service: PostLifecycleService = Depends(get_post_lifecycle_service),
) -> PostResponse:
    try:
        post = await asyncio.to_thread(
            service.get_visible_post, post_id, current_user.id if current_user else None
        )
    except DomainException as exc:
        handle_domain_exception(exc)
    return PostResponse.model_validate(post)


@router.put("/posts/{post_id}", response_model=PostResponse)
async def update_post(
    payload: PostUpdate,
    post_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user: User = Depends(get_current_user),
    service: PostLifecycleService = Depends(get_post_lifecycle_service),
) -> PostResponse:
    try:
        post = await asyncio.to_thread(
            service.update_post,
            post_id,
            current_user.id,
            give_description=payload.give_description,
            want_description=payload.want_description,
            description=payload.description,
            location_name=payload.location_name,
        )
    except DomainException as exc:
        handle_domain_exception(exc)
    return PostResponse.model_validate(post)


@router.post("/posts/{post_id}/private", response_model=PostResponse)
async def set_post_private(
    post_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user: User = Depends(get_current_user),
    service: PostLifecycleService = Depends(get_post_lifecycle_service),
) -> PostResponse:
    try:
        post = await asyncio.to_thread(service.set_private, post_id, current_user.id)
    except DomainException as exc:
        handle_domain_exception(exc)
    return PostResponse.model_validate(post)


@router.post("/posts/{post_id}/republish", response_model=PostResponse)
async def republish_post(
    post_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user: User = Depends(get_current_user),
    service: PostLifecycleService = Depends(get_post_lifecycle_service),
) -> PostResponse:
    try:
        post = await asyncio.to_thread(service.republish, post_id, current_user.id)
    except DomainException as exc:
        handle_domain_exception(exc)
    return PostResponse.model_validate(post)


@router.delete("/posts/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(
    post_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user: User = Depends(get_current_user),
    service: PostLifecycleService = Depends(get_post_lifecycle_service),
) -> Response:
    try:
        await asyncio.to_thread(service.delete, post_id, current_user.id)
    except DomainException as exc:
        handle_domain_exception(exc)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/users/{user_id}/active-posts", response_model=PostListResponse)
async def list_active_posts_for_user(
    user_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    service: PostLifecycleService = Depends(get_post_lifecycle_service),
) -> PostListResponse:
    """Active posts of a user; the ones they can still put up in an offer."""
    posts = await asyncio.to_thread(service.list_active_posts_for_user, user_id)
    return _to_list(posts)
