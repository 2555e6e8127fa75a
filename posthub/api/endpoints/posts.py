"""
Post management endpoints.

Reads are public. Create, update and delete require the admin password in
the request body on every call.
"""
from typing import List, Optional, Tuple
from fastapi import APIRouter, Body, Depends, File, Form, UploadFile
import time
from posthub.api.deps import (
    get_admin_gate, get_image_store, get_post_repository, get_request_id, get_settings,
)
from posthub.config import Settings
from posthub.errors import PostHubError, StorageError, ValidationError
from posthub.models.schemas.posts import (
    DeleteRequest, ErrorResponse, PostFields, PostMutationResponse, PostRead, SuccessResponse,
)
from posthub.services import AdminGate, ImageStore, PostRepository
from posthub.services.normalizer import to_api
from posthub.services.post_repository import require_post_text
from posthub.utils import get_logger, log_business_event, log_performance

router = APIRouter()
logger = get_logger(__name__)

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Missing title/content"},
    401: {"model": ErrorResponse, "description": "Wrong or missing admin password"},
    500: {"model": ErrorResponse, "description": "Storage failure"},
}

def _real_uploads(images: Optional[List[UploadFile]]) -> List[UploadFile]:
    # Browsers may send an empty part for an untouched file input
    return [f for f in (images or []) if f.filename]

def _read_uploads(uploads: List[UploadFile]) -> List[Tuple[bytes, Optional[str]]]:
    # Handlers are sync (threadpool), so read the spooled file directly
    return [(upload.file.read(), upload.filename) for upload in uploads]

def _check_upload_count(uploads: List[UploadFile], settings: Settings) -> None:
    if len(uploads) > settings.max_upload_files:
        raise ValidationError(f"At most {settings.max_upload_files} images per post")

def _discard_if_configured(store: ImageStore, paths: List[str], settings: Settings, request_id: str) -> None:
    if paths and settings.cleanup_orphan_uploads:
        removed = store.discard(paths)
        logger.info("Orphaned uploads removed", removed=removed, request_id=request_id)
    elif paths:
        logger.warning("Uploads left without a post", paths=paths, request_id=request_id)

@router.get(
    "",
    response_model=List[PostRead],
    summary="List posts",
    description="All posts, newest first"
)
def list_posts(
    request_id: str = Depends(get_request_id),
    repo: PostRepository = Depends(get_post_repository)
) -> List[PostRead]:
    start_time = time.time()
    posts = [to_api(row) for row in repo.list()]

    log_performance(
        operation="list_posts",
        duration_ms=(time.time() - start_time) * 1000,
        additional_data={"post_count": len(posts)}
    )
    logger.debug("Posts listed", post_count=len(posts), request_id=request_id)
    return posts

@router.post(
    "",
    response_model=PostMutationResponse,
    summary="Create post",
    description="Create a post with up to 10 images (admin password required)",
    responses=_ERROR_RESPONSES
)
def create_post(
    admin_password: Optional[str] = Form(None, alias="adminPassword"),
    title: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    affiliate_link: Optional[str] = Form(None, alias="affiliateLink"),
    images: Optional[List[UploadFile]] = File(None),
    request_id: str = Depends(get_request_id),
    settings: Settings = Depends(get_settings),
    gate: AdminGate = Depends(get_admin_gate),
    store: ImageStore = Depends(get_image_store),
    repo: PostRepository = Depends(get_post_repository)
) -> PostMutationResponse:
    """Create a new post."""
    start_time = time.time()
    uploads = _real_uploads(images)

    logger.info(
        "Post creation started",
        image_count=len(uploads),
        request_id=request_id
    )

    gate.require(admin_password)
    fields = PostFields(title=title, category=category, content=content, affiliate_link=affiliate_link)
    require_post_text(fields)
    _check_upload_count(uploads, settings)

    stored: List[str] = []
    try:
        stored = store.store_many(_read_uploads(uploads))
        post = repo.create(fields, stored)
    except PostHubError:
        _discard_if_configured(store, stored, settings, request_id)
        raise
    except Exception as e:
        logger.error(
            "Post creation failed with unexpected error",
            error=str(e),
            request_id=request_id,
            exc_info=True
        )
        _discard_if_configured(store, stored, settings, request_id)
        raise StorageError(f"Post creation failed: {e}") from e

    log_business_event(
        event_type="post_created",
        details={"post_id": post.id, "image_count": len(stored)},
        request_id=request_id
    )
    log_performance(
        operation="create_post",
        duration_ms=(time.time() - start_time) * 1000,
        additional_data={"post_id": post.id}
    )

    return PostMutationResponse(success=True, post=to_api(post))

@router.put(
    "/{post_id}",
    response_model=PostMutationResponse,
    summary="Update post",
    description="Overwrite a post's text fields; images are replaced only when new files are sent",
    responses={**_ERROR_RESPONSES, 404: {"model": ErrorResponse, "description": "Unknown post id"}}
)
def update_post(
    post_id: int,
    admin_password: Optional[str] = Form(None, alias="adminPassword"),
    title: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    affiliate_link: Optional[str] = Form(None, alias="affiliateLink"),
    images: Optional[List[UploadFile]] = File(None),
    request_id: str = Depends(get_request_id),
    settings: Settings = Depends(get_settings),
    gate: AdminGate = Depends(get_admin_gate),
    store: ImageStore = Depends(get_image_store),
    repo: PostRepository = Depends(get_post_repository)
) -> PostMutationResponse:
    """Update an existing post."""
    start_time = time.time()
    uploads = _real_uploads(images)

    logger.info(
        "Post update started",
        post_id=post_id,
        image_count=len(uploads),
        request_id=request_id
    )

    gate.require(admin_password)
    fields = PostFields(title=title, category=category, content=content, affiliate_link=affiliate_link)
    require_post_text(fields)
    _check_upload_count(uploads, settings)

    # 404 before any upload is written
    repo.get(post_id)

    stored: List[str] = []
    try:
        stored = store.store_many(_read_uploads(uploads))
        post = repo.update(post_id, fields, stored)
    except PostHubError:
        _discard_if_configured(store, stored, settings, request_id)
        raise
    except Exception as e:
        logger.error(
            "Post update failed with unexpected error",
            error=str(e),
            post_id=post_id,
            request_id=request_id,
            exc_info=True
        )
        _discard_if_configured(store, stored, settings, request_id)
        raise StorageError(f"Post update failed: {e}") from e

    log_business_event(
        event_type="post_updated",
        details={"post_id": post_id, "images_replaced": bool(stored)},
        request_id=request_id
    )
    log_performance(
        operation="update_post",
        duration_ms=(time.time() - start_time) * 1000,
        additional_data={"post_id": post_id}
    )

    return PostMutationResponse(success=True, post=to_api(post))

@router.delete(
    "/{post_id}",
    response_model=SuccessResponse,
    summary="Delete post",
    description="Permanently delete a post (admin password required)",
    responses={
        401: _ERROR_RESPONSES[401],
        404: {"model": ErrorResponse, "description": "Unknown post id"},
        500: _ERROR_RESPONSES[500],
    }
)
def delete_post(
    post_id: int,
    payload: Optional[DeleteRequest] = Body(None),
    request_id: str = Depends(get_request_id),
    gate: AdminGate = Depends(get_admin_gate),
    repo: PostRepository = Depends(get_post_repository)
) -> SuccessResponse:
    """Delete a post."""
    logger.info("Post deletion started", post_id=post_id, request_id=request_id)

    gate.require(payload.admin_password if payload else None)
    repo.delete(post_id)

    log_business_event(
        event_type="post_deleted",
        details={"post_id": post_id},
        request_id=request_id
    )
    return SuccessResponse(success=True)
