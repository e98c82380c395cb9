"""
Video metadata and upload endpoints
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile

from tubely.errors import AuthFailure, ValidationFailure, VideoNotFound
from tubely.models.upload import UploadSession
from tubely.models.video import Video, VideoCreate
from tubely.services.auth import get_bearer_token, validate_access_token
from tubely.services.container import ServiceContainer
from tubely.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/api", tags=["videos"])


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_current_user_id(request: Request, services: ServiceContainer = Depends(get_services)) -> uuid.UUID:
    token = get_bearer_token(request.headers)
    return validate_access_token(token, services.token_secret)


def parse_video_id(value: str) -> uuid.UUID:
    try:
        return uuid.UUID(value)
    except ValueError:
        raise ValidationFailure("Invalid ID", error_code="INVALID_ID")


def with_access_url(video: Video, services: ServiceContainer) -> Video:
    """Copy of the record with its stored descriptor resolved to a fetchable URL"""
    if video.video_url is None:
        return video
    resolved = video.model_copy()
    resolved.video_url = services.publisher.resolve_stored(video.video_url)
    return resolved


@router.post("/videos", response_model=Video, status_code=201)
def create_video(
    payload: VideoCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    services: ServiceContainer = Depends(get_services),
):
    """Create a draft video record owned by the caller"""
    video = Video(user_id=user_id, title=payload.title, description=payload.description)
    services.repository.create(video)
    logger.info(f"Created video {video.id} for user {user_id}")
    return video


@router.get("/videos", response_model=List[Video])
def list_videos(
    user_id: uuid.UUID = Depends(get_current_user_id),
    services: ServiceContainer = Depends(get_services),
):
    return [with_access_url(v, services) for v in services.repository.list_for_user(user_id)]


@router.get("/videos/{video_id}", response_model=Video)
def get_video(
    video_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    services: ServiceContainer = Depends(get_services),
):
    video = services.repository.get(parse_video_id(video_id))
    if video is None:
        raise VideoNotFound("Video not found")
    if video.user_id != user_id:
        raise AuthFailure("Unauthorized user for video")
    return with_access_url(video, services)


@router.post("/video_upload/{video_id}", response_model=Video)
def upload_video(
    video_id: str,
    video: Optional[UploadFile] = File(None),
    user_id: uuid.UUID = Depends(get_current_user_id),
    services: ServiceContainer = Depends(get_services),
):
    """Process an MP4 upload for fast start and publish it"""
    parsed_id = parse_video_id(video_id)
    if video is None:
        raise ValidationFailure("Unable to parse form file", error_code="MISSING_FILE")

    session = UploadSession(
        video_id=parsed_id,
        user_id=user_id,
        stream=video.file,
        filename=video.filename or "",
        content_type=video.content_type or "",
        size=video.size,
    )
    return services.pipeline.run(session)


@router.post("/thumbnail_upload/{video_id}", response_model=Video)
def upload_thumbnail(
    video_id: str,
    thumbnail: Optional[UploadFile] = File(None),
    user_id: uuid.UUID = Depends(get_current_user_id),
    services: ServiceContainer = Depends(get_services),
):
    parsed_id = parse_video_id(video_id)
    if thumbnail is None:
        raise ValidationFailure("Unable to parse form file", error_code="MISSING_FILE")

    video = services.thumbnails.upload(
        parsed_id,
        user_id,
        thumbnail.file,
        thumbnail.filename or "",
        thumbnail.content_type or "",
    )
    return with_access_url(video, services)
