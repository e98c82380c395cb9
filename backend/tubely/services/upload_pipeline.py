"""
Video upload pipeline

Stages a request body on disk, probes its geometry, rewrites it for fast start,
publishes it under an orientation-prefixed key and records where it lives.
"""

from enum import Enum
from typing import List, Optional

from tubely.errors import (
    AuthFailure,
    PersistFailure,
    PipelineFailure,
    StagingFailure,
    UploadTooLarge,
    ValidationFailure,
    VideoNotFound,
)
from tubely.models.upload import UploadSession
from tubely.models.video import Video
from tubely.services.media import FastStartRewriter, MediaProber, classify
from tubely.services.publisher import IdFactory, ObjectPublisher, build_object_key, random_object_id
from tubely.services.staging import StagingArea
from tubely.services.video_repository import VideoRepository
from tubely.utils.logger import PerformanceLogger, get_logger

logger = get_logger(__name__)

SUPPORTED_VIDEO_TYPE = "video/mp4"
STAGING_PREFIX = "tubely-upload-"


class PipelineStage(str, Enum):
    RECEIVED = "received"
    STAGED = "staged"
    PROBED = "probed"
    CLASSIFIED = "classified"
    REMUXED = "remuxed"
    PUBLISHED = "published"
    FINALIZED = "finalized"
    FAILED = "failed"


def parse_media_type(content_type: Optional[str]) -> str:
    """Strip parameters from a Content-Type value ("video/mp4; codecs=..." -> "video/mp4")"""
    return (content_type or "").split(";")[0].strip().lower()


class UploadPipeline:
    """Runs one upload session through every stage, in order, exactly once"""

    def __init__(
        self,
        repository: VideoRepository,
        staging: StagingArea,
        prober: MediaProber,
        remuxer: FastStartRewriter,
        publisher: ObjectPublisher,
        max_upload_size: int,
        id_factory: IdFactory = random_object_id,
    ):
        self.repository = repository
        self.staging = staging
        self.prober = prober
        self.remuxer = remuxer
        self.publisher = publisher
        self.max_upload_size = max_upload_size
        self.id_factory = id_factory

    def run(self, session: UploadSession) -> Video:
        """
        Process an upload and return the updated video record

        The returned record's video_url is resolved for immediate use; the
        repository keeps the stable descriptor.

        Raises:
            ValidationFailure: wrong content type, unknown video or oversized body
            AuthFailure: the caller does not own the video
            PipelineFailure: a processing stage failed
        """
        stages: List[PipelineStage] = [PipelineStage.RECEIVED]
        perf = PerformanceLogger(f"upload.{session.video_id}")
        logger.info(f"Uploading video file {session.video_id} by user {session.user_id}")

        try:
            video = self._check_request(session)
            video = self._process(session, video, stages, perf)
        except (ValidationFailure, AuthFailure) as e:
            logger.warning(f"Upload {session.video_id} rejected at {stages[-1].value}: {e}")
            raise
        except PipelineFailure as e:
            stages.append(PipelineStage.FAILED)
            logger.error(f"Upload {session.video_id} failed at {e.stage}: {e}")
            raise

        logger.info(f"Upload {session.video_id} finished: {' -> '.join(s.value for s in stages)}")
        return video

    def _check_request(self, session: UploadSession) -> Video:
        if parse_media_type(session.content_type) != SUPPORTED_VIDEO_TYPE:
            raise ValidationFailure("Incorrect media type for video upload", error_code="INVALID_MIME_TYPE")

        video = self.repository.get(session.video_id)
        if video is None:
            raise VideoNotFound("Video not found")
        if video.user_id != session.user_id:
            raise AuthFailure("Unauthorized user for video")

        if session.size is not None and session.size > self.max_upload_size:
            raise UploadTooLarge(f"Upload exceeds maximum size of {self.max_upload_size} bytes")
        return video

    def _process(self, session: UploadSession, video: Video, stages: List[PipelineStage], perf: PerformanceLogger) -> Video:
        with self.staging.session() as staging:
            perf.start("staging")
            raw = staging.acquire(prefix=STAGING_PREFIX, suffix=".mp4")
            try:
                raw.write_from(session.stream, limit=self.max_upload_size)
            except OSError as e:
                raise StagingFailure("Unable to stage upload", cause=e)
            raw.rewind()
            perf.end(f"{raw.size/(1024*1024):.1f}MB")
            stages.append(PipelineStage.STAGED)

            perf.start("probe")
            geometry = self.prober.probe(raw.path)
            perf.end(f"{geometry.width}x{geometry.height}")
            stages.append(PipelineStage.PROBED)

            orientation = classify(geometry.width, geometry.height)
            key = build_object_key(orientation.value, session.filename, self.id_factory)
            stages.append(PipelineStage.CLASSIFIED)

            raw.rewind()
            perf.start("remux")
            try:
                processed_path = self.remuxer.remux(raw.path)
            finally:
                # ffmpeg may leave a partial output behind on failure
                staging.track(self.remuxer.output_path_for(raw.path))
            staging.track(processed_path)
            perf.end()
            stages.append(PipelineStage.REMUXED)

            perf.start("publish")
            stored = self.publisher.publish(processed_path, key, SUPPORTED_VIDEO_TYPE)
            perf.end(stored.key)
            stages.append(PipelineStage.PUBLISHED)

        return self._finalize(video, stored.key, stages)

    def _finalize(self, video: Video, key: str, stages: List[PipelineStage]) -> Video:
        descriptor = self.publisher.describe(key)
        video.video_url = descriptor.serialize()
        try:
            self.repository.update(video)
        except Exception as e:
            if not self.publisher.discard(key):
                logger.warning(f"Orphaned object left in store: {key}")
            raise PersistFailure("Unable to update video metadata", cause=e)
        stages.append(PipelineStage.FINALIZED)

        video.video_url = self.publisher.resolve(descriptor)
        return video
