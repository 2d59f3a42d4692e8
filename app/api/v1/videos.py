import logging
import os
import shutil
import tempfile
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
from starlette.formparsers import MultiPartException
from app.api.deps import authenticate, get_media_tools, get_storage, read_multipart_form, require_video_id
from app.core.config import Settings, get_settings
from app.database import get_db
from app.models.video import Video
from app.schemas.video import VideoResponse
from app.services.storage import S3Storage, public_url
from app.services.video_service import get_video, update_video
from app.utils.validators import parse_media_type
from app.utils.video_processing import MediaToolError, MediaTools, storage_prefix

logger = logging.getLogger(__name__)

router = APIRouter()

MP4_MEDIA_TYPE = "video/mp4"


@router.get("/{video_id}", response_model=VideoResponse)
def read_video(video_id: str, db: Session = Depends(get_db)):
    video_uuid = require_video_id(video_id)
    video = get_video(db, video_uuid)
    if video is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Video not found"
        )
    return video


@router.post("/{video_id}/video")
async def upload_video(
    video_id: str,
    request: Request,
    config: Settings = Depends(get_settings),
    db: Session = Depends(get_db),
    storage: S3Storage = Depends(get_storage),
    media: MediaTools = Depends(get_media_tools)
):
    video_uuid = require_video_id(video_id)
    user_id = authenticate(request.headers, config)

    try:
        video = get_video(db, video_uuid)
    except Exception as e:
        logger.error(f"Couldn't find video {video_uuid}: {e}", exc_info=True)
        video = None
    if video is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Couldn't find video"
        )
    if video.user_id != user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized to update this video"
        )

    logger.info(f"uploading video {video_uuid} by user {user_id}")

    try:
        form = await read_multipart_form(request, config.MAX_VIDEO_SIZE)
    except MultiPartException as e:
        logger.warning(f"Unable to parse video form: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Unable to parse form file"
        )

    try:
        file = form.get("video")
        if not isinstance(file, UploadFile):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Unable to parse form file"
            )

        media_type = parse_media_type(file.content_type)
        if media_type is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid Content-Type"
            )
        if media_type != MP4_MEDIA_TYPE:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid file type, only MP4 is allowed"
            )

        return await run_in_threadpool(
            process_video_upload, file, video, user_id, config, db, storage, media
        )
    finally:
        await form.close()


def process_video_upload(
    file: UploadFile,
    video: Video,
    user_id: UUID,
    config: Settings,
    db: Session,
    storage: S3Storage,
    media: MediaTools
) -> Response:
    """
    Stage, inspect, remux and publish an uploaded mp4.
    Both temp files are removed on every exit path.
    """
    try:
        temp_file = tempfile.NamedTemporaryFile(prefix="tubely-upload", suffix=".mp4", delete=False)
    except OSError as e:
        logger.error(f"Could not create temp file: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not create temp file"
        )

    processed_path = temp_file.name + ".processing"
    try:
        with temp_file:
            try:
                shutil.copyfileobj(file.file, temp_file)
                temp_file.flush()
            except OSError as e:
                logger.error(f"Could not write {temp_file.name}: {e}", exc_info=True)
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail="Could not write file to disk"
                )

            try:
                aspect_ratio = media.get_aspect_ratio(temp_file.name)
            except MediaToolError as e:
                logger.error(f"Couldn't get aspect ratio for video {video.id}: {e}")
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail="Couldn't get aspect ratio"
                )
            prefix = storage_prefix(aspect_ratio)

            # A failed remux ends the request with an empty response and no error body
            try:
                processed_path = media.remux(temp_file.name)
            except MediaToolError as e:
                logger.error(f"Error processing video for fast start: {e}")
                return Response(status_code=status.HTTP_200_OK)

            try:
                processed_file = open(processed_path, "rb")
            except OSError as e:
                logger.error(f"Error opening file: {e}")
                return Response(status_code=status.HTTP_200_OK)

            with processed_file:
                # Rewinds the staged upload; nothing reads it afterwards
                try:
                    temp_file.seek(0)
                except OSError as e:
                    logger.error(f"Could not reset file pointer: {e}", exc_info=True)
                    raise HTTPException(
                        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                        detail="Could not reset file pointer"
                    )

                key = f"{prefix}{user_id}/{video.id}.mp4"
                if not storage.put_object(key, processed_file, MP4_MEDIA_TYPE):
                    raise HTTPException(
                        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                        detail="Error uploading file to S3"
                    )
    finally:
        _remove_quietly(temp_file.name)
        _remove_quietly(processed_path)

    video.video_url = public_url(config.S3_CF_DISTRIBUTION, key)
    try:
        update_video(db, video)
    except Exception as e:
        logger.error(f"Couldn't update video {video.id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Couldn't update video"
        )

    # No body is written on success
    return Response(status_code=status.HTTP_200_OK)


def _remove_quietly(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove temp file {path}: {e}")
