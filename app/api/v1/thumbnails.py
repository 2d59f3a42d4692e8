import logging
import os
import shutil
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile
from starlette.formparsers import MultiPartException
from app.api.deps import authenticate, read_multipart_form, require_video_id
from app.core.config import Settings, get_settings
from app.database import get_db
from app.schemas.video import VideoResponse
from app.services.video_service import get_video, update_video
from app.utils.validators import extension_for_content_type

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/{video_id}/thumbnail", response_model=VideoResponse)
async def upload_thumbnail(
    video_id: str,
    request: Request,
    config: Settings = Depends(get_settings),
    db: Session = Depends(get_db)
):
    video_uuid = require_video_id(video_id)
    user_id = authenticate(request.headers, config)

    logger.info(f"uploading thumbnail for video {video_uuid} by user {user_id}")

    try:
        form = await read_multipart_form(request, config.MAX_THUMBNAIL_SIZE)
    except MultiPartException as e:
        logger.warning(f"Unable to parse thumbnail form: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Unable to parse form"
        )

    try:
        file = form.get("thumbnail")
        if not isinstance(file, UploadFile):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Unable to parse form file"
            )

        try:
            video = get_video(db, video_uuid)
        except Exception as e:
            logger.error(f"Couldn't get video {video_uuid}: {e}", exc_info=True)
            video = None
        # Missing records are reported as 401, not 404
        if video is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Couldn't get video"
            )
        if video.user_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="User is not video owner"
            )

        extension = extension_for_content_type(file.content_type)
        if not extension:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid file extension"
            )

        filename = f"{video_uuid}{extension}"
        try:
            os.makedirs(config.ASSETS_ROOT, exist_ok=True)
            with open(os.path.join(config.ASSETS_ROOT, filename), "wb") as buffer:
                shutil.copyfileobj(file.file, buffer)
        except OSError as e:
            logger.error(f"Error writing thumbnail {filename}: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error writing file"
            )
    finally:
        await form.close()

    video.thumbnail_url = f"/assets/{filename}"
    try:
        video = update_video(db, video)
    except Exception as e:
        logger.error(f"Couldn't update video {video_uuid}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Couldn't update video"
        )

    return video
