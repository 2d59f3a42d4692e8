from typing import AsyncGenerator, Mapping
from uuid import UUID
from fastapi import Depends, HTTPException, Request, status
from starlette.datastructures import FormData
from starlette.formparsers import MultiPartException, MultiPartParser
from app.core.config import Settings, get_settings
from app.core.security import AuthError, get_bearer_token, validate_jwt
from app.services.storage import S3Storage, build_storage
from app.utils.validators import parse_media_type, parse_video_id
from app.utils.video_processing import MediaTools


class RequestTooLarge(MultiPartException):
    pass


def get_media_tools(config: Settings = Depends(get_settings)) -> MediaTools:
    return MediaTools(
        ffprobe_path=config.FFPROBE_PATH,
        ffmpeg_path=config.FFMPEG_PATH,
        timeout=config.MEDIA_TOOL_TIMEOUT,
    )


def get_storage(config: Settings = Depends(get_settings)) -> S3Storage:
    return build_storage(config.S3_BUCKET, config.S3_REGION, config.S3_ENDPOINT_URL)


def require_video_id(value: str) -> UUID:
    video_id = parse_video_id(value)
    if video_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid ID"
        )
    return video_id


def authenticate(headers: Mapping[str, str], config: Settings) -> UUID:
    """Resolve the caller's user id from the Authorization header"""
    try:
        token = get_bearer_token(headers)
    except AuthError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Couldn't find JWT"
        )

    try:
        return validate_jwt(token, config.JWT_SECRET, config.ALGORITHM)
    except AuthError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Couldn't validate JWT"
        )


async def _limited_stream(request: Request, max_size: int) -> AsyncGenerator[bytes, None]:
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > max_size:
            raise RequestTooLarge(f"request body exceeds {max_size} bytes")
        yield chunk


async def read_multipart_form(request: Request, max_size: int) -> FormData:
    """
    Parse a multipart body, giving up as soon as more than max_size bytes arrive.
    Bodies that are not multipart/form-data parse to an empty form.
    Raises MultiPartException on malformed or oversized bodies.
    """
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > max_size:
        raise RequestTooLarge(f"request body exceeds {max_size} bytes")

    if parse_media_type(request.headers.get("content-type")) != "multipart/form-data":
        return FormData()

    parser = MultiPartParser(request.headers, _limited_stream(request, max_size))
    return await parser.parse()
