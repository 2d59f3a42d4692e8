from app.schemas.video import VideoResponse

__all__ = ["VideoResponse"]
