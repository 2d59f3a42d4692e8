"""
Video metadata store
"""
from typing import Optional
from uuid import UUID
from sqlalchemy.orm import Session
from app.models.video import Video


def get_video(db: Session, video_id: UUID) -> Optional[Video]:
    return db.query(Video).filter(Video.id == video_id).first()


def update_video(db: Session, video: Video) -> Video:
    """Persist changes made in place on a video record"""
    try:
        db.add(video)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(video)
    return video
