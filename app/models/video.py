from sqlalchemy import Column, String, DateTime, Uuid
from datetime import datetime
from app.database import Base
import uuid


class Video(Base):
    __tablename__ = "videos"

    id = Column(Uuid, primary_key=True, index=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False, index=True)
    title = Column(String(120), nullable=False)
    description = Column(String(2200))
    thumbnail_url = Column(String(500))
    video_url = Column(String(500))
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
