
from sqlalchemy import Column, String, BigInteger, Integer, Text, DateTime
from sqlalchemy.sql import func
from ytharvest.core.database import Base

class Video(Base):
    __tablename__ = "videos"

    video_id = Column(String(32), primary_key=True)
    search_name = Column(String(255), nullable=True, index=True)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    published_date = Column(DateTime(timezone=True), nullable=True)
    duration_seconds = Column(Integer, nullable=False, default=0)
    view_count = Column(BigInteger, nullable=False, default=0)
    url = Column(String(500), nullable=False)
    channel_name = Column(String(255), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    created_at = Column(DateTime(timezone=True), server_default=func.now())
