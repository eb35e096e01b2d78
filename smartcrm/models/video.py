"""
Video model — a generated video script waiting on an external renderer.

Rows are inserted as PENDING. Nothing in this service advances the status;
the renderer owns the rest of the lifecycle.
"""
import enum

from sqlalchemy import Column, Integer, Text, DateTime, JSON, ForeignKey
from sqlalchemy.sql import func

from smartcrm.database import Base, new_id


class VideoJobStatus(str, enum.Enum):
    PENDING = 'pending'
    PROCESSING = 'processing'
    SENT = 'sent'
    FAILED = 'failed'


class Video(Base):
    __tablename__ = 'videos'

    id = Column(Text, primary_key=True, default=new_id)
    contact_id = Column(Text, ForeignKey('contacts.id'), nullable=False, index=True)
    product_url = Column(Text, nullable=False)
    goal = Column(Text, default='demo')
    script = Column(Text, default='')
    storyboard = Column(JSON, default=list)
    video_url = Column(Text, nullable=True)
    estimated_duration = Column(Integer, nullable=True)
    key_messages = Column(JSON, default=list)
    visual_style = Column(Text, nullable=True)
    status = Column(Text, nullable=False, default=VideoJobStatus.PENDING.value)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
