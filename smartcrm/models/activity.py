"""
Activity model — timestamped interaction log per contact.
"""
from sqlalchemy import Column, Text, DateTime, ForeignKey
from sqlalchemy.sql import func

from smartcrm.database import Base, new_id


class Activity(Base):
    __tablename__ = 'activities'

    id = Column(Text, primary_key=True, default=new_id)
    contact_id = Column(Text, ForeignKey('contacts.id'), nullable=False, index=True)
    type = Column(Text, nullable=False)  # email_sent / email_reply / email_received / call / note ...
    description = Column(Text, default='')
    created_at = Column(DateTime(timezone=True), server_default=func.now())
