"""
Contact model — one row per person in the CRM.

Created by the front end and by the inbound-email webhook; mutated by
engagement scoring, disengagement and the AE agent. Never deleted here.
"""
from sqlalchemy import Column, Integer, Float, Text, DateTime, JSON
from sqlalchemy.sql import func

from smartcrm.database import Base, new_id


class Contact(Base):
    __tablename__ = 'contacts'

    id = Column(Text, primary_key=True, default=new_id)
    name = Column(Text, default='')
    first_name = Column(Text, nullable=True)
    last_name = Column(Text, nullable=True)
    email = Column(Text, nullable=True, index=True)
    phone = Column(Text, nullable=True)
    title = Column(Text, nullable=True)
    company = Column(Text, nullable=True)
    industry = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(Text, default='lead')
    interest_level = Column(Text, nullable=True)
    ai_score = Column(Integer, nullable=True)
    source = Column(Text, nullable=True)
    custom_fields = Column(JSON, nullable=True)
    email_engagement_score = Column(Float, nullable=True)
    last_email_engagement = Column(DateTime(timezone=True), nullable=True)
    email_metrics = Column(JSON, nullable=True)
    disengagement_reason = Column(Text, nullable=True)
    disengaged_at = Column(DateTime(timezone=True), nullable=True)
    autopilot_state = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
