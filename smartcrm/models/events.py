"""
Event tables polled by the Zapier trigger: email tracking events, form
submissions and automation triggers. Written elsewhere, read-only here.
"""
from sqlalchemy import Column, Text, DateTime, JSON, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from smartcrm.database import Base, new_id


class EmailEvent(Base):
    __tablename__ = 'email_events'

    id = Column(Text, primary_key=True, default=new_id)
    email_id = Column(Text, nullable=True)
    contact_id = Column(Text, ForeignKey('contacts.id'), nullable=True, index=True)
    event_type = Column(Text, nullable=False)  # open / click / bounce ...
    link_url = Column(Text, nullable=True)
    user_agent = Column(Text, nullable=True)
    ip_address = Column(Text, nullable=True)
    device_info = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    contact = relationship('Contact', lazy='joined')


class FormSubmission(Base):
    __tablename__ = 'form_submissions'

    id = Column(Text, primary_key=True, default=new_id)
    form_id = Column(Text, nullable=True)
    contact_id = Column(Text, ForeignKey('contacts.id'), nullable=True, index=True)
    responses = Column(JSON, default=dict)
    submitted_at = Column(DateTime(timezone=True), server_default=func.now())
    source = Column(Text, nullable=True)

    contact = relationship('Contact', lazy='joined')


class AutomationTrigger(Base):
    __tablename__ = 'automation_triggers'

    id = Column(Text, primary_key=True, default=new_id)
    event_type = Column(Text, nullable=False)
    record_id = Column(Text, nullable=True)
    contact_id = Column(Text, ForeignKey('contacts.id'), nullable=True, index=True)
    source = Column(Text, nullable=True)
    webhook_id = Column(Text, nullable=True)
    triggered_at = Column(DateTime(timezone=True), server_default=func.now())
    # "metadata" is reserved on declarative classes
    meta = Column('metadata', JSON, nullable=True)

    contact = relationship('Contact', lazy='joined')
