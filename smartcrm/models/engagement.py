"""
Follow-up intents written by engagement scoring. All append-only.
"""
from sqlalchemy import Column, Text, DateTime, JSON, ForeignKey
from sqlalchemy.sql import func

from smartcrm.database import Base, new_id


class ScheduledAction(Base):
    __tablename__ = 'scheduled_actions'

    id = Column(Text, primary_key=True, default=new_id)
    contact_id = Column(Text, ForeignKey('contacts.id'), nullable=False, index=True)
    action_type = Column(Text, nullable=False)
    scheduled_for = Column(DateTime(timezone=True), nullable=False)
    config = Column(JSON, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class CampaignTrigger(Base):
    __tablename__ = 'campaign_triggers'

    id = Column(Text, primary_key=True, default=new_id)
    contact_id = Column(Text, ForeignKey('contacts.id'), nullable=False, index=True)
    campaign_type = Column(Text, nullable=False)  # upgrade_sequence / nurture_campaign / reengagement_campaign
    triggered_at = Column(DateTime(timezone=True), server_default=func.now())
    source = Column(Text, default='email_engagement')


class ComplianceAction(Base):
    __tablename__ = 'compliance_actions'

    id = Column(Text, primary_key=True, default=new_id)
    contact_id = Column(Text, ForeignKey('contacts.id'), nullable=False, index=True)
    action_type = Column(Text, nullable=False)  # unsubscribe_penalty / spam_complaint_penalty
    triggered_at = Column(DateTime(timezone=True), server_default=func.now())
    severity = Column(Text, default='medium')
