"""
Agent models — outbound agent personas and their append-only execution log.
"""
from sqlalchemy import Column, Text, DateTime, ForeignKey
from sqlalchemy.sql import func

from smartcrm.database import Base, new_id


class OutboundAgent(Base):
    __tablename__ = 'outbound_agents'

    id = Column(Text, primary_key=True, default=new_id)
    key = Column(Text, nullable=False, unique=True)  # sales_qualification / support_response / general_agent
    name = Column(Text, default='')
    system_prompt = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class AgentLog(Base):
    __tablename__ = 'agent_logs'

    id = Column(Text, primary_key=True, default=new_id)
    contact_id = Column(Text, ForeignKey('contacts.id'), nullable=True, index=True)
    agent = Column(Text, nullable=True)
    level = Column(Text, default='info')
    message = Column(Text, default='')
    created_at = Column(DateTime(timezone=True), server_default=func.now())
