"""
Deal model — sales-pipeline record linked to a contact. Read-only here.
"""
from sqlalchemy import Column, Float, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from smartcrm.database import Base, new_id


class Deal(Base):
    __tablename__ = 'deals'

    id = Column(Text, primary_key=True, default=new_id)
    contact_id = Column(Text, ForeignKey('contacts.id'), nullable=True, index=True)
    title = Column(Text, default='')
    company = Column(Text, nullable=True)
    value = Column(Float, nullable=True)
    currency = Column(Text, default='USD')
    stage = Column(Text, nullable=True)
    status = Column(Text, nullable=True)
    expected_close_date = Column(DateTime(timezone=True), nullable=True)
    source = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    contact = relationship('Contact', lazy='joined')
