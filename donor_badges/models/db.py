"""SQLAlchemy database models for badges, donations and achievements"""
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Numeric, DateTime, JSON, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

class Badge(Base):
    """
    Badge catalog entry.
    rule_config holds the rule parameters, e.g. {"threshold": 5}.
    """
    __tablename__ = 'badges'

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    icon_url = Column(String, nullable=True)
    rule_type = Column(String, nullable=False)
    rule_config = Column(JSON, nullable=True)

class Donation(Base):
    """
    A single donation. Written by the checkout flow, only read here.
    """
    __tablename__ = 'donations'

    id = Column(Integer, primary_key=True)
    donor_id = Column(String, nullable=False, index=True)
    school_id = Column(Integer, nullable=True)
    amount = Column(Numeric(12, 2), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

class UserBadge(Base):
    """
    Achievement of a badge by a donor.
    One row per (donor_id, badge_id), never updated.
    """
    __tablename__ = 'user_badges'

    donor_id = Column(String, primary_key=True)
    badge_id = Column(String, primary_key=True)
    achieved_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
