# ecovoice/models.py
from sqlalchemy import Column, String, Integer, DateTime, Text, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
from .database import Base
import uuid


def gen_id(prefix):
    return f"{prefix}_{uuid.uuid4().hex[:8]}"


def utcnow():
    return datetime.now(timezone.utc)


class Profile(Base):
    __tablename__ = "profiles"
    id = Column(String, primary_key=True, default=lambda: gen_id("user"))
    username = Column(String, nullable=False)
    total_points = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow)

    challenges = relationship("UserChallenge", back_populates="profile")


class Challenge(Base):
    __tablename__ = "challenges"
    id = Column(String, primary_key=True, default=lambda: gen_id("challenge"))
    title = Column(String, nullable=False)
    description = Column(Text, default="")
    difficulty = Column(String, nullable=False, default="easy")  # easy | medium | hard
    points = Column(Integer, nullable=False, default=0)
    category = Column(String, nullable=False)  # transport, energy, food, waste

    participants = relationship("UserChallenge", back_populates="challenge")


class UserChallenge(Base):
    __tablename__ = "user_challenges"
    __table_args__ = (UniqueConstraint("user_id", "challenge_id", name="uq_user_challenge"),)
    id = Column(String, primary_key=True, default=lambda: gen_id("uc"))
    user_id = Column(String, ForeignKey("profiles.id"), nullable=False)
    challenge_id = Column(String, ForeignKey("challenges.id"), nullable=False)
    completed = Column(Boolean, nullable=False, default=False)
    started_at = Column(DateTime, default=utcnow)
    completed_at = Column(DateTime, nullable=True)

    profile = relationship("Profile", back_populates="challenges")
    challenge = relationship("Challenge", back_populates="participants")


class BusinessInquiry(Base):
    __tablename__ = "business_inquiries"
    id = Column(String, primary_key=True, default=lambda: gen_id("inquiry"))
    company_name = Column(String, nullable=False)
    contact_name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String, default="")
    message = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow)
