"""
SQLAlchemy ORM models for the SparMatch sparring partner platform.
"""

import enum
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    Float,
    DateTime,
    ForeignKey,
    UniqueConstraint,
    CheckConstraint,
    Index,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sparmatch.database.db import Base


class Discipline(str, enum.Enum):
    """Combat sport discipline enum."""

    BOXING = "boxing"
    MMA = "mma"
    MUAY_THAI = "muay-thai"
    BJJ = "bjj"


class ExperienceLevel(str, enum.Enum):
    """Fighter experience level enum."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    PROFESSIONAL = "professional"


class ConnectionStatus(str, enum.Enum):
    """Connection request status enum."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    BLOCKED = "blocked"


LIVE_CONNECTION_STATUSES = (ConnectionStatus.PENDING.value, ConnectionStatus.ACCEPTED.value)


class User(Base):
    """User accounts. Identity is resolved by the upstream auth provider."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String, nullable=True, unique=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    profile_image_url = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    fighter_profile = relationship("FighterProfile", back_populates="user", uselist=False)

    __table_args__ = (Index("idx_users_email", "email"),)


class FighterProfile(Base):
    """Fighter profiles (one per user)."""

    __tablename__ = "fighter_profiles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    discipline = Column(String(20), nullable=False)  # Discipline enum value
    experience_level = Column(String(20), nullable=False)  # ExperienceLevel enum value
    weight_class = Column(String, nullable=True)  # e.g. "Welterweight (170 lbs)"
    weight = Column(Integer, nullable=True)  # In lbs
    location = Column(String, nullable=False)  # Free text, e.g. "Los Angeles, CA"
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    bio = Column(Text, nullable=True)
    availability = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, server_default="true")
    verified = Column(Boolean, default=False, nullable=False, server_default="false")
    rating = Column(Float, default=0.0, nullable=False, server_default="0")
    total_ratings = Column(Integer, default=0, nullable=False, server_default="0")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="fighter_profile")

    __table_args__ = (
        CheckConstraint("rating >= 0 AND rating <= 5", name="ck_fighter_profiles_rating_range"),
        CheckConstraint("total_ratings >= 0", name="ck_fighter_profiles_total_ratings"),
        Index("idx_fighter_profiles_active_rating", "is_active", "rating"),
        Index("idx_fighter_profiles_discipline", "discipline"),
        Index("idx_fighter_profiles_lat_lng", "latitude", "longitude"),
    )


class Gym(Base):
    """Gyms and training facilities."""

    __tablename__ = "gyms"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    address = Column(Text, nullable=False)
    city = Column(String, nullable=False)
    state = Column(String, nullable=False)
    zip_code = Column(String, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    phone = Column(String(30), nullable=True)
    website = Column(String(500), nullable=True)
    description = Column(Text, nullable=True)
    disciplines = Column(Text, nullable=True)  # JSON array of discipline values
    amenities = Column(Text, nullable=True)  # JSON array of amenity labels
    rating = Column(Float, default=0.0, nullable=False, server_default="0")
    total_ratings = Column(Integer, default=0, nullable=False, server_default="0")
    verified = Column(Boolean, default=False, nullable=False, server_default="false")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("idx_gyms_rating", "rating"),
        Index("idx_gyms_lat_lng", "latitude", "longitude"),
    )


class Connection(Base):
    """Connection request from a requester to a receiver."""

    __tablename__ = "connections"

    id = Column(Integer, primary_key=True, autoincrement=True)
    requester_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    receiver_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    status = Column(String(20), default="pending", nullable=False)
    message = Column(Text, nullable=True)
    # "<low user id>:<high user id>" while pending/accepted, NULL once terminal
    live_pair_key = Column(String(50), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    requester = relationship("User", foreign_keys=[requester_id], backref="sent_connections")
    receiver = relationship("User", foreign_keys=[receiver_id], backref="received_connections")
    messages = relationship("Message", back_populates="connection")

    __table_args__ = (
        UniqueConstraint("live_pair_key", name="uq_connections_live_pair_key"),
        CheckConstraint("requester_id <> receiver_id", name="ck_connections_distinct_parties"),
        Index("idx_connections_requester", "requester_id"),
        Index("idx_connections_receiver_status", "receiver_id", "status"),
    )


class Message(Base):
    """Direct message inside an accepted connection."""

    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    connection_id = Column(
        Integer, ForeignKey("connections.id", ondelete="CASCADE"), nullable=False
    )
    sender_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False)
    read_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    connection = relationship("Connection", back_populates="messages")
    sender = relationship("User")

    __table_args__ = (
        Index("idx_messages_connection_created", "connection_id", "created_at"),
        Index("idx_messages_sender", "sender_id"),
    )
