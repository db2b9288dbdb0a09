"""
Pydantic models for API request/response validation.

Request bodies accept both camelCase (as sent by the web client) and
snake_case field names.
"""

from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict


class UserResponse(BaseModel):
    """User identity."""

    id: int
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    created_at: Optional[str] = None


# Fighter profile schemas
class ProfileUpsert(BaseModel):
    """Create or update the caller's fighter profile."""

    model_config = ConfigDict(populate_by_name=True)
    discipline: Optional[str] = None
    experience_level: Optional[str] = Field(default=None, alias="experienceLevel")
    weight_class: Optional[str] = Field(default=None, alias="weightClass")
    weight: Optional[int] = None
    location: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    bio: Optional[str] = None
    availability: Optional[str] = None
    is_active: Optional[bool] = Field(default=None, alias="isActive")


class FighterProfileResponse(BaseModel):
    """Fighter profile, optionally with its owner and search distance."""

    id: int
    user_id: int
    discipline: str
    experience_level: str
    weight_class: Optional[str] = None
    weight: Optional[int] = None
    location: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    bio: Optional[str] = None
    availability: Optional[str] = None
    rating: float
    total_ratings: int
    is_active: bool
    verified: bool
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    user: Optional[UserResponse] = None
    distance_miles: Optional[float] = None


class RatingCreate(BaseModel):
    """Rate another fighter after sparring."""

    score: int = Field(..., ge=1, le=5)


# Connection schemas
class ConnectionCreate(BaseModel):
    """Request to connect with another fighter."""

    model_config = ConfigDict(populate_by_name=True)
    receiver_id: int = Field(..., alias="receiverId")
    message: Optional[str] = Field(default=None, max_length=1000)


class ConnectionStatusUpdate(BaseModel):
    """Change a connection's status."""

    status: str


class ConnectionResponse(BaseModel):
    """Connection without user details."""

    id: int
    requester_id: int
    receiver_id: int
    status: str
    message: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ConnectionWithPartiesResponse(ConnectionResponse):
    """Connection with both parties and the counter-party of the caller."""

    requester: Optional[UserResponse] = None
    receiver: Optional[UserResponse] = None
    other_user: Optional[UserResponse] = None


# Message schemas
class MessageCreate(BaseModel):
    """Send a message on a connection."""

    content: str


class MessageResponse(BaseModel):
    """Direct message."""

    id: int
    connection_id: int
    sender_id: int
    content: str
    read_at: Optional[str] = None
    created_at: Optional[str] = None
    sender: Optional[UserResponse] = None


class MarkReadResponse(BaseModel):
    """Result of marking messages read."""

    updated: int


# Gym schemas
class GymCreate(BaseModel):
    """Add a gym to the directory."""

    model_config = ConfigDict(populate_by_name=True)
    name: str
    address: str
    city: str
    state: str
    zip_code: Optional[str] = Field(default=None, alias="zipCode")
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    phone: Optional[str] = Field(default=None, max_length=30)
    website: Optional[str] = Field(default=None, max_length=500)
    description: Optional[str] = None
    disciplines: List[str] = Field(default_factory=list)
    amenities: List[str] = Field(default_factory=list)


class GymResponse(BaseModel):
    """Gym directory entry."""

    id: int
    name: str
    address: str
    city: str
    state: str
    zip_code: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    description: Optional[str] = None
    disciplines: List[str] = []
    amenities: List[str] = []
    rating: float
    total_ratings: int
    verified: bool
    created_at: Optional[str] = None
    distance_miles: Optional[float] = None
