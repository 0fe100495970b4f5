"""
Database and API Schemas for Plantastic Care

Each storage model maps to a MongoDB collection with the lowercase class name.
- User -> "user"
- Post -> "post" (comments and vote sets are embedded)
- Complaint -> "complaint"
- Newsletter -> "newsletter"

API models below them describe request bodies and responses. Responses use
camelCase keys (authorId, voteScore, ...).
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


# ---------- Storage ----------

class User(BaseModel):
    username: str = Field(..., description="Display name")
    email: str = Field(..., description="Lowercased, unique")
    phone: str = Field(..., description="Contact phone")
    password_hash: str = Field(..., description="passlib hash, never returned")
    favorites: List[str] = Field(default_factory=list, description="Plant names")


class Comment(BaseModel):
    text: str = Field(..., description="Comment text")
    author: str = Field(..., description="Author display name at the time of posting")
    author_id: str = Field(..., description="Author user id")
    created_at: datetime


class Post(BaseModel):
    title: str = Field(..., description="Post title")
    content: str = Field(..., description="Post body")
    author: str = Field(..., description="Author display name")
    author_id: str = Field(..., description="Owning user id")
    created_at: datetime
    comments: List[Comment] = Field(default_factory=list, description="Append-ordered comments")
    upvotes: List[str] = Field(default_factory=list, description="User ids that upvoted")
    downvotes: List[str] = Field(default_factory=list, description="User ids that downvoted")


class Complaint(BaseModel):
    name: str
    email: str
    phone: Optional[str] = None
    message: str


class Newsletter(BaseModel):
    email: str = Field(..., description="Lowercased subscriber email")


# ---------- API ----------

class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PostCreate(BaseModel):
    title: str
    content: str


class CommentCreate(BaseModel):
    text: str


class CommentOut(CamelModel):
    text: str
    author: str
    author_id: str
    created_at: datetime


class VoteSummary(CamelModel):
    upvote_count: int
    downvote_count: int
    vote_score: int
    has_upvoted: bool
    has_downvoted: bool


class PostOut(CamelModel):
    id: str
    title: str
    content: str
    author: str
    author_id: str
    created_at: datetime
    comments: List[CommentOut]
    upvote_count: int
    downvote_count: int
    vote_score: int
    has_upvoted: bool
    has_downvoted: bool


class RegisterRequest(BaseModel):
    username: str
    email: EmailStr
    phone: str
    password: str


class LoginRequest(BaseModel):
    email: str
    password: str


class ProfileUpdate(BaseModel):
    username: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None


class UserOut(CamelModel):
    id: str
    username: str
    email: str
    phone: str
    favorites: List[str] = Field(default_factory=list)


class LoginResponse(BaseModel):
    message: str
    token: str
    user: UserOut


class FavoriteRequest(CamelModel):
    plant_name: str


class ComplaintRequest(BaseModel):
    name: str
    email: EmailStr
    phone: Optional[str] = None
    message: str


class NewsletterRequest(BaseModel):
    email: EmailStr


class PlantRecord(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    name: str
    link: Optional[str] = None
    image: Optional[str] = None
    maintenance: Optional[str] = None
    sunlight: Optional[str] = None
    climate: Optional[str] = None
    soil_type: Optional[str] = None
    toxicity: Optional[str] = None
    watering_frequency: Optional[str] = None
