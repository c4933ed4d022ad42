# app/schemas/social_schema.py

from datetime import datetime
from typing import List, Literal

from pydantic import BaseModel

PostPrivacy = Literal["public", "friends", "only_me"]


class PostCreate(BaseModel):
    content: str
    privacy: PostPrivacy = "friends"
    media_ids: List[str] = []


class SocialPostRead(BaseModel):
    id: str
    content: str
    media_paths: List[str] = []
    privacy: str
    published_at: datetime
    platform: str = "facebook"
    status: str = "published"


class SocialUserRead(BaseModel):
    id: str
    name: str
