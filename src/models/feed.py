from datetime import datetime
from typing import List, Optional, Literal

from pydantic import BaseModel

Role = Literal["admin", "leader", "member"]
Status = Literal["ativo", "inativo"]

ROLES = ("admin", "leader", "member")
STATUSES = ("ativo", "inativo")


class Profile(BaseModel):
    id: str
    full_name: str
    email: str = ""
    role: Role = "member"
    photo_url: Optional[str] = None
    status: Status = "ativo"

    @property
    def can_moderate(self) -> bool:
        return self.role in ("admin", "leader")

    @property
    def is_active(self) -> bool:
        return self.status == "ativo"


class AuthorSummary(BaseModel):
    full_name: str
    photo_url: Optional[str] = None

    @classmethod
    def of(cls, profile):
        return cls(full_name=profile.full_name, photo_url=profile.photo_url)


class Comment(BaseModel):
    id: str
    post_id: str
    author_id: str
    content: str
    created_at: datetime
    author: Optional[AuthorSummary] = None


class Like(BaseModel):
    user_id: str
    author: Optional[AuthorSummary] = None


class Post(BaseModel):
    id: str
    author_id: str
    content: str = ""
    image_url: Optional[str] = None
    created_at: datetime
    is_pinned: bool = False
    author: Optional[AuthorSummary] = None
    comments: List[Comment] = []
    likes: List[Like] = []

    def liked_by(self, user_id) -> bool:
        return any(like.user_id == user_id for like in self.likes)
