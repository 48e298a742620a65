from typing import Optional, Literal

from pydantic import BaseModel


class Notice(BaseModel):
    """Transient user-facing status message."""
    title: str
    description: Optional[str] = None
    variant: Literal["default", "destructive"] = "default"

    @classmethod
    def error(cls, title, description=None):
        return cls(title=title, description=description, variant="destructive")
