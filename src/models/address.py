from typing import List, Optional

from pydantic import BaseModel, Field

from src.models.notice import Notice


def normalize_postal_code(postal_code):
    """Strip hyphens and surrounding whitespace from a CEP."""
    return (postal_code or "").replace("-", "").strip()


class Address(BaseModel):
    postal_code: str = ""
    street: str = ""
    neighborhood: str = ""
    city: str = ""
    state: str = ""


class Coordinates(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

    def as_tuple(self):
        return self.latitude, self.longitude


class ResolveResult(BaseModel):
    """Outcome of resolving a postal code into an address and coordinates."""
    address: Optional[Address] = None
    coordinates: Optional[Coordinates] = None
    provider: Optional[str] = None
    lookup_failed: bool = False
    notices: List[Notice] = []

    @property
    def found(self) -> bool:
        return self.coordinates is not None
