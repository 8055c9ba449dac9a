"""
DiscoverHealth Backend — Healthcare Resource & Review Schemas
===============================================================

What:  Request bodies and responses for the /resources routes.

Input models accept missing values (None) so ResourceService can apply the
field-by-field validation rules and name the first failing field. Type errors
(e.g. "lat": "north", "lat": true, "lat": "0") are rejected by FastAPI before the service runs and are
reported as 400 validation errors too.
"""

from typing import Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class ResourceCreate(BaseModel):
    """Body of POST /resources."""
    name: Optional[str] = None
    category: Optional[str] = None
    country: Optional[str] = None
    region: Optional[str] = None
    # strict: JSON booleans and numeric strings are not coordinates
    lat: Optional[float] = Field(default=None, strict=True, description="Latitude, -90..90")
    lon: Optional[float] = Field(default=None, strict=True, description="Longitude, -180..180")
    description: Optional[str] = None


class ReviewCreate(BaseModel):
    """Body of POST /resources/{id}/reviews."""
    review: Optional[str] = Field(default=None, description="Review text")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class ResourceResponse(BaseModel):
    """One entry of GET /resources/{region}."""
    id: int
    name: str
    category: str
    country: str
    region: str
    lat: float
    lon: float
    description: str
    recommendations: int

    model_config = {"from_attributes": True}


class ResourceCreated(BaseModel):
    id: int = Field(description="New resource identifier")


class ReviewCreated(BaseModel):
    id: int = Field(description="New review identifier")
    message: str = Field(default="Review added successfully")
