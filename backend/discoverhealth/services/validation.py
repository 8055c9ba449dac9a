"""
DiscoverHealth Backend — Input Validation & Sanitization
==========================================================

What:  Pure functions that check client input against the directory's rules
       and neutralize markup in free text.
Who:   UserService, ResourceService and ReviewService, before any storage call.

Rules:
    username                   ^[0-9A-Za-z_]+$, 1..50 chars
    password                   8..256 chars
    name/category/country/     ^[A-Za-z0-9 _]+$ after trimming, 1..100 chars
    region
    lat                        -90..90
    lon                        -180..180
    description                optional, at most 2000 chars, HTML-escaped
    review                     non-blank, at most 2000 chars, HTML-escaped

Each check raises ValidationError naming the field; callers check fields in a
fixed order so the error always names the first failing field.
"""

import html
import math
import re
from typing import Optional

from discoverhealth.daos.resource_dao import NewResource
from discoverhealth.exceptions import ValidationError
from discoverhealth.schemas.resource import ResourceCreate

USERNAME_PATTERN = re.compile(r"^[0-9A-Za-z_]+$")
SAFE_TEXT_PATTERN = re.compile(r"^[A-Za-z0-9 _]+$")

USERNAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 256
FIELD_MAX_LENGTH = 100
FREE_TEXT_MAX_LENGTH = 2000

_LABELS = {
    "name": "Name",
    "category": "Category",
    "country": "Country",
    "region": "Region",
}


def sanitize_text(value: str) -> str:
    """Trim and HTML-escape user text so stored markup renders inert."""
    return html.escape(value.strip(), quote=True)


def validate_username(username: Optional[str]) -> str:
    if not username or not USERNAME_PATTERN.fullmatch(username):
        raise ValidationError("Invalid or missing username", field="username")
    if len(username) > USERNAME_MAX_LENGTH:
        raise ValidationError(
            f"Username must be at most {USERNAME_MAX_LENGTH} characters", field="username"
        )
    return username


def validate_password(password: Optional[str]) -> str:
    if not password or len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(
            f"Password must be at least {PASSWORD_MIN_LENGTH} characters", field="password"
        )
    if len(password) > PASSWORD_MAX_LENGTH:
        raise ValidationError(
            f"Password must be at most {PASSWORD_MAX_LENGTH} characters", field="password"
        )
    return password


def validate_safe_field(field: str, value: Optional[str]) -> str:
    """Required short text restricted to letters, digits, space and underscore."""
    label = _LABELS.get(field, field.capitalize())
    cleaned = value.strip() if isinstance(value, str) else ""
    if not cleaned:
        raise ValidationError(f"{label} is required", field=field)
    if len(cleaned) > FIELD_MAX_LENGTH:
        raise ValidationError(
            f"{label} must be at most {FIELD_MAX_LENGTH} characters", field=field
        )
    if not SAFE_TEXT_PATTERN.fullmatch(cleaned):
        raise ValidationError(
            f"{label} may only contain letters, numbers, spaces and underscores",
            field=field,
        )
    return cleaned


def validate_coordinate(field: str, value: Optional[float], limit: float) -> float:
    label = "Latitude" if field == "lat" else "Longitude"
    if value is None:
        raise ValidationError(f"{label} is required", field=field)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{label} must be a number", field=field)
    if math.isnan(value) or not -limit <= value <= limit:
        raise ValidationError(
            f"{label} must be between {-limit:g} and {limit:g}", field=field
        )
    return float(value)


def validate_free_text(field: str, value: Optional[str], required: bool) -> str:
    cleaned = value.strip() if isinstance(value, str) else ""
    if not cleaned:
        if required:
            raise ValidationError(f"{field.capitalize()} cannot be empty", field=field)
        return ""
    if len(cleaned) > FREE_TEXT_MAX_LENGTH:
        raise ValidationError(
            f"{field.capitalize()} must be at most {FREE_TEXT_MAX_LENGTH} characters",
            field=field,
        )
    return sanitize_text(cleaned)


def validate_region(region: Optional[str]) -> str:
    return validate_safe_field("region", region)


def validate_resource(payload: ResourceCreate) -> NewResource:
    """
    Check every field of a new resource in declaration order.

    Returns:
        NewResource with trimmed strings and an escaped description.

    Raises:
        ValidationError: for the first field that fails.
    """
    name = validate_safe_field("name", payload.name)
    category = validate_safe_field("category", payload.category)
    country = validate_safe_field("country", payload.country)
    region = validate_safe_field("region", payload.region)
    lat = validate_coordinate("lat", payload.lat, 90.0)
    lon = validate_coordinate("lon", payload.lon, 180.0)
    description = validate_free_text("description", payload.description, required=False)
    return NewResource(
        name=name,
        category=category,
        country=country,
        region=region,
        lat=lat,
        lon=lon,
        description=description,
    )


def validate_review(text: Optional[str]) -> str:
    return validate_free_text("review", text, required=True)
