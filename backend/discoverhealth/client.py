"""
DiscoverHealth — API Client & Map View Model
==============================================

What:  A typed async client for the HTTP API plus the state a map front end
       keeps in sync with it.
How:   DirectoryClient wraps httpx.AsyncClient; its cookie jar carries the
       session cookie between calls. DirectoryViewModel holds the current
       search result and one Marker per resource, and applies the outcome of
       each API call to that state.

Usage:
    async with DirectoryClient("http://localhost:8000") as client:
        await client.login("alice", "longpassword1")
        view = DirectoryViewModel(client)
        await view.search("Southampton")
        await view.recommend(view.resources[0].id)

Tests pass `transport=httpx.ASGITransport(app=app)` to talk to an in-process app.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import httpx

from discoverhealth.schemas.resource import ResourceResponse
from discoverhealth.schemas.user import UserStatus

logger = logging.getLogger(__name__)

REVIEW_SUCCESS_MESSAGE = "Thank you! Your review has been submitted successfully!"
EMPTY_REVIEW_MESSAGE = "Review cannot be empty"


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status: int, error: str, message: str):
        self.status = status
        self.error = error
        self.message = message
        super().__init__(f"{status} {error}: {message}")


# ══════════════════════════════════════════════════════════════════════════
# HTTP Client
# ══════════════════════════════════════════════════════════════════════════


class DirectoryClient:
    """One method per API endpoint. Raises ApiError on any non-2xx response."""

    def __init__(
        self,
        base_url: str,
        api_prefix: str = "/api",
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self.api_prefix = api_prefix.rstrip("/")
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> "DirectoryClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ── Resources ─────────────────────────────────────────────────────────

    async def search(self, region: str) -> List[ResourceResponse]:
        data = await self._request("GET", f"/resources/{quote(region, safe='')}")
        return [ResourceResponse.model_validate(item) for item in data]

    async def create_resource(
        self,
        name: str,
        category: str,
        country: str,
        region: str,
        lat: float,
        lon: float,
        description: str = "",
    ) -> int:
        data = await self._request(
            "POST",
            "/resources",
            json={
                "name": name,
                "category": category,
                "country": country,
                "region": region,
                "lat": lat,
                "lon": lon,
                "description": description,
            },
        )
        return data["id"]

    async def recommend(self, resource_id: int) -> None:
        await self._request("POST", f"/resources/{resource_id}/recommend")

    async def add_review(self, resource_id: int, review: str) -> int:
        data = await self._request(
            "POST", f"/resources/{resource_id}/reviews", json={"review": review}
        )
        return data["id"]

    # ── Users ─────────────────────────────────────────────────────────────

    async def signup(self, username: str, password: str) -> int:
        data = await self._request(
            "POST", "/users/signup", json={"username": username, "password": password}
        )
        return data["id"]

    async def login(self, username: str, password: str) -> str:
        data = await self._request(
            "POST", "/users/login", json={"username": username, "password": password}
        )
        return data["username"]

    async def logout(self) -> None:
        await self._request("POST", "/users/logout")

    async def status(self) -> UserStatus:
        data = await self._request("GET", "/users/user")
        return UserStatus.model_validate(data)

    async def _request(self, method: str, path: str, json: Optional[dict] = None) -> Any:
        response = await self._http.request(method, self.api_prefix + path, json=json)
        if response.is_success:
            return response.json()

        try:
            body = response.json()
        except ValueError:
            body = {}
        raise ApiError(
            status=response.status_code,
            error=body.get("error", "http_error"),
            message=body.get("message", response.reason_phrase),
        )


# ══════════════════════════════════════════════════════════════════════════
# View Model
# ══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class Marker:
    """A map pin for one resource."""
    resource_id: int
    lat: float
    lon: float
    title: str
    popup: str


def _marker_for(resource: ResourceResponse) -> Marker:
    # Name and description arrive HTML-escaped from the API
    return Marker(
        resource_id=resource.id,
        lat=resource.lat,
        lon=resource.lon,
        title=resource.name,
        popup=f"<b>{resource.name}</b><br>{resource.description or 'No description'}",
    )


class DirectoryViewModel:
    """
    Search results and map markers, kept consistent with the API.

    Invariants:
        - markers always describe exactly the current `resources`
        - a failed search leaves no stale resources or markers behind
        - `error` holds the message of the last failed action, None otherwise
    """

    def __init__(self, client: DirectoryClient):
        self.client = client
        self.resources: List[ResourceResponse] = []
        self.markers: List[Marker] = []
        self.selected_region: Optional[str] = None
        self.error: Optional[str] = None
        self.review_status: Dict[int, str] = {}

    async def search(self, region: str) -> None:
        self.selected_region = region
        try:
            found = await self.client.search(region)
        except (ApiError, httpx.HTTPError) as e:
            logger.warning("Search for region '%s' failed: %s", region, e)
            self.error = _describe(e)
            self.resources = []
            self.markers = []
            return

        self.error = None
        self.resources = found
        self.markers = [_marker_for(resource) for resource in found]
        self.review_status = {}

    async def recommend(self, resource_id: int) -> None:
        try:
            await self.client.recommend(resource_id)
        except (ApiError, httpx.HTTPError) as e:
            self.error = _describe(e)
            return

        self.error = None
        self.resources = [
            r.model_copy(update={"recommendations": r.recommendations + 1})
            if r.id == resource_id
            else r
            for r in self.resources
        ]

    async def submit_review(self, resource_id: int, text: str) -> bool:
        """Post a review; the outcome message lands in review_status[resource_id]."""
        if not text or not text.strip():
            self.review_status[resource_id] = EMPTY_REVIEW_MESSAGE
            return False
        try:
            await self.client.add_review(resource_id, text)
        except ApiError as e:
            self.review_status[resource_id] = e.message
            return False
        except httpx.HTTPError as e:
            self.review_status[resource_id] = f"Error: {e}"
            return False

        self.review_status[resource_id] = REVIEW_SUCCESS_MESSAGE
        return True

    def bounds(self) -> Optional[Tuple[Tuple[float, float], Tuple[float, float]]]:
        """((south, west), (north, east)) around all markers, or None without markers."""
        if not self.markers:
            return None
        lats = [m.lat for m in self.markers]
        lons = [m.lon for m in self.markers]
        return (min(lats), min(lons)), (max(lats), max(lons))


def _describe(error: Exception) -> str:
    if isinstance(error, ApiError):
        return error.message
    return f"Error: {error}"
