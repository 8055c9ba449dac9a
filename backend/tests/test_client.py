"""
DiscoverHealth — Client & View Model Tests
============================================

What:  DirectoryClient and DirectoryViewModel against the in-process app.

What we test:
    ✅ Client methods map to the API and raise ApiError on failure
    ✅ Search replaces resources and markers; failure clears both
    ✅ Recommend bumps the local counter only on success
    ✅ Review submission: local blank check, success and error messages
    ✅ Map bounds around the current markers
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport

from discoverhealth.client import (
    EMPTY_REVIEW_MESSAGE,
    REVIEW_SUCCESS_MESSAGE,
    ApiError,
    DirectoryClient,
    DirectoryViewModel,
)


@pytest_asyncio.fixture
async def client(app):
    async with DirectoryClient("http://test", transport=ASGITransport(app=app)) as api:
        yield api


@pytest_asyncio.fixture
async def seeded(client):
    """Logged-in client with two resources in Southampton and one elsewhere."""
    await client.signup("alice", "longpassword1")
    await client.login("alice", "longpassword1")
    ids = [
        await client.create_resource("Clinic A", "Clinic", "UK", "Southampton", 50.9, -1.4),
        await client.create_resource(
            "Pharmacy B", "Pharmacy", "UK", "Southampton", 50.95, -1.35, "Late opening"
        ),
    ]
    await client.create_resource("Clinic C", "Clinic", "UK", "Winchester", 51.06, -1.31)
    return ids


class TestDirectoryClient:

    @pytest.mark.asyncio
    async def test_session_round_trip(self, client):
        assert (await client.status()).logged_in is False

        await client.signup("alice", "longpassword1")
        assert await client.login("alice", "longpassword1") == "alice"
        status = await client.status()
        assert status.logged_in is True
        assert status.username == "alice"

        await client.logout()
        assert (await client.status()).logged_in is False

    @pytest.mark.asyncio
    async def test_api_error(self, client):
        with pytest.raises(ApiError) as exc_info:
            await client.recommend(1)
        assert exc_info.value.status == 401
        assert exc_info.value.error == "not_authenticated"

    @pytest.mark.asyncio
    async def test_add_review(self, client, seeded):
        review_id = await client.add_review(seeded[0], "Helpful")
        assert review_id > 0


class TestDirectoryViewModel:

    @pytest.mark.asyncio
    async def test_search_builds_markers(self, client, seeded):
        view = DirectoryViewModel(client)

        await view.search("Southampton")

        assert view.selected_region == "Southampton"
        assert view.error is None
        assert [r.id for r in view.resources] == seeded
        assert [m.resource_id for m in view.markers] == seeded
        assert view.markers[0].popup == "<b>Clinic A</b><br>No description"
        assert view.markers[1].popup == "<b>Pharmacy B</b><br>Late opening"

    @pytest.mark.asyncio
    async def test_new_search_replaces_markers(self, client, seeded):
        view = DirectoryViewModel(client)
        await view.search("Southampton")

        await view.search("Winchester")

        assert [m.title for m in view.markers] == ["Clinic C"]

    @pytest.mark.asyncio
    async def test_failed_search_clears_state(self, client, seeded):
        view = DirectoryViewModel(client)
        await view.search("Southampton")

        await view.search("Bad!Region")

        assert view.resources == []
        assert view.markers == []
        assert view.error == "Region may only contain letters, numbers, spaces and underscores"

    @pytest.mark.asyncio
    async def test_recommend_updates_local_count(self, client, seeded):
        view = DirectoryViewModel(client)
        await view.search("Southampton")

        await view.recommend(seeded[1])

        assert [r.recommendations for r in view.resources] == [0, 1]
        await view.search("Southampton")
        assert [r.recommendations for r in view.resources] == [0, 1]

    @pytest.mark.asyncio
    async def test_recommend_failure_keeps_counts(self, client, seeded):
        view = DirectoryViewModel(client)
        await view.search("Southampton")

        await view.recommend(9999)

        assert view.error == "Resource not found"
        assert [r.recommendations for r in view.resources] == [0, 0]

    @pytest.mark.asyncio
    async def test_submit_review(self, client, seeded):
        view = DirectoryViewModel(client)

        assert await view.submit_review(seeded[0], "  ") is False
        assert view.review_status[seeded[0]] == EMPTY_REVIEW_MESSAGE

        assert await view.submit_review(seeded[0], "Friendly staff") is True
        assert view.review_status[seeded[0]] == REVIEW_SUCCESS_MESSAGE

    @pytest.mark.asyncio
    async def test_submit_review_logged_out(self, client, seeded):
        view = DirectoryViewModel(client)
        await client.logout()

        assert await view.submit_review(seeded[0], "Friendly staff") is False
        assert view.review_status[seeded[0]] == "You must be logged in to perform this action"

    @pytest.mark.asyncio
    async def test_bounds(self, client, seeded):
        view = DirectoryViewModel(client)
        assert view.bounds() is None

        await view.search("Southampton")

        assert view.bounds() == ((50.9, -1.4), (50.95, -1.35))
