import httpx
import pytest

from conftest import pin_payload
from pinmap.client.api import ApiError, PinsApi
from pinmap.main import app

pytestmark = pytest.mark.anyio


def _api(transport):
    return PinsApi(base_url="http://testserver", transport=transport)


async def test_round_trip_against_the_service(override_db):
    async with _api(httpx.ASGITransport(app=app)) as api:
        created = await api.create_pin(pin_payload(title="bridge out"))
        assert created.title == "bridge out"
        assert created.location.coordinates == [77.2090, 28.6139]

        page = await api.fetch_pins(page=1, limit=10)
        assert page.total == 1
        assert page.pins[0].id == created.id

        voted = await api.vote_pin(str(created.id), 1)
        assert voted.votes == 1

        near = await api.fetch_nearby(77.2090, 28.6139, max_distance=100)
        assert [p.id for p in near] == [created.id]

        summary = await api.get_summary()
        assert summary.total_pins == 1
        assert summary.avg_votes == 1

        assert await api.delete_pin(str(created.id)) == {"message": "deleted"}
        with pytest.raises(ApiError) as exc:
            await api.vote_pin(str(created.id), 1)
        assert exc.value.status_code == 404
        assert exc.value.message == "Pin not found"


async def test_filters_are_sent_as_query_params():
    seen = {}

    def handler(request):
        seen.update(request.url.params)
        return httpx.Response(200, json={"pins": [], "page": 2, "limit": 5, "total": 0})

    async with _api(httpx.MockTransport(handler)) as api:
        await api.fetch_pins(page=2, limit=5, main_category="Alert", sub_type="Evacuation")
    assert seen == {"page": "2", "limit": "5", "mainCategory": "Alert", "subType": "Evacuation"}


async def test_server_message_is_used_when_present():
    def handler(request):
        return httpx.Response(400, json={"error": "Validation failed", "errors": []})

    async with _api(httpx.MockTransport(handler)) as api:
        with pytest.raises(ApiError) as exc:
            await api.create_pin({})
    assert exc.value.message == "Validation failed"
    assert exc.value.status_code == 400


async def test_generic_message_when_body_is_not_json():
    def handler(request):
        return httpx.Response(502, text="<html>bad gateway</html>")

    async with _api(httpx.MockTransport(handler)) as api:
        with pytest.raises(ApiError) as exc:
            await api.vote_pin("abc", 1)
    assert exc.value.message == "Failed to vote"
    assert exc.value.status_code == 502


async def test_transport_failure_becomes_api_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    async with _api(httpx.MockTransport(handler)) as api:
        with pytest.raises(ApiError) as exc:
            await api.get_summary()
    assert exc.value.message == "Failed summary"
    assert exc.value.status_code is None
