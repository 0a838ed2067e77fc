import httpx
import pytest
import respx
from httpx import Response

import civic_api.routes.reports as reports_routes
from civic_api.geocoding import GeocodeResult, reverse_geocode

NOMINATIM = "https://nominatim.openstreetmap.org"


@pytest.mark.asyncio
async def test_reverse_geocode_parses_address():
    async with respx.mock(base_url=NOMINATIM) as respx_mock:
        route = respx_mock.get("/reverse").mock(
            return_value=Response(
                200,
                json={
                    "display_name": "MG Road, Pune, Maharashtra, 411001, India",
                    "address": {"city": "Pune", "state": "Maharashtra", "postcode": "411001"},
                },
            )
        )

        result = await reverse_geocode(18.52, 73.85)

        assert route.called
        request = route.calls.last.request
        assert request.url.params["lat"] == "18.52"
        assert request.url.params["format"] == "json"
        assert request.headers["User-Agent"]

    assert result.resolved is True
    assert result.city == "Pune"
    assert result.state == "Maharashtra"
    assert result.pincode == "411001"
    assert result.address.startswith("MG Road")


@pytest.mark.asyncio
async def test_town_is_used_when_city_missing():
    async with respx.mock(base_url=NOMINATIM) as respx_mock:
        respx_mock.get("/reverse").mock(
            return_value=Response(200, json={"display_name": "Somewhere", "address": {"town": "Lonavala"}})
        )
        result = await reverse_geocode(18.75, 73.40)
    assert result.city == "Lonavala"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        Response(503),
        Response(200, content=b"<html>not json</html>"),
        Response(200, json={"error": "Unable to geocode"}),
    ],
)
async def test_failures_return_unresolved(response):
    async with respx.mock(base_url=NOMINATIM) as respx_mock:
        respx_mock.get("/reverse").mock(return_value=response)
        result = await reverse_geocode(0.0, 0.0)
    assert result.resolved is False
    assert result.city is None


@pytest.mark.asyncio
async def test_transport_error_returns_unresolved():
    async with respx.mock(base_url=NOMINATIM) as respx_mock:
        respx_mock.get("/reverse").mock(side_effect=httpx.ConnectError)
        result = await reverse_geocode(1.0, 2.0)
    assert result == GeocodeResult(latitude=1.0, longitude=2.0)


@pytest.mark.asyncio
async def test_explicit_client_is_left_open():
    async with respx.mock(base_url=NOMINATIM) as respx_mock:
        respx_mock.get("/reverse").mock(return_value=Response(200, json={"address": {"village": "Khed"}}))
        async with httpx.AsyncClient() as client:
            result = await reverse_geocode(18.8, 73.9, client=client)
            assert not client.is_closed
    assert result.city == "Khed"


@pytest.mark.asyncio
async def test_reverse_geocode_endpoint(client, monkeypatch):
    async def fake_geocode(lat, lon):
        return GeocodeResult(latitude=lat, longitude=lon, resolved=True, city="Pune")

    monkeypatch.setattr(reports_routes, "reverse_geocode", fake_geocode)
    r = await client.get("/api/v1/geocode/reverse", params={"lat": 18.5, "lon": 73.8})
    assert r.status_code == 200
    assert r.json()["city"] == "Pune"
    assert r.json()["resolved"] is True

    r = await client.get("/api/v1/geocode/reverse", params={"lat": 95, "lon": 73.8})
    assert r.status_code == 422
