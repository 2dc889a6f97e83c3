"""Tests for the upstream geocoding providers."""

import httpx
import pytest
import respx

from src.geocoding.providers import GoogleGeocodingProvider, NominatimGeocodingProvider
from src.geocoding.schemas import GeoCoordinate

GOOGLE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"


def _google_body(lat, lng, status="OK") -> dict:
    return {"status": status, "results": [{"geometry": {"location": {"lat": lat, "lng": lng}}}]}


class TestGoogleProvider:
    """Tests for GoogleGeocodingProvider."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_success(self):
        route = respx.get(GOOGLE_URL).mock(
            return_value=httpx.Response(200, json=_google_body(29.753, -95.3597))
        )
        provider = GoogleGeocodingProvider("secret")

        async with httpx.AsyncClient() as client:
            coord = await provider.geocode(client, "1500 McKinney St, Houston, TX")

        assert coord == GeoCoordinate(29.753, -95.3597)
        params = route.calls.last.request.url.params
        assert params["address"] == "1500 McKinney St, Houston, TX"
        assert params["key"] == "secret"

    @pytest.mark.asyncio
    @respx.mock
    async def test_zero_results_status(self):
        respx.get(GOOGLE_URL).mock(
            return_value=httpx.Response(200, json={"status": "ZERO_RESULTS", "results": []})
        )
        provider = GoogleGeocodingProvider("secret")

        async with httpx.AsyncClient() as client:
            assert await provider.geocode(client, "nowhere") is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_zero_coordinates_are_absent(self):
        respx.get(GOOGLE_URL).mock(return_value=httpx.Response(200, json=_google_body(0, 0)))
        provider = GoogleGeocodingProvider("secret")

        async with httpx.AsyncClient() as client:
            assert await provider.geocode(client, "Null Island") is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_http_error_status(self):
        respx.get(GOOGLE_URL).mock(return_value=httpx.Response(500))
        provider = GoogleGeocodingProvider("secret")

        async with httpx.AsyncClient() as client:
            assert await provider.geocode(client, "Houston") is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_malformed_payload(self):
        respx.get(GOOGLE_URL).mock(
            return_value=httpx.Response(200, json={"status": "OK", "results": [{"geometry": {}}]})
        )
        provider = GoogleGeocodingProvider("secret")

        async with httpx.AsyncClient() as client:
            assert await provider.geocode(client, "Houston") is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_non_object_payload(self):
        respx.get(GOOGLE_URL).mock(return_value=httpx.Response(200, json=["unexpected"]))
        provider = GoogleGeocodingProvider("secret")

        async with httpx.AsyncClient() as client:
            assert await provider.geocode(client, "Houston") is None


class TestNominatimProvider:
    """Tests for NominatimGeocodingProvider."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_success_with_string_coordinates(self):
        route = respx.get(NOMINATIM_URL).mock(
            return_value=httpx.Response(200, json=[{"lat": "30.2672", "lon": "-97.7431"}])
        )
        provider = NominatimGeocodingProvider()

        async with httpx.AsyncClient() as client:
            coord = await provider.geocode(client, "Austin, TX, USA")

        assert coord == GeoCoordinate(30.2672, -97.7431)
        params = route.calls.last.request.url.params
        assert params["q"] == "Austin, TX, USA"
        assert params["format"] == "json"
        assert params["limit"] == "1"

    @pytest.mark.asyncio
    @respx.mock
    async def test_empty_result(self):
        respx.get(NOMINATIM_URL).mock(return_value=httpx.Response(200, json=[]))
        provider = NominatimGeocodingProvider()

        async with httpx.AsyncClient() as client:
            assert await provider.geocode(client, "nowhere") is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_blank_coordinates_are_absent(self):
        respx.get(NOMINATIM_URL).mock(
            return_value=httpx.Response(200, json=[{"lat": "", "lon": "-97.7431"}])
        )
        provider = NominatimGeocodingProvider()

        async with httpx.AsyncClient() as client:
            assert await provider.geocode(client, "Austin") is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_timeout(self):
        respx.get(NOMINATIM_URL).mock(side_effect=httpx.ReadTimeout("timed out"))
        provider = NominatimGeocodingProvider()

        async with httpx.AsyncClient() as client:
            assert await provider.geocode(client, "Austin") is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_connection_error(self):
        respx.get(NOMINATIM_URL).mock(side_effect=httpx.ConnectError("refused"))
        provider = NominatimGeocodingProvider()

        async with httpx.AsyncClient() as client:
            assert await provider.geocode(client, "Austin") is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_invalid_json(self):
        respx.get(NOMINATIM_URL).mock(return_value=httpx.Response(200, text="<html>busy</html>"))
        provider = NominatimGeocodingProvider()

        async with httpx.AsyncClient() as client:
            assert await provider.geocode(client, "Austin") is None
