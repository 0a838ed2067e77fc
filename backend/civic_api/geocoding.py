"""Best-effort reverse geocoding against a Nominatim-compatible endpoint.

Lookups never raise: any transport, HTTP or payload problem is logged and
reported as an unresolved result so callers can fall back to manual entry.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional
import logging

import httpx

from .config import get_settings

logger = logging.getLogger("app.geocoding")


@dataclass
class GeocodeResult:
    latitude: float
    longitude: float
    resolved: bool = False
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def parse_nominatim(latitude: float, longitude: float, payload: Dict[str, Any]) -> GeocodeResult:
    address = payload.get("address")
    if not isinstance(address, dict):
        return GeocodeResult(latitude=latitude, longitude=longitude)
    return GeocodeResult(
        latitude=latitude,
        longitude=longitude,
        resolved=True,
        address=payload.get("display_name") or None,
        city=address.get("city") or address.get("town") or address.get("village") or None,
        state=address.get("state") or None,
        pincode=address.get("postcode") or None,
    )


async def reverse_geocode(
    latitude: float,
    longitude: float,
    client: Optional[httpx.AsyncClient] = None,
) -> GeocodeResult:
    settings = get_settings()
    params = {"format": "json", "lat": latitude, "lon": longitude}
    headers = {"User-Agent": settings.geocoder_user_agent}

    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=settings.geocoder_timeout)
    try:
        resp = await client.get(settings.geocoder_url, params=params, headers=headers)
        resp.raise_for_status()
        payload = resp.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("Reverse geocoding failed for (%s, %s): %s", latitude, longitude, exc)
        return GeocodeResult(latitude=latitude, longitude=longitude)
    finally:
        if owns_client:
            await client.aclose()

    if not isinstance(payload, dict):
        return GeocodeResult(latitude=latitude, longitude=longitude)
    return parse_nominatim(latitude, longitude, payload)
