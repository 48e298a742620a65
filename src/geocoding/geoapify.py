"""
Geoapify forward geocoding, the primary (keyed) coordinate provider.
"""
import requests
import logging
from typing import Optional

from src.models.address import Coordinates

GEOAPIFY_SEARCH_URL = "https://api.geoapify.com/v1/geocode/search"
REQUEST_TIMEOUT = 10
PROVIDER_NAME = "Geoapify API"

logger = logging.getLogger(__name__)


def build_query(address):
    parts = [address.street, address.city, address.state, "Brasil"]
    return ", ".join(part for part in parts if part)


def geocode(address, api_key) -> Optional[Coordinates]:
    """Free-form search restricted to Brazil. Any failure yields None."""
    params = {
        "text": build_query(address),
        "apiKey": api_key,
        "lang": "pt",
        "limit": 1,
        "filter": "countrycode:br",
        "bias": "countrycode:br",
    }

    try:
        response = requests.get(GEOAPIFY_SEARCH_URL, params=params, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        features = response.json().get("features") or []
        if not features:
            logger.info(f"Geoapify returned no results for '{params['text']}'")
            return None

        # GeoJSON order is (lon, lat)
        lon, lat = features[0]["geometry"]["coordinates"][:2]
        coords = Coordinates(latitude=lat, longitude=lon)
        logger.info(f"Geoapify found ({coords.latitude}, {coords.longitude}) for '{params['text']}'")
        return coords
    except requests.RequestException as e:
        logger.warning(f"Geoapify request failed: {e}")
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        logger.warning(f"Geoapify returned an unreadable payload: {e}")
    return None
