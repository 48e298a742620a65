"""
Nominatim Geocoding
-----------------
Free fallback provider. Forward-geocodes an address with OpenStreetMap's Nominatim
search API using three query shapes of decreasing precision, each one rate limited
by a fixed delay.
"""
import requests
import time
import logging
import os
from typing import Optional
from urllib.parse import quote

from src.models.address import Coordinates, normalize_postal_code

# Constants
NOMINATIM_SEARCH_URL = "https://nominatim.openstreetmap.org/search"
USER_AGENT = "IPR-Sinop-Connect/1.0"
REQUEST_TIMEOUT = 10
RATE_LIMIT_DELAY = 1.0
COUNTRY = "Brasil"
PROVIDER_NAME = "OpenStreetMap"

# Optional CORS relay prefix, e.g. "https://corsproxy.io/?"
CORS_PROXY = os.getenv("NOMINATIM_CORS_PROXY", "")

# Get logger
logger = logging.getLogger(__name__)


def _build_url(params):
    url = requests.Request("GET", NOMINATIM_SEARCH_URL, params=params).prepare().url
    if CORS_PROXY:
        return CORS_PROXY + quote(url, safe="")
    return url


def _first_candidate(data) -> Optional[Coordinates]:
    if not isinstance(data, list) or not data:
        return None
    lat = data[0].get("lat")
    lon = data[0].get("lon")
    if not lat or not lon:
        return None
    return Coordinates(latitude=float(lat), longitude=float(lon))


def _search(params, label):
    # Nominatim usage policy: at most one request per second
    time.sleep(RATE_LIMIT_DELAY)

    try:
        response = requests.get(
            _build_url(params),
            headers={"User-Agent": USER_AGENT},
            timeout=REQUEST_TIMEOUT
        )
        response.raise_for_status()
        coords = _first_candidate(response.json())
    except requests.RequestException as e:
        logger.warning(f"Nominatim {label} search failed: {e}")
        return None
    except (ValueError, TypeError, AttributeError) as e:
        logger.warning(f"Nominatim {label} search returned an unreadable payload: {e}")
        return None

    if coords:
        logger.info(f"Nominatim {label} search found ({coords.latitude}, {coords.longitude})")
    else:
        logger.info(f"Nominatim {label} search returned no candidates")
    return coords


def search_structured(street, city, state):
    """Structured street/city/state query. Skipped unless all three are known."""
    if not (street and city and state):
        return None

    params = {
        "format": "json",
        "street": street,
        "city": city,
        "state": state,
        "country": COUNTRY,
        "limit": 1,
        "addressdetails": 1,
    }
    return _search(params, "structured")


def search_city(city, state):
    """City-level query, approximate but usually available."""
    if not (city and state):
        return None

    params = {
        "format": "json",
        "limit": 1,
        "q": f"{city}, {state}, {COUNTRY}",
    }
    return _search(params, "city")


def search_postal_code(postal_code):
    params = {
        "format": "json",
        "limit": 1,
        "postalcode": normalize_postal_code(postal_code),
        "country": "Brazil",
    }
    return _search(params, "postal code")
