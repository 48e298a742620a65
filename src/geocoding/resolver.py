"""
Cascading address resolver.

A postal code is turned into an address with ViaCEP, then coordinates are looked
up with each provider in priority order until one of them answers:

    1. Geoapify, free-form address (only when an API key is configured)
    2. Nominatim, structured street/city/state query
    3. Nominatim, "city, state" query
    4. Nominatim, postal code query

When every provider comes back empty the caller is expected to let the user
pick the location by hand on the map.
"""
import logging
import os

from src.errors import RemoteFailure
from src.geocoding import geoapify, nominatim
from src.geocoding.viacep import lookup_address
from src.models.address import ResolveResult, normalize_postal_code
from src.models.notice import Notice

logger = logging.getLogger(__name__)


def first_success(attempts):
    """Call each attempt in order and return the first result that is not None."""
    for attempt in attempts:
        result = attempt()
        if result is not None:
            return result
    return None


def _tagged(provider, func, *args):
    def attempt():
        coords = func(*args)
        return (provider, coords) if coords is not None else None
    return attempt


class AddressResolver:
    def __init__(self, geoapify_key=None, notify=None):
        if geoapify_key is None:
            geoapify_key = os.getenv("GEOAPIFY_API_KEY", "")
        self.geoapify_key = geoapify_key
        self.notify = notify

    def _emit(self, result, notice):
        result.notices.append(notice)
        if self.notify:
            self.notify(notice)

    def attempts_for(self, address):
        """Ordered coordinate lookups for an address."""
        attempts = []
        if self.geoapify_key:
            attempts.append(_tagged(geoapify.PROVIDER_NAME, geoapify.geocode, address, self.geoapify_key))
        attempts.extend([
            _tagged(nominatim.PROVIDER_NAME, nominatim.search_structured,
                    address.street, address.city, address.state),
            _tagged(nominatim.PROVIDER_NAME, nominatim.search_city, address.city, address.state),
            _tagged(nominatim.PROVIDER_NAME, nominatim.search_postal_code, address.postal_code),
        ])
        return attempts

    def resolve(self, postal_code) -> ResolveResult:
        result = ResolveResult()
        cep = normalize_postal_code(postal_code)
        if not cep:
            return result

        logger.info(f"Resolving CEP {cep}")
        try:
            address = lookup_address(cep)
        except RemoteFailure as e:
            result.lookup_failed = True
            self._emit(result, Notice.error(e.title, e.description))
            return result

        if address is None:
            self._emit(result, Notice.error("CEP não encontrado"))
            return result

        result.address = address
        self._emit(result, Notice(title="Endereço encontrado!"))

        found = first_success(self.attempts_for(address))
        if found is None:
            logger.warning(f"No provider could geocode CEP {cep}")
            self._emit(result, Notice(
                title="Não foi possível obter coordenadas automaticamente",
                description="Clique no mapa para definir a localização manualmente.",
            ))
            return result

        result.provider, result.coordinates = found
        logger.info(f"CEP {cep} geocoded via {result.provider}: {result.coordinates.as_tuple()}")
        self._emit(result, Notice(title="Coordenadas encontradas!", description=f"Via {result.provider}"))
        return result
