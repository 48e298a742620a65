"""
ViaCEP postal code lookup. Turns a CEP into street, neighborhood, city and state.
"""
import requests
import logging

from src.errors import RemoteFailure
from src.models.address import Address, normalize_postal_code

VIACEP_URL = "https://viacep.com.br/ws/{cep}/json/"
REQUEST_TIMEOUT = 10

logger = logging.getLogger(__name__)


def lookup_address(postal_code):
    """
    Look up the address for a postal code.

    Returns:
        Address, or None when ViaCEP reports the CEP as unknown

    Raises:
        RemoteFailure: the service could not be reached or answered garbage
    """
    cep = normalize_postal_code(postal_code)

    try:
        response = requests.get(VIACEP_URL.format(cep=cep), timeout=REQUEST_TIMEOUT)
        data = response.json()
    except requests.RequestException as e:
        logger.error(f"ViaCEP request failed for {cep}: {e}")
        raise RemoteFailure("Erro ao buscar CEP", str(e)) from e
    except ValueError as e:
        logger.error(f"ViaCEP returned invalid JSON for {cep}: {e}")
        raise RemoteFailure("Erro ao buscar CEP", str(e)) from e

    if not isinstance(data, dict) or data.get("erro"):
        logger.info(f"CEP {cep} not found")
        return None

    address = Address(
        postal_code=cep,
        street=data.get("logradouro") or "",
        neighborhood=data.get("bairro") or "",
        city=data.get("localidade") or "",
        state=data.get("uf") or "",
    )
    logger.info(f"CEP {cep} resolved to {address.street}, {address.city}/{address.state}")
    return address
