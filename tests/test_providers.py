"""
ViaCEP and Geoapify client tests.
"""
import pytest
from unittest.mock import patch

import requests

from src.errors import RemoteFailure
from src.geocoding import geoapify
from src.geocoding.viacep import lookup_address
from src.models.address import Address
from http_fakes import FakeResponse

VIACEP_SINOP = {
    "cep": "78550-000",
    "logradouro": "Avenida das Itaúbas",
    "bairro": "Setor Comercial",
    "localidade": "Sinop",
    "uf": "MT",
}


class TestViaCep:
    def test_maps_fields(self):
        with patch("requests.get", return_value=FakeResponse(VIACEP_SINOP)) as get:
            address = lookup_address("78550-000")

        assert get.call_args[0][0] == "https://viacep.com.br/ws/78550000/json/"
        assert address == Address(
            postal_code="78550000",
            street="Avenida das Itaúbas",
            neighborhood="Setor Comercial",
            city="Sinop",
            state="MT",
        )

    def test_missing_fields_become_empty(self):
        with patch("requests.get", return_value=FakeResponse({"localidade": "Sinop", "uf": "MT"})):
            address = lookup_address("78550000")
        assert address.street == ""
        assert address.neighborhood == ""

    def test_not_found(self):
        with patch("requests.get", return_value=FakeResponse({"erro": True})):
            assert lookup_address("00000-000") is None

    def test_network_failure_raises(self):
        with patch("requests.get", side_effect=requests.ConnectionError("offline")):
            with pytest.raises(RemoteFailure) as exc:
                lookup_address("78550-000")
        assert exc.value.title == "Erro ao buscar CEP"


class TestGeoapify:
    address = Address(postal_code="78550000", street="Avenida das Itaúbas", city="Sinop", state="MT")

    def test_query_skips_empty_parts(self):
        assert geoapify.build_query(Address(city="Sinop", state="MT")) == "Sinop, MT, Brasil"

    def test_swaps_lon_lat(self):
        payload = {"features": [{"geometry": {"coordinates": [-55.5091, -11.8604]}, "properties": {}}]}
        with patch("requests.get", return_value=FakeResponse(payload)) as get:
            coords = geoapify.geocode(self.address, "secret")

        assert coords.as_tuple() == (-11.8604, -55.5091)
        params = get.call_args[1]["params"]
        assert params["text"] == "Avenida das Itaúbas, Sinop, MT, Brasil"
        assert params["filter"] == "countrycode:br"
        assert params["bias"] == "countrycode:br"
        assert params["apiKey"] == "secret"

    def test_no_features(self):
        with patch("requests.get", return_value=FakeResponse({"features": []})):
            assert geoapify.geocode(self.address, "secret") is None

    def test_failure_is_no_result(self):
        with patch("requests.get", side_effect=requests.Timeout("slow")):
            assert geoapify.geocode(self.address, "secret") is None

    def test_unauthorized_is_no_result(self):
        with patch("requests.get", return_value=FakeResponse({"error": "Unauthorized"}, status_code=401)):
            assert geoapify.geocode(self.address, "bad-key") is None
