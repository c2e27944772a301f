import pytest
import requests
from web3 import Web3
from web3.exceptions import ContractLogicError

from pebble_ingest.core.config import settings
from pebble_ingest.core.errors import OracleDataError, OracleUnavailable
from pebble_ingest.services.oracle import Web3OwnershipOracle


class StubCall:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error

    def call(self):
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def chain_oracle():
    return Web3OwnershipOracle.from_settings(settings)


def test_contracts_are_bound_to_checksum_addresses(chain_oracle):
    assert chain_oracle.ioid.address == Web3.to_checksum_address(settings.IOID_CONTRACT_ADDR)
    assert chain_oracle.registry.address == Web3.to_checksum_address(settings.IOID_REGISTRY_CONTRACT_ADDR)


def test_call_returns_the_result(chain_oracle):
    assert chain_oracle._call(StubCall(result=7), "failed to query device token id") == 7


def test_reverted_call_is_a_data_error(chain_oracle):
    with pytest.raises(OracleDataError) as exc_info:
        chain_oracle._call(StubCall(error=ContractLogicError("execution reverted")), "failed to query device owner", token_id=0)
    assert exc_info.value.context == {"token_id": 0}
    assert exc_info.value.status_code == 500


def test_transport_failure_is_unavailable(chain_oracle):
    with pytest.raises(OracleUnavailable):
        chain_oracle._call(StubCall(error=requests.ConnectionError("refused")), "failed to query device token id")


def test_owner_is_returned_checksummed(chain_oracle, monkeypatch):
    owner = "0x5a8b3e2c4d1f6a7b8c9d0e1f2a3b4c5d6e7f8a9b"
    monkeypatch.setattr(chain_oracle, "_call", lambda function, message, **context: owner)

    assert chain_oracle.owner_of(7) == Web3.to_checksum_address(owner)


def test_json_rpc_error_response_is_unavailable(chain_oracle):
    rate_limited = ValueError({"code": -32005, "message": "rate limited"})

    with pytest.raises(OracleUnavailable) as exc_info:
        chain_oracle._call(StubCall(error=rate_limited), "failed to query device token id")
    assert exc_info.value.__cause__ is rate_limited
