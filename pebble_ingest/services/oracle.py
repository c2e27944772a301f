import logging

from requests.exceptions import RequestException
from web3 import Web3
from web3.exceptions import BadFunctionCallOutput, ContractLogicError, Web3Exception

from pebble_ingest.core.errors import OracleDataError, OracleUnavailable

logger = logging.getLogger(__name__)

IOID_REGISTRY_ABI = [
    {
        "inputs": [{"internalType": "address", "name": "device", "type": "address"}],
        "name": "deviceTokenId",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
]

IOID_ABI = [
    {
        "inputs": [{"internalType": "uint256", "name": "tokenId", "type": "uint256"}],
        "name": "ownerOf",
        "outputs": [{"internalType": "address", "name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
]


class OwnershipOracle:
    """Read-only view of on-chain device ownership."""

    def token_for_device(self, device_address: str) -> int:
        raise NotImplementedError

    def owner_of(self, token_id: int) -> str:
        raise NotImplementedError


class Web3OwnershipOracle(OwnershipOracle):
    """
    ioID registry (device address -> token id) plus the ioID ERC-721
    (token id -> owner), queried with eth_call over JSON-RPC.
    """

    def __init__(self, w3: Web3, ioid_address: str, ioid_registry_address: str):
        self.w3 = w3
        self.ioid = w3.eth.contract(address=Web3.to_checksum_address(ioid_address), abi=IOID_ABI)
        self.registry = w3.eth.contract(
            address=Web3.to_checksum_address(ioid_registry_address), abi=IOID_REGISTRY_ABI
        )

    @classmethod
    def from_settings(cls, settings) -> "Web3OwnershipOracle":
        w3 = Web3(
            Web3.HTTPProvider(
                settings.CHAIN_ENDPOINT,
                request_kwargs={"timeout": settings.CHAIN_REQUEST_TIMEOUT},
            )
        )
        logger.info("Ownership oracle using %s", settings.CHAIN_ENDPOINT)
        return cls(w3, settings.IOID_CONTRACT_ADDR, settings.IOID_REGISTRY_CONTRACT_ADDR)

    def _call(self, function, message: str, **context):
        try:
            return function.call()
        except (ContractLogicError, BadFunctionCallOutput) as exc:
            raise OracleDataError(message, cause=exc, **context) from exc
        # web3 6.x reports JSON-RPC error responses as a plain ValueError.
        except (Web3Exception, RequestException, OSError, ValueError) as exc:
            raise OracleUnavailable(message, cause=exc, **context) from exc

    def token_for_device(self, device_address: str) -> int:
        return self._call(
            self.registry.functions.deviceTokenId(Web3.to_checksum_address(device_address)),
            "failed to query device token id",
            device_address=device_address,
        )

    def owner_of(self, token_id: int) -> str:
        owner = self._call(
            self.ioid.functions.ownerOf(token_id),
            "failed to query device owner",
            token_id=token_id,
        )
        return Web3.to_checksum_address(owner)
