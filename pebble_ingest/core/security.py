import binascii
import json
from typing import Any, Dict

from eth_keys import keys
from eth_keys.exceptions import BadSignature, ValidationError
from web3 import Web3

from pebble_ingest.core.errors import (
    CanonicalizationError,
    InvalidSignatureFormat,
    SignatureRecoveryFailed,
)

SIGNATURE_LENGTH = 65

# Go's encoding/json escapes these even inside otherwise valid UTF-8 strings.
_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def canonical_json(fields: Dict[str, Any]) -> bytes:
    """
    Serializes the signed fields exactly like the devices do:
    insertion order, no whitespace, raw UTF-8, HTML-sensitive characters escaped.
    """
    try:
        text = json.dumps(fields, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise CanonicalizationError("failed to process request data", cause=exc) from exc
    for char, escaped in _HTML_ESCAPES.items():
        text = text.replace(char, escaped)
    return text.encode("utf-8")


def decode_signature(signature: str) -> bytes:
    if not signature:
        raise InvalidSignatureFormat("invalid signature format", cause=ValueError("empty hex string"))
    if not signature.startswith(("0x", "0X")):
        raise InvalidSignatureFormat("invalid signature format", cause=ValueError("hex string without 0x prefix"))
    try:
        return binascii.unhexlify(signature[2:])
    except (binascii.Error, ValueError) as exc:
        raise InvalidSignatureFormat("invalid signature format", cause=exc) from exc


def recover_signer(fields: Dict[str, Any], signature: str) -> str:
    """
    fields: the request without its signature field, in declaration order
    signature: "0x"-prefixed hex of r || s || v, v in {0, 1}

    Returns the EIP-55 address whose key signed keccak256(canonical_json(fields)).
    """
    message = canonical_json(fields)
    raw = decode_signature(signature)
    if len(raw) != SIGNATURE_LENGTH:
        raise SignatureRecoveryFailed(
            "invalid signature; could not recover public key",
            cause=ValueError(f"invalid signature length {len(raw)}"),
        )

    digest = Web3.keccak(message)
    try:
        public_key = keys.Signature(signature_bytes=raw).recover_public_key_from_msg_hash(bytes(digest))
    except (BadSignature, ValidationError) as exc:
        raise SignatureRecoveryFailed("invalid signature; could not recover public key", cause=exc) from exc
    return public_key.to_checksum_address()
