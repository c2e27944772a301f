import pytest

from pebble_ingest.core.errors import (
    CanonicalizationError,
    InvalidSignatureFormat,
    SignatureRecoveryFailed,
)
from pebble_ingest.core.security import canonical_json, decode_signature, recover_signer


def test_canonical_json_is_compact_and_ordered():
    fields = {"deviceID": "did:io:0xabc", "payload": "CAIQ"}
    assert canonical_json(fields) == b'{"deviceID":"did:io:0xabc","payload":"CAIQ"}'


def test_canonical_json_escapes_like_go():
    assert canonical_json({"deviceID": "<a&b>"}) == b'{"deviceID":"\\u003ca\\u0026b\\u003e"}'
    assert canonical_json({"deviceID": "caf\u00e9\u2028"}) == b'{"deviceID":"caf\xc3\xa9\\u2028"}'


def test_canonical_json_rejects_unserializable_fields():
    with pytest.raises(CanonicalizationError):
        canonical_json({"deviceID": object()})


def test_recover_signer_returns_checksum_address(owner):
    fields = {"deviceID": "did:io:0xabc"}
    assert recover_signer(fields, owner.sign(fields)) == owner.address


def test_uppercase_prefix_is_accepted(owner):
    fields = {"deviceID": "did:io:0xabc"}
    signature = "0X" + owner.sign(fields)[2:]
    assert recover_signer(fields, signature) == owner.address


@pytest.mark.parametrize(
    "tampered",
    [
        {"deviceID": "did:io:0xabd", "payload": "CAIQ"},
        {"deviceID": "did:io:0xabc", "payload": "CAIR"},
    ],
)
def test_tampered_fields_recover_another_address(owner, tampered):
    signature = owner.sign({"deviceID": "did:io:0xabc", "payload": "CAIQ"})
    assert recover_signer(tampered, signature) != owner.address


def test_field_order_is_part_of_the_signed_message(owner):
    signature = owner.sign({"deviceID": "d", "payload": "p"})
    assert recover_signer({"payload": "p", "deviceID": "d"}, signature) != owner.address


@pytest.mark.parametrize("signature", ["", "abcd", "0xabc", "0xzz", "0x 12"])
def test_malformed_hex_is_a_format_error(signature):
    with pytest.raises(InvalidSignatureFormat):
        decode_signature(signature)


def test_wrong_length_fails_recovery(owner):
    fields = {"deviceID": "x"}
    with pytest.raises(SignatureRecoveryFailed):
        recover_signer(fields, owner.sign(fields)[:-2])


def test_invalid_recovery_id_fails_recovery(owner):
    fields = {"deviceID": "x"}
    signature = owner.sign(fields)
    with pytest.raises(SignatureRecoveryFailed):
        recover_signer(fields, signature[:-2] + "1b")


def test_signature_errors_are_client_errors():
    assert InvalidSignatureFormat("x").status_code == 400
    assert SignatureRecoveryFailed("x").status_code == 400
