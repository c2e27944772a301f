from typing import Any, Optional


class IngestError(Exception):
    """
    Base error for the ingestion pipeline.

    message: what failed, phrased as an operation ("failed to query device")
    cause:   the underlying exception, kept as __cause__ and rendered after the message
    context: identifiers for traceability (device_id, token_id, ...)
    """

    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str, cause: Optional[BaseException] = None, **context: Any):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.context = context
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        if self.cause is None:
            return self.message
        return f"{self.message}: {self.cause}"

    @property
    def is_client_error(self) -> bool:
        return self.status_code < 500

    def public_message(self) -> str:
        # Server-side causes stay in the logs.
        return str(self) if self.is_client_error else self.message


class ClientError(IngestError):
    status_code = 400
    code = "bad_request"


class InvalidRequest(ClientError):
    code = "invalid_request"


class InvalidSignatureFormat(ClientError):
    code = "invalid_signature_format"


class SignatureRecoveryFailed(ClientError):
    code = "signature_recovery_failed"


class DeviceNotFound(ClientError):
    code = "device_not_found"


class InvalidPayloadEncoding(ClientError):
    code = "invalid_payload_encoding"


class MalformedPayload(ClientError):
    code = "malformed_payload"


class UnknownEnvelopeType(ClientError):
    code = "unknown_envelope_type"


class PermissionDenied(IngestError):
    status_code = 403
    code = "permission_denied"


class CanonicalizationError(IngestError):
    code = "canonicalization_error"


class OracleError(IngestError):
    code = "oracle_error"


class OracleUnavailable(OracleError):
    code = "oracle_unavailable"


class OracleDataError(OracleError):
    code = "oracle_data_error"


class StoreError(IngestError):
    code = "store_error"


class DispatchError(IngestError):
    code = "dispatch_error"
