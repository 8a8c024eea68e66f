from __future__ import annotations

from .const import ErrorCode


class SourceVerifyError(Exception):
    """Base failure of a source resolution."""

    code: ErrorCode = ErrorCode.E_PROTOCOL

    def to_json(self) -> dict:
        return {"code": self.code.value, "message": str(self)}


class NetworkError(SourceVerifyError):
    """Transport failure talking to the TON node."""

    code = ErrorCode.E_NETWORK


class ProtocolError(SourceVerifyError):
    """Node answered, but not in the shape we expect."""

    code = ErrorCode.E_PROTOCOL


class DecodeError(SourceVerifyError):
    """Source item content cell could not be decoded."""

    code = ErrorCode.E_DECODE


class NotFoundError(SourceVerifyError):
    """No verified sources are registered for the code hash."""

    code = ErrorCode.E_NOT_FOUND


class ManifestError(SourceVerifyError):
    """Manifest JSON is missing required fields."""

    code = ErrorCode.E_MANIFEST


class FetchError(SourceVerifyError):
    """Manifest or source file could not be fetched."""

    code = ErrorCode.E_FETCH
