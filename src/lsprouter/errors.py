# ==============================================================================
#                  © 2025 Dedalus Labs, Inc. and affiliates
#                            Licensed under MIT
#               github.com/dedalus-labs/openmcp-python/LICENSE
# ==============================================================================

"""Structured protocol errors.

Errors travel on the JSON-RPC ``ErrorData`` shape (numeric code, message,
optional data) provided by the reference ``mcp`` SDK. :class:`ResponseError`
is what handlers raise (or return) to fail a single request;
:class:`AwsResponseError` additionally carries a vendor error code string under
``data.awsErrorCode`` drawn from :class:`AwsErrorCodes`.
"""

from __future__ import annotations

from enum import IntEnum, StrEnum
from typing import Any

from mcp import types
from mcp.shared.exceptions import McpError


class LspErrorCodes(IntEnum):
    """Error codes reserved by the language server protocol."""

    REQUEST_FAILED = -32803
    SERVER_CANCELLED = -32802
    CONTENT_MODIFIED = -32801
    REQUEST_CANCELLED = -32800


class AwsErrorCodes(StrEnum):
    E_CANNOT_CREATE_PROFILE = "E_CANNOT_CREATE_PROFILE"
    E_CANNOT_CREATE_SSO_SESSION = "E_CANNOT_CREATE_SSO_SESSION"
    E_CANNOT_OVERWRITE_PROFILE = "E_CANNOT_OVERWRITE_PROFILE"
    E_CANNOT_OVERWRITE_SSO_SESSION = "E_CANNOT_OVERWRITE_SSO_SESSION"
    E_CANNOT_READ_SHARED_CONFIG = "E_CANNOT_READ_SHARED_CONFIG"
    E_CANNOT_READ_SSO_CACHE = "E_CANNOT_READ_SSO_CACHE"
    E_CANNOT_READ_STS_CACHE = "E_CANNOT_READ_STS_CACHE"
    E_CANNOT_REFRESH_SSO_TOKEN = "E_CANNOT_REFRESH_SSO_TOKEN"
    E_CANNOT_REFRESH_STS_CREDENTIAL = "E_CANNOT_REFRESH_STS_CREDENTIAL"
    E_CANNOT_REGISTER_CLIENT = "E_CANNOT_REGISTER_CLIENT"
    E_CANNOT_CREATE_SSO_TOKEN = "E_CANNOT_CREATE_SSO_TOKEN"
    E_CANNOT_CREATE_STS_CREDENTIAL = "E_CANNOT_CREATE_STS_CREDENTIAL"
    E_CANNOT_WRITE_SHARED_CONFIG = "E_CANNOT_WRITE_SHARED_CONFIG"
    E_CANNOT_WRITE_SSO_CACHE = "E_CANNOT_WRITE_SSO_CACHE"
    E_CANNOT_WRITE_STS_CACHE = "E_CANNOT_WRITE_STS_CACHE"
    E_ENCRYPTION_REQUIRED = "E_ENCRYPTION_REQUIRED"
    E_INVALID_PROFILE = "E_INVALID_PROFILE"
    E_INVALID_SSO_CLIENT = "E_INVALID_SSO_CLIENT"
    E_INVALID_SSO_SESSION = "E_INVALID_SSO_SESSION"
    E_INVALID_SSO_TOKEN = "E_INVALID_SSO_TOKEN"
    E_INVALID_STS_CREDENTIAL = "E_INVALID_STS_CREDENTIAL"
    E_PROFILE_NOT_FOUND = "E_PROFILE_NOT_FOUND"
    E_RUNTIME_NOT_SUPPORTED = "E_RUNTIME_NOT_SUPPORTED"
    E_SSO_SESSION_NOT_FOUND = "E_SSO_SESSION_NOT_FOUND"
    E_SSO_TOKEN_EXPIRED = "E_SSO_TOKEN_EXPIRED"
    E_STS_CREDENTIAL_EXPIRED = "E_STS_CREDENTIAL_EXPIRED"
    E_SSO_TOKEN_SOURCE_NOT_SUPPORTED = "E_SSO_TOKEN_SOURCE_NOT_SUPPORTED"
    E_CALLER_IDENTITY_NOT_FOUND = "E_CALLER_IDENTITY_NOT_FOUND"
    E_MFA_REQUIRED = "E_MFA_REQUIRED"
    E_PERMISSION_DENIED = "E_PERMISSION_DENIED"
    E_TIMEOUT = "E_TIMEOUT"
    E_UNKNOWN = "E_UNKNOWN"
    E_CANCELLED = "E_CANCELLED"


class ResponseError(McpError):
    """A request failure reported back to the client as a JSON-RPC error."""

    def __init__(self, code: int, message: str, data: Any | None = None) -> None:
        super().__init__(types.ErrorData(code=int(code), message=message, data=data))

    @property
    def code(self) -> int:
        return self.error.code

    @property
    def message(self) -> str:
        return self.error.message

    @property
    def data(self) -> Any | None:
        return self.error.data

    def to_dict(self) -> dict[str, Any]:
        return self.error.model_dump(exclude_none=True)


class AwsResponseError(ResponseError):
    def __init__(
        self, message: str, aws_error_code: AwsErrorCodes | str, code: int = LspErrorCodes.REQUEST_FAILED
    ) -> None:
        super().__init__(code, message, {"awsErrorCode": str(aws_error_code)})

    @property
    def aws_error_code(self) -> str:
        return self.data["awsErrorCode"]


def as_response_error(exc: BaseException, *, message: str | None = None) -> ResponseError:
    """Return *exc* unchanged if it already is a :class:`ResponseError`, else wrap it."""
    if isinstance(exc, ResponseError):
        return exc
    if isinstance(exc, McpError):
        return ResponseError(exc.error.code, exc.error.message, exc.error.data)
    wrapped = ResponseError(types.INTERNAL_ERROR, message or str(exc) or type(exc).__name__)
    wrapped.__cause__ = exc
    return wrapped


__all__ = ["AwsErrorCodes", "AwsResponseError", "LspErrorCodes", "ResponseError", "as_response_error"]
