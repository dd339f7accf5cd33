from __future__ import annotations

from mcp import types as jsonrpc
from mcp.shared.exceptions import McpError

from lsprouter.errors import AwsErrorCodes, AwsResponseError, LspErrorCodes, ResponseError, as_response_error


def test_response_error_is_an_mcp_error() -> None:
    error = ResponseError(111, "failed", {"retry": False})

    assert isinstance(error, McpError)
    assert (error.code, error.message, error.data) == (111, "failed", {"retry": False})
    assert error.to_dict() == {"code": 111, "message": "failed", "data": {"retry": False}}


def test_aws_response_error_carries_vendor_code() -> None:
    error = AwsResponseError("profile missing", AwsErrorCodes.E_PROFILE_NOT_FOUND)

    assert error.code == LspErrorCodes.REQUEST_FAILED
    assert error.aws_error_code == "E_PROFILE_NOT_FOUND"
    assert error.data == {"awsErrorCode": "E_PROFILE_NOT_FOUND"}


def test_as_response_error_passes_response_errors_through() -> None:
    error = ResponseError(jsonrpc.INVALID_PARAMS, "bad")

    assert as_response_error(error) is error


def test_as_response_error_converts_mcp_errors() -> None:
    converted = as_response_error(McpError(jsonrpc.ErrorData(code=jsonrpc.INVALID_REQUEST, message="nope")))

    assert isinstance(converted, ResponseError)
    assert converted.code == jsonrpc.INVALID_REQUEST
    assert converted.message == "nope"


def test_as_response_error_wraps_other_exceptions() -> None:
    cause = ValueError("broken")

    wrapped = as_response_error(cause)

    assert wrapped.code == jsonrpc.INTERNAL_ERROR
    assert wrapped.message == "broken"
    assert wrapped.__cause__ is cause
    assert as_response_error(KeyError(), message="lookup failed").message == "lookup failed"
    assert as_response_error(RuntimeError()).message == "RuntimeError"
