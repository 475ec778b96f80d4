"""JSON-RPC error values and the errors of the DAS API endpoints."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

STANDARD_ERROR_CODE = -32000


@dataclass(frozen=True)
class ErrorCode:
    """A JSON-RPC error code."""

    code: int

    @classmethod
    def server_error(cls, code: int) -> ErrorCode:
        """An implementation-defined server error code."""
        return cls(code)


ErrorCode.PARSE_ERROR = ErrorCode(-32700)  # type: ignore[attr-defined]
ErrorCode.INVALID_REQUEST = ErrorCode(-32600)  # type: ignore[attr-defined]
ErrorCode.METHOD_NOT_FOUND = ErrorCode(-32601)  # type: ignore[attr-defined]
ErrorCode.INVALID_PARAMS = ErrorCode(-32602)  # type: ignore[attr-defined]
ErrorCode.INTERNAL_ERROR = ErrorCode(-32603)  # type: ignore[attr-defined]


@dataclass(eq=True)
class JsonRpcError(Exception):
    """An error returned to a JSON-RPC client."""

    code: ErrorCode
    message: str
    data: Any = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    __hash__ = None  # type: ignore[assignment]

    @classmethod
    def internal_error(cls) -> JsonRpcError:
        return cls(ErrorCode.INTERNAL_ERROR, "Internal error")  # type: ignore[attr-defined]

    @classmethod
    def invalid_params(cls, message: str) -> JsonRpcError:
        return cls(ErrorCode.INVALID_PARAMS, f"Invalid params: {message}.")  # type: ignore[attr-defined]

    @classmethod
    def method_not_found(cls) -> JsonRpcError:
        return cls(ErrorCode.METHOD_NOT_FOUND, "Method not found")  # type: ignore[attr-defined]

    def to_json(self) -> dict:
        """Return the error object of a JSON-RPC response."""
        out: dict[str, Any] = {"code": self.code.code, "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        return out


class DasApiErrorKind(Enum):
    NO_DATA_FOUND = "no_data_found"
    PUBKEY_VALIDATION = "pubkey_validation"
    DATABASE = "database"
    JSON_METADATA_PARSING = "json_metadata_parsing"
    LIMIT_TOO_BIG = "limit_too_big"
    PAGE_TOO_BIG = "page_too_big"


class DasApiError(Exception):
    """A failure of a DAS API request."""

    def __init__(self, kind: DasApiErrorKind, value: Any = None) -> None:
        self.kind = kind
        self.value = value
        super().__init__(self._message())

    @classmethod
    def no_data_found(cls) -> DasApiError:
        return cls(DasApiErrorKind.NO_DATA_FOUND)

    @classmethod
    def pubkey_validation(cls, key: str) -> DasApiError:
        return cls(DasApiErrorKind.PUBKEY_VALIDATION, key)

    @classmethod
    def database(cls) -> DasApiError:
        return cls(DasApiErrorKind.DATABASE)

    @classmethod
    def json_metadata_parsing(cls) -> DasApiError:
        return cls(DasApiErrorKind.JSON_METADATA_PARSING)

    @classmethod
    def limit_too_big(cls, max_limit: int) -> DasApiError:
        return cls(DasApiErrorKind.LIMIT_TOO_BIG, max_limit)

    @classmethod
    def page_too_big(cls, max_page: int) -> DasApiError:
        return cls(DasApiErrorKind.PAGE_TOO_BIG, max_page)

    def _message(self) -> str:
        kind, value = self.kind, self.value
        if kind is DasApiErrorKind.NO_DATA_FOUND:
            return "No data found."
        if kind is DasApiErrorKind.PUBKEY_VALIDATION:
            return f"Pubkey Validation Err: {value} is invalid"
        if kind is DasApiErrorKind.DATABASE:
            return "Database Error"
        if kind is DasApiErrorKind.JSON_METADATA_PARSING:
            return "Failed to parse Json metadata."
        if kind is DasApiErrorKind.LIMIT_TOO_BIG:
            return f"Requested limit number is too big. Up to '{value}' limit is supported."
        return (
            f"Page number is too big. Up to '{value}' pages are supported with this kind of pagination. "
            "Please use a different pagination(before/after/cursor)."
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DasApiError):
            return NotImplemented
        return (self.kind, self.value) == (other.kind, other.value)

    def __hash__(self) -> int:
        return hash((self.kind, self.value))

    def to_rpc_error(self) -> JsonRpcError:
        """Return the JSON-RPC error sent to the client for this failure."""
        server = ErrorCode.server_error(STANDARD_ERROR_CODE)
        kind, value = self.kind, self.value
        if kind is DasApiErrorKind.NO_DATA_FOUND:
            return JsonRpcError(server, "Database Error: RecordNotFound Error: Asset Not Found")
        if kind is DasApiErrorKind.PUBKEY_VALIDATION:
            return JsonRpcError(server, f"Pubkey Validation Error: {value} is invalid")
        if kind is DasApiErrorKind.DATABASE:
            return JsonRpcError.internal_error()
        if kind is DasApiErrorKind.JSON_METADATA_PARSING:
            return JsonRpcError(ErrorCode.PARSE_ERROR, "Failed to parse Json metadata.")  # type: ignore[attr-defined]
        if kind is DasApiErrorKind.LIMIT_TOO_BIG:
            return JsonRpcError(
                server, f"Requested limit number is too big. Up to '{value}' limit is supported."
            )
        return JsonRpcError(
            server,
            "\n                    "
            f"Page number is too big. Up to '{value}' pages are supported with this kind of pagination.\n"
            "                    Please use a different pagination(before/after/cursor).\n"
            "                ",
        )