"""Translation of OpenAI API failures into MCP errors and user-facing text.

Clients rely on these exact messages to tell a bad key from a missing
permission from an unavailable feature, so the wording is fixed.
"""

from enum import Enum

from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, ErrorData

from svelte_docs_mcp.mcp_server.client import IngestionTimeoutError, OpenAIAPIError

INVALID_API_KEY_MESSAGE = (
    "Invalid OpenAI API key. Please check your API key and try again."
)
ACCOUNT_PERMISSION_MESSAGE = (
    "Your OpenAI account does not have permission to use this API. "
    "Please check your account permissions."
)
RETRIEVAL_PERMISSION_MESSAGE = (
    "Your OpenAI account does not have permission to use the Retrieval API. "
    "This feature may require a specific account tier or beta access."
)
RETRIEVAL_UNAVAILABLE_MESSAGE = (
    "The Retrieval API endpoint was not found. "
    "This feature may not be available yet for your account or is in beta."
)
VECTOR_STORE_NOT_FOUND_MESSAGE = (
    "Vector store not found. It may have been deleted or is not accessible."
)
FILES_ACCESS_MESSAGE = (
    "Your OpenAI API key does not have access to the Files API or Retrieval API."
)


class ErrorKind(str, Enum):
    """Categories of failure surfaced to MCP clients."""

    INVALID_PARAMS = "invalid_params"
    INVALID_CREDENTIAL = "invalid_credential"
    INSUFFICIENT_PERMISSION = "insufficient_permission"
    RESOURCE_NOT_FOUND = "resource_not_found"
    INGESTION_TIMEOUT = "ingestion_timeout"
    INTERNAL_ERROR = "internal_error"


class Operation(str, Enum):
    """Provider operations with their own error wording."""

    VALIDATE_KEY = "validate_key"
    ACCESS_PROBE = "access_probe"
    INITIALIZE = "initialize"
    DOWNLOAD = "download"
    UPLOAD = "upload"
    SEARCH = "search"
    LIST_FILES = "list_files"


class RetrievalError(Exception):
    """A translated failure with a kind, a JSON-RPC code and final wording."""

    def __init__(self, kind: ErrorKind, message: str, code: int | None = None):
        self.kind = kind
        self.message = message
        self.code = code if code is not None else _DEFAULT_CODES[kind]
        super().__init__(message)

    def to_mcp_error(self) -> McpError:
        """Convert to the protocol-level error sent back to the client."""
        return McpError(ErrorData(code=self.code, message=self.message))


_DEFAULT_CODES = {
    ErrorKind.INVALID_PARAMS: INVALID_PARAMS,
    ErrorKind.INVALID_CREDENTIAL: INVALID_PARAMS,
    ErrorKind.INSUFFICIENT_PERMISSION: INVALID_PARAMS,
    ErrorKind.RESOURCE_NOT_FOUND: INTERNAL_ERROR,
    ErrorKind.INGESTION_TIMEOUT: INTERNAL_ERROR,
    ErrorKind.INTERNAL_ERROR: INTERNAL_ERROR,
}

_INVALID_KEY = (ErrorKind.INVALID_CREDENTIAL, INVALID_API_KEY_MESSAGE, None)
_NO_RETRIEVAL = (ErrorKind.INSUFFICIENT_PERMISSION, RETRIEVAL_PERMISSION_MESSAGE, None)
_STORE_GONE = (ErrorKind.RESOURCE_NOT_FOUND, VECTOR_STORE_NOT_FOUND_MESSAGE, None)

# Per operation: status code -> (kind, message, code override)
_STATUS_MESSAGES: dict[Operation, dict[int, tuple[ErrorKind, str, int | None]]] = {
    Operation.VALIDATE_KEY: {
        401: _INVALID_KEY,
        403: (ErrorKind.INSUFFICIENT_PERMISSION, ACCOUNT_PERMISSION_MESSAGE, None),
    },
    Operation.ACCESS_PROBE: {
        401: _INVALID_KEY,
        403: _NO_RETRIEVAL,
        404: (ErrorKind.RESOURCE_NOT_FOUND, RETRIEVAL_UNAVAILABLE_MESSAGE, INVALID_PARAMS),
    },
    Operation.INITIALIZE: {401: _INVALID_KEY, 403: _NO_RETRIEVAL},
    Operation.DOWNLOAD: {},
    Operation.UPLOAD: {
        401: (ErrorKind.INVALID_CREDENTIAL, FILES_ACCESS_MESSAGE, None),
    },
    Operation.SEARCH: {401: _INVALID_KEY, 403: _NO_RETRIEVAL, 404: _STORE_GONE},
    Operation.LIST_FILES: {401: _INVALID_KEY, 403: _NO_RETRIEVAL, 404: _STORE_GONE},
}

# Fallback wording; the provider's own text is appended verbatim
_FALLBACK_PREFIXES = {
    Operation.VALIDATE_KEY: "Failed to validate OpenAI API key",
    Operation.ACCESS_PROBE: "Failed to access Retrieval API",
    Operation.INITIALIZE: "Failed to initialize OpenAI vector store",
    Operation.DOWNLOAD: "Failed to download documentation",
    Operation.UPLOAD: "Failed to process documentation",
    Operation.SEARCH: "Search failed",
    Operation.LIST_FILES: "Failed to list files",
}


def translate_api_error(error: OpenAIAPIError, operation: Operation) -> RetrievalError:
    """Map a client failure during ``operation`` to a ``RetrievalError``."""
    if isinstance(error, IngestionTimeoutError):
        return RetrievalError(ErrorKind.INGESTION_TIMEOUT, error.message)

    mapped = _STATUS_MESSAGES[operation].get(error.status_code)
    if mapped:
        kind, message, code = mapped
        return RetrievalError(kind, message, code)

    return RetrievalError(
        ErrorKind.INTERNAL_ERROR,
        f"{_FALLBACK_PREFIXES[operation]}: {error.message}",
    )


def error_text(prefix: str, error: Exception) -> str:
    """Render a tool error message, without repeating ``prefix``."""
    message = error.message if isinstance(error, RetrievalError) else str(error)
    if message.startswith(f"{prefix}:"):
        return message
    return f"{prefix}: {message}"
