"""Exception hierarchy for the Zabbix JSON-RPC client and setup routine."""

from __future__ import annotations

from typing import Any

# JSON-RPC 2.0 "invalid params" code, returned by Zabbix for schema violations.
INVALID_PARAMS_CODE = -32602

_PARAMETER_SCHEMA_PHRASES = ("Invalid params", "unexpected parameter")


class ZbxError(Exception):
    """Base exception for all Zabbix client errors."""


class ZbxConfigError(ZbxError):
    """Required configuration is missing or invalid."""


class ZbxTransportError(ZbxError):
    """HTTP request failed or the body is not a JSON-RPC envelope."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ZbxProtocolError(ZbxError):
    """Envelope carries neither ``result`` nor ``error``."""


class ZbxRpcError(ZbxError):
    """Well-formed application error returned by the Zabbix API."""

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        super().__init__(f"Zabbix API error {code}: {message} {data!r}")
        self.code = code
        self.message = message
        self.data = data

    @property
    def is_parameter_schema_error(self) -> bool:
        """Whether the server rejected the shape of the request params.

        Best-effort: the code is checked first, then the documented phrasing
        in either the message or the data text.
        """
        if self.code == INVALID_PARAMS_CODE:
            return True
        text = f"{self.message} {self.data if self.data is not None else ''}"
        return any(phrase in text for phrase in _PARAMETER_SCHEMA_PHRASES)


class ZbxDomainError(ZbxError):
    """Expected remote object not found, or a result had an unexpected shape."""
