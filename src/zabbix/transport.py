"""JSON-RPC 2.0 transport for the Zabbix management API."""

from __future__ import annotations

import json
from dataclasses import dataclass
from types import TracebackType
from typing import Any, TypeVar

import httpx
import structlog
from pydantic import BaseModel, TypeAdapter, ValidationError

from src.zabbix.exceptions import (
    ZbxDomainError,
    ZbxProtocolError,
    ZbxRpcError,
    ZbxTransportError,
)
from src.zabbix.types import LoginSchema

logger = structlog.stdlib.get_logger()

T = TypeVar("T")

_JSONRPC_VERSION = "2.0"
_REQUEST_ID = 1


@dataclass
class Session:
    """Endpoint plus the auth token obtained by login."""

    url: str
    token: str | None = None
    schema: LoginSchema | None = None

    @property
    def authenticated(self) -> bool:
        return self.token is not None


class RpcErrorBody(BaseModel):
    code: int
    message: str
    data: Any = None


class RpcResponse(BaseModel):
    jsonrpc: str = _JSONRPC_VERSION
    result: Any = None
    error: RpcErrorBody | None = None
    id: int | str | None = None


def _to_jsonable(params: Any) -> Any:
    if isinstance(params, BaseModel):
        return params.model_dump(mode="json")
    return params


def build_envelope(session: Session, method: str, params: Any) -> dict[str, Any]:
    """Build a JSON-RPC request body; ``auth`` only once a token exists."""
    envelope: dict[str, Any] = {
        "jsonrpc": _JSONRPC_VERSION,
        "method": method,
        "params": _to_jsonable(params),
        "id": _REQUEST_ID,
    }
    if session.token is not None:
        envelope["auth"] = session.token
    return envelope


def parse_envelope(body: str) -> RpcResponse:
    """Parse a response body, raising on transport or protocol errors.

    ``result`` is distinguished from an explicit JSON ``null`` by key presence.
    """
    try:
        raw = json.loads(body)
        parsed = RpcResponse.model_validate(raw)
    except (ValueError, ValidationError) as exc:
        raise ZbxTransportError(
            f"Unable to parse JSON-RPC response: {body[:200]}", body=body
        ) from exc

    if parsed.error is not None:
        err = parsed.error
        raise ZbxRpcError(err.code, err.message, err.data)
    if "result" not in raw:
        raise ZbxProtocolError("Missing result in JSON-RPC response")
    return parsed


class ZabbixTransport:
    """Sequential JSON-RPC client bound to one :class:`Session`.

    Usage::

        async with ZabbixTransport(url) as zbx:
            token = await zbx.call("user.login", {...}, str)
    """

    def __init__(
        self,
        url: str,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self.session = Session(url=url)
        self._http = http
        self._owns_http = http is None

    @property
    def connected(self) -> bool:
        return self._http is not None and not self._http.is_closed

    async def connect(self) -> None:
        if self._http is None:
            self._http = httpx.AsyncClient()
            self._owns_http = True

    async def close(self) -> None:
        if self._http is not None and self._owns_http:
            await self._http.aclose()
        self._http = None

    async def call(self, method: str, params: Any, result_type: type[T] | Any = Any) -> T:
        """Invoke *method* and validate its ``result`` as *result_type*."""
        if self._http is None:
            raise ZbxTransportError("HTTP client not connected")

        envelope = build_envelope(self.session, method, params)
        logger.debug("zbx_rpc_call", method=method, authenticated=self.session.authenticated)

        try:
            response = await self._http.post(self.session.url, json=envelope)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise ZbxTransportError(f"Zabbix API request failed: {exc}") from exc

        body = response.text
        if not response.is_success:
            raise ZbxTransportError(
                f"Zabbix API HTTP error: {response.status_code}: {body[:200]}",
                status_code=response.status_code,
                body=body,
            )

        parsed = parse_envelope(body)
        try:
            return TypeAdapter(result_type).validate_python(parsed.result)
        except ValidationError as exc:
            raise ZbxDomainError(
                f"Unexpected result shape for {method}: {exc.error_count()} error(s)"
            ) from exc

    async def __aenter__(self) -> ZabbixTransport:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()
