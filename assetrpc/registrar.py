"""Registration of JSON-RPC methods and dispatch of JSON-RPC requests."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from assetrpc.errors import DasApiError, ErrorCode, JsonRpcError

logger = logging.getLogger(__name__)

_MISSING = object()

_Method = Callable[[Any], Awaitable[Any]]


def endpoint_name(endpoint: Callable[..., Any]) -> str:
    """Return the name a method is registered under: the endpoint function's name."""
    name = getattr(endpoint, "__name__", None)
    if not isinstance(name, str) or not name.isidentifier():
        raise ValueError(f"Couldn't extract function name from {endpoint!r}")
    return name


def _invalid_request() -> JsonRpcError:
    return JsonRpcError(ErrorCode.INVALID_REQUEST, "Invalid request")  # type: ignore[attr-defined]


def _parse_error() -> JsonRpcError:
    return JsonRpcError(ErrorCode.PARSE_ERROR, "Parse error")  # type: ignore[attr-defined]


def _expect_no_params(params: Any) -> None:
    if params is _MISSING or params is None or params == []:
        return
    raise JsonRpcError(
        ErrorCode.INVALID_PARAMS,  # type: ignore[attr-defined]
        "Invalid parameters: No parameters were expected",
        data=repr(params),
    )


def _error_response(call_id: Any, error: JsonRpcError) -> dict:
    return {"jsonrpc": "2.0", "error": error.to_json(), "id": call_id}


def _valid_id(call_id: Any) -> bool:
    if call_id is None or isinstance(call_id, str):
        return True
    return isinstance(call_id, int) and not isinstance(call_id, bool)


class RpcHandler:
    """Holds registered methods and aliases and answers JSON-RPC requests."""

    def __init__(self) -> None:
        self._methods: dict[str, _Method] = {}
        self._aliases: dict[str, str] = {}

    def add_method(self, name: str, method: _Method) -> None:
        """Register a coroutine function taking the raw params under a name."""
        self._methods[name] = method

    def add_alias(self, alias: str, for_method: str) -> None:
        """Make an alias resolve to a method name when called."""
        self._aliases[alias] = for_method

    def __contains__(self, name: object) -> bool:
        return name in self._methods or name in self._aliases

    def _resolve(self, name: str) -> _Method | None:
        method = self._methods.get(name)
        if method is None and name in self._aliases:
            method = self._methods.get(self._aliases[name])
        return method

    async def handle(self, request: Any) -> Any:
        """Answer a request given as JSON text or as decoded JSON.

        Returns the decoded response: an object, a list for a batch, or None
        when nothing is to be sent back (notifications only).
        """
        if isinstance(request, (str, bytes, bytearray)):
            try:
                request = json.loads(request)
            except ValueError:
                return _error_response(None, _parse_error())
        if isinstance(request, list):
            if not request:
                return _error_response(None, _invalid_request())
            answers = await asyncio.gather(*(self._handle_call(call) for call in request))
            responses = [answer for answer in answers if answer is not None]
            return responses or None
        return await self._handle_call(request)

    async def _handle_call(self, call: Any) -> dict | None:
        if not isinstance(call, dict):
            return _error_response(None, _invalid_request())
        call_id = call.get("id", _MISSING)
        name = call.get("method")
        params = call.get("params", _MISSING)
        if (
            call.get("jsonrpc", "2.0") != "2.0"
            or not isinstance(name, str)
            or (call_id is not _MISSING and not _valid_id(call_id))
            or not (params is _MISSING or params is None or isinstance(params, (list, dict)))
        ):
            return _error_response(None, _invalid_request())

        notification = call_id is _MISSING
        method = self._resolve(name)
        if method is None:
            return None if notification else _error_response(call_id, JsonRpcError.method_not_found())

        try:
            result = await method(params)
        except JsonRpcError as error:
            failure = error
        except DasApiError as error:
            failure = error.to_rpc_error()
        except Exception:
            logger.exception("Method %r failed", name)
            failure = JsonRpcError.internal_error()
        else:
            return None if notification else {"jsonrpc": "2.0", "result": result, "id": call_id}
        return None if notification else _error_response(call_id, failure)


class RpcMethodRegistrar:
    """Registers endpoint functions with a shared application context.

    Methods are named after the endpoint functions. Endpoints taking
    parameters receive them first and the context second.
    """

    def __init__(self, ctx: Any) -> None:
        logger.info("Registration of RPC methods has started.")
        self._handler = RpcHandler()
        self._ctx = ctx

    def _add(self, name: str, method: _Method) -> RpcMethodRegistrar:
        self._handler.add_method(name, method)
        logger.info("Added method: '%s'.", name)
        return self

    def method_without_params(self, endpoint: Callable[[Any], Awaitable[Any]]) -> RpcMethodRegistrar:
        """Register an endpoint that takes only the application context."""
        ctx = self._ctx

        async def call(params: Any) -> Any:
            _expect_no_params(params)
            return await endpoint(ctx)

        return self._add(endpoint_name(endpoint), call)

    def method_without_ctx_and_params(self, endpoint: Callable[[], Awaitable[Any]]) -> RpcMethodRegistrar:
        """Register an endpoint that takes neither parameters nor the context."""

        async def call(params: Any) -> Any:
            _expect_no_params(params)
            return await endpoint()

        return self._add(endpoint_name(endpoint), call)

    def method(self, endpoint: Callable[[Any, Any], Awaitable[Any]], params_type: Any) -> RpcMethodRegistrar:
        """Register an endpoint taking parameters read by params_type.from_json, then the context."""
        ctx = self._ctx

        async def call(params: Any) -> Any:
            raw = None if params is _MISSING else params
            try:
                parsed = params_type.from_json(raw)
            except (ValueError, TypeError) as exc:
                raise JsonRpcError.invalid_params(str(exc)) from exc
            return await endpoint(parsed, ctx)

        return self._add(endpoint_name(endpoint), call)

    def add_alias(self, alias: str, for_method: str) -> RpcMethodRegistrar:
        """Add another name for a registered method."""
        logger.info("Adding alias '%s' for method '%s'.", alias, for_method)
        self._handler.add_alias(alias, for_method)
        return self

    def finish(self) -> RpcHandler:
        """Return the handler holding every registered method."""
        logger.info("Registration of RPC methods has ended.")
        return self._handler


def register_rpc_methods(ctx: Any) -> RpcHandler:
    """Build the handler serving the DAS API methods for the given context."""
    from assetrpc.endpoints import (
        get_asset,
        get_asset_batch,
        get_asset_by_creator,
        get_asset_by_owner,
        health,
    )
    from assetrpc.rpc_types import GetAsset, GetAssetBatch, GetAssetsByCreator, GetAssetsByOwner

    return (
        RpcMethodRegistrar(ctx)
        .method_without_ctx_and_params(health)
        .method(get_asset, GetAsset)
        .method(get_asset_batch, GetAssetBatch)
        .method(get_asset_by_owner, GetAssetsByOwner)
        .method(get_asset_by_creator, GetAssetsByCreator)
        .add_alias("getAsset", "get_asset")
        .add_alias("getAssetBatch", "get_asset_batch")
        .add_alias("getAssetByOwner", "get_asset_by_owner")
        .add_alias("getAssetByCreator", "get_asset_by_creator")
        .finish()
    )