"""
Dispatch layer.

Single entry point shared by the MCP and REST shells: operation name plus
arguments in, NormalizedResult out.

Flow:
1. Look up the operation in the registry
2. Check required arguments
3. Translate arguments to an upstream request
4. Execute it
5. Classify the reply
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from creatordb_proxy.classifier import NormalizedResult, classify, classify_transport_error
from creatordb_proxy.client import UpstreamClient
from creatordb_proxy.encoding import (
    encode_component,
    encode_nls_body,
    encode_query,
    encode_search_body,
    sanitize_id,
)
from creatordb_proxy.errors import (
    CallerError,
    InvalidArgumentError,
    MissingParameterError,
    UnknownOperationError,
    UpstreamTransportError,
)
from creatordb_proxy.registry import REGISTRY, BodyShape, Operation, ParamKind, ParamType, get_operation


@dataclass(frozen=True)
class UpstreamRequest:
    """A fully translated upstream call"""
    method: str
    path: str
    body: Optional[Dict[str, Any]] = None


def _is_missing(value: Any, param_type: ParamType) -> bool:
    if value is None:
        return True
    return param_type is ParamType.STRING and value == ""


def check_required(operation: Operation, args: Mapping[str, Any]) -> None:
    """
    Raises:
        MissingParameterError: For the first required parameter that is absent
    """
    for param in operation.required_parameters:
        if _is_missing(args.get(param.name), param.type):
            raise MissingParameterError(param.name)


def _path_value(name: str, value: Any, identifier: bool) -> str:
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise InvalidArgumentError(name, "must be a string")
    text = str(value)
    return sanitize_id(text) if identifier else encode_component(text)


def build_request(operation: Operation, args: Mapping[str, Any]) -> UpstreamRequest:
    """
    Translate arguments into the upstream request for an operation.

    Raises:
        CallerError: Missing or malformed arguments
    """
    check_required(operation, args)

    path = operation.path
    for param in operation.parameters_of_kind(ParamKind.PATH):
        value = _path_value(param.name, args.get(param.name), param.identifier)
        path = path.replace("{" + param.name + "}", value)

    query_params = operation.parameters_of_kind(ParamKind.QUERY)
    query = encode_query(
        {p.name: args.get(p.name) for p in query_params},
        identifier_keys=[p.name for p in query_params if p.identifier],
    )
    if query:
        path = f"{path}?{query}"

    body = None
    if operation.body_shape is BodyShape.SEARCH:
        body = encode_search_body(args)
    elif operation.body_shape is BodyShape.NLS:
        body = encode_nls_body(args)

    return UpstreamRequest(method=operation.http_method, path=path, body=body)


class Dispatcher:
    """
    Runs operations against the upstream API.

    Holds no per-call state, so one instance serves any number of
    concurrent calls.
    """

    def __init__(self, client: UpstreamClient, registry: Mapping[str, Operation] = REGISTRY):
        self.client = client
        self.registry = registry

    def get_operation(self, name: str) -> Operation:
        """
        Raises:
            UnknownOperationError: If the name is not registered
        """
        operation = get_operation(name, self.registry)
        if operation is None:
            raise UnknownOperationError(name)
        return operation

    async def dispatch(self, name: str, args: Optional[Mapping[str, Any]] = None) -> NormalizedResult:
        """
        Execute an operation by name.

        Args:
            name: Operation name (e.g., "instagram_get_profile")
            args: Operation arguments

        Returns:
            NormalizedResult; caller, transport and upstream failures are
            all reported here rather than raised
        """
        args = args or {}
        try:
            operation = self.get_operation(name)
            request = build_request(operation, args)
        except CallerError as e:
            return NormalizedResult.from_error(e)

        try:
            reply = await self.client.execute(request.method, request.path, request.body)
        except UpstreamTransportError as e:
            return classify_transport_error(e)

        return classify(reply.status_code, reply.body)
