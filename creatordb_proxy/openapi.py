"""
OpenAPI document for the REST shell, generated from the operation registry.
"""

import re
from typing import Any, Dict, Mapping

from creatordb_proxy.registry import REGISTRY, Operation, ParamKind

_ERROR_SCHEMA = {
    "type": "object",
    "properties": {
        "success": {"type": "boolean", "const": False},
        "error": {"type": "string"},
        "status": {"type": "integer"},
    },
    "required": ["success", "error", "status"],
}


def operation_id(name: str) -> str:
    """instagram_get_profile -> instagramGetProfile"""
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _summary(operation: Operation) -> str:
    first_sentence = re.split(r"(?<=\.)\s", operation.description, maxsplit=1)[0]
    return first_sentence.rstrip(".")


def _path_item(operation: Operation) -> Dict[str, Any]:
    item: Dict[str, Any] = {
        "operationId": operation_id(operation.name),
        "summary": _summary(operation),
        "description": operation.description,
        "responses": {
            "200": {"description": "Upstream response, passed through unchanged"},
            "400": {
                "description": "Missing or malformed arguments",
                "content": {"application/json": {"schema": _ERROR_SCHEMA}},
            },
            "502": {
                "description": "Upstream unreachable or returned an error",
                "content": {"application/json": {"schema": _ERROR_SCHEMA}},
            },
            "504": {
                "description": "Upstream timed out",
                "content": {"application/json": {"schema": _ERROR_SCHEMA}},
            },
            "default": {
                "description": "Upstream error status passed through (e.g. 404, 429)",
                "content": {"application/json": {"schema": _ERROR_SCHEMA}},
            },
        },
    }

    if operation.http_method == "GET":
        item["parameters"] = [
            {
                "name": p.name,
                "in": "query" if p.kind is ParamKind.QUERY else "path",
                "required": p.required,
                "schema": {"type": p.type.value},
                "description": p.description,
            }
            for p in operation.parameters
        ]
    else:
        item["requestBody"] = {
            "required": True,
            "content": {"application/json": {"schema": operation.input_schema()}},
        }
    return item


def build_openapi(
    title: str,
    version: str,
    description: str = "",
    registry: Mapping[str, Operation] = REGISTRY
) -> Dict[str, Any]:
    """
    Build an OpenAPI 3.1 document covering every registry operation.

    Args:
        title: API title
        version: API version
        description: API description
        registry: Operations to document

    Returns:
        OpenAPI document as a dict
    """
    paths: Dict[str, Dict[str, Any]] = {}
    for operation in registry.values():
        paths.setdefault(operation.route, {})[operation.http_method.lower()] = _path_item(operation)

    return {
        "openapi": "3.1.0",
        "info": {
            "title": title,
            "description": description,
            "version": version,
        },
        "paths": paths,
    }
