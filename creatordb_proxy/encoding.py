"""
Identifier sanitizing and request encoding.

Turns caller arguments into the pieces of an upstream request: query strings
for lookups, JSON bodies for structured and natural-language searches.
Optional fields are detected by presence, never by truthiness, so ``0`` and
``False`` survive encoding.
"""

from typing import Any, Dict, Iterable, List, Literal, Mapping, Optional, Union
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, StrictBool, ValidationError, model_validator

from creatordb_proxy.errors import InvalidArgumentError, MissingParameterError

# Characters encodeURIComponent leaves alone besides alphanumerics
_URI_COMPONENT_SAFE = "-_.!~*'()"

MAX_FILTERS = 10
DEFAULT_PAGE_SIZE = 20
DEFAULT_OFFSET = 0
DEFAULT_DESC = True
MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 100


def encode_component(value: str) -> str:
    """
    Percent-encode a single URL component.

    Lone surrogates are encoded as their raw code units instead of failing,
    so every str has an encoding.
    """
    return quote(value, safe=_URI_COMPONENT_SAFE, errors="surrogatepass")


def sanitize_id(value: str) -> str:
    """
    Normalize a creator identifier for use in a query string.

    Strips at most one leading "@" and percent-encodes the rest, so
    "@tiktok" and "tiktok" produce the same value.
    """
    if value.startswith("@"):
        value = value[1:]
    return encode_component(value)


def _format_scalar(key: str, value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise InvalidArgumentError(key, f"expected a scalar value, got {type(value).__name__}")


def encode_query(params: Mapping[str, Any], identifier_keys: Iterable[str] = ()) -> str:
    """
    Build a query string (without the leading "?").

    Args:
        params: Parameter names to values, in output order. None means absent.
        identifier_keys: Keys whose values are creator identifiers and go
            through sanitize_id instead of plain encoding.

    Returns:
        "k=v&k2=v2", or "" when nothing is present
    """
    identifiers = set(identifier_keys)
    pairs = []
    for key, value in params.items():
        if value is None:
            continue
        text = _format_scalar(key, value)
        encoded = sanitize_id(text) if key in identifiers else encode_component(text)
        pairs.append(f"{encode_component(key)}={encoded}")
    return "&".join(pairs)


class SearchFilter(BaseModel):
    """
    One constraint in a structured search.

    Only the shape is checked here. Whether filterName is a field the
    upstream knows is left to the upstream.
    """
    model_config = ConfigDict(extra="allow")

    filterName: str
    op: Literal["in", "=", "<", ">"]
    value: Union[StrictBool, int, float, str, List[str]]
    isFuzzySearch: Optional[StrictBool] = None

    @model_validator(mode="after")
    def _check_value_matches_op(self) -> "SearchFilter":
        if self.op == "in" and not isinstance(self.value, list):
            raise ValueError("op 'in' requires a list value")
        if self.op != "in" and isinstance(self.value, list):
            raise ValueError(f"op '{self.op}' requires a scalar value")
        return self


def validate_filters(filters: Any) -> List[Any]:
    """
    Check the filters argument of a search.

    Returns the list unchanged; the filters are forwarded verbatim.

    Raises:
        MissingParameterError: filters absent
        InvalidArgumentError: not a list, too many entries, or a malformed entry
    """
    if filters is None:
        raise MissingParameterError("filters")
    if not isinstance(filters, list):
        raise InvalidArgumentError("filters", "must be an array of filter objects")
    if len(filters) > MAX_FILTERS:
        raise InvalidArgumentError("filters", f"at most {MAX_FILTERS} filters are allowed per request")

    for index, item in enumerate(filters):
        if not isinstance(item, dict):
            raise InvalidArgumentError(f"filters[{index}]", "must be an object")
        try:
            SearchFilter.model_validate(item)
        except ValidationError as e:
            first = e.errors()[0]
            where = ".".join(str(p) for p in first["loc"])
            detail = f"{where}: {first['msg']}" if where else first["msg"]
            raise InvalidArgumentError(f"filters[{index}]", detail) from e
    return filters


def _integer_arg(
    args: Mapping[str, Any],
    name: str,
    default: int,
    minimum: Optional[int] = None,
    maximum: Optional[int] = None
) -> int:
    value = args.get(name)
    if value is None:
        return default
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(name, "must be an integer")
    if minimum is not None and value < minimum:
        raise InvalidArgumentError(name, f"must be >= {minimum}")
    if maximum is not None and value > maximum:
        raise InvalidArgumentError(name, f"must be <= {maximum}")
    return value


def _paging(args: Mapping[str, Any]) -> Dict[str, int]:
    return {
        "pageSize": _integer_arg(args, "pageSize", DEFAULT_PAGE_SIZE, MIN_PAGE_SIZE, MAX_PAGE_SIZE),
        "offset": _integer_arg(args, "offset", DEFAULT_OFFSET, minimum=0),
    }


def encode_search_body(args: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Build the JSON body of a structured search.

    pageSize, offset and desc get their defaults (20, 0, true) only when
    absent. sortBy is omitted when absent.
    """
    body: Dict[str, Any] = {"filters": validate_filters(args.get("filters"))}
    body.update(_paging(args))

    sort_by = args.get("sortBy")
    if sort_by is not None:
        if not isinstance(sort_by, str):
            raise InvalidArgumentError("sortBy", "must be a string")
        body["sortBy"] = sort_by

    desc = args.get("desc")
    if desc is None:
        desc = DEFAULT_DESC
    elif not isinstance(desc, bool):
        raise InvalidArgumentError("desc", "must be a boolean")
    body["desc"] = desc

    return body


def encode_nls_body(args: Mapping[str, Any]) -> Dict[str, Any]:
    """Build the body of a natural-language search: exactly query, pageSize, offset."""
    query = args.get("query")
    if query is None or query == "":
        raise MissingParameterError("query")
    if not isinstance(query, str):
        raise InvalidArgumentError("query", "must be a string")

    body: Dict[str, Any] = {"query": query}
    body.update(_paging(args))
    return body
