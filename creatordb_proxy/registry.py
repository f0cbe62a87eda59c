"""
Operation registry.

The static table of every operation the proxy exposes. Each entry says which
upstream endpoint it hits, which arguments it takes and how they are encoded.
Both shells (MCP tools and REST routes) are generated from this table, so
they cannot drift apart.
"""

from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from creatordb_proxy.encoding import (
    DEFAULT_DESC,
    DEFAULT_OFFSET,
    DEFAULT_PAGE_SIZE,
    MAX_FILTERS,
    MAX_PAGE_SIZE,
    MIN_PAGE_SIZE,
)


class ParamKind(str, Enum):
    PATH = "path"
    QUERY = "query"
    BODY = "body"


class ParamType(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    FILTERS = "filters"


class BodyShape(str, Enum):
    SEARCH = "search"
    NLS = "nls"


class Parameter(BaseModel):
    """One argument of an operation"""
    model_config = ConfigDict(frozen=True)

    name: str
    kind: ParamKind
    type: ParamType = ParamType.STRING
    required: bool = False
    identifier: bool = False  # creator identifier, routed through sanitize_id
    description: str = ""
    default: Any = None
    minimum: Optional[int] = None
    maximum: Optional[int] = None

    def json_schema(self) -> Dict[str, Any]:
        """JSON Schema fragment describing this parameter"""
        if self.type is ParamType.FILTERS:
            schema: Dict[str, Any] = {
                "type": "array",
                "maxItems": MAX_FILTERS,
                "items": FILTER_SCHEMA,
            }
        else:
            schema = {"type": self.type.value}
        if self.description:
            schema["description"] = self.description
        if self.default is not None:
            schema["default"] = self.default
        if self.minimum is not None:
            schema["minimum"] = self.minimum
        if self.maximum is not None:
            schema["maximum"] = self.maximum
        return schema


class Operation(BaseModel):
    """
    Immutable descriptor of one upstream endpoint.

    path is the upstream path template ({name} placeholders are filled from
    PATH parameters). route is where the REST shell exposes it.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    http_method: str
    path: str
    route: str
    description: str
    parameters: Tuple[Parameter, ...] = ()
    body_shape: Optional[BodyShape] = None

    @property
    def required_parameters(self) -> List[Parameter]:
        return [p for p in self.parameters if p.required]

    def parameters_of_kind(self, kind: ParamKind) -> List[Parameter]:
        return [p for p in self.parameters if p.kind is kind]

    def input_schema(self) -> Dict[str, Any]:
        """JSON Schema for the operation's arguments (used as MCP inputSchema)"""
        schema: Dict[str, Any] = {
            "type": "object",
            "properties": {p.name: p.json_schema() for p in self.parameters},
        }
        required = [p.name for p in self.required_parameters]
        if required:
            schema["required"] = required
        return schema


FILTER_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "filterName": {
            "type": "string",
            "description": "Field to filter on (e.g., 'displayName', 'totalFollowers', 'country', 'mainLanguage', 'niches', 'avgEngagementRate', 'isVerified').",
        },
        "op": {
            "type": "string",
            "enum": ["in", ">", "=", "<"],
            "description": "Comparison operator. 'in' takes an array value, the others a single value.",
        },
        "value": {
            "description": "Filter value. Use string/string[] for text fields, number for numeric fields, boolean for boolean fields.",
        },
        "isFuzzySearch": {
            "type": "boolean",
            "description": "Enable fuzzy matching for string fields.",
            "default": False,
        },
    },
    "required": ["filterName", "op", "value"],
}


# ============================================================================
# Parameter builders
# ============================================================================

def _identifier(name: str, description: str) -> Parameter:
    return Parameter(
        name=name,
        kind=ParamKind.QUERY,
        required=True,
        identifier=True,
        description=description,
    )


def _content_id(description: str) -> Parameter:
    return Parameter(name="contentId", kind=ParamKind.QUERY, required=True, description=description)


def _paging_params() -> Tuple[Parameter, ...]:
    return (
        Parameter(
            name="pageSize",
            kind=ParamKind.BODY,
            type=ParamType.INTEGER,
            description="Results per page (1-100).",
            default=DEFAULT_PAGE_SIZE,
            minimum=MIN_PAGE_SIZE,
            maximum=MAX_PAGE_SIZE,
        ),
        Parameter(
            name="offset",
            kind=ParamKind.BODY,
            type=ParamType.INTEGER,
            description="Number of records to skip for pagination.",
            default=DEFAULT_OFFSET,
            minimum=0,
        ),
    )


def _search_params(filters_description: str, sort_description: str) -> Tuple[Parameter, ...]:
    return (
        Parameter(
            name="filters",
            kind=ParamKind.BODY,
            type=ParamType.FILTERS,
            required=True,
            description=filters_description,
        ),
        *_paging_params(),
        Parameter(name="sortBy", kind=ParamKind.BODY, description=sort_description),
        Parameter(
            name="desc",
            kind=ParamKind.BODY,
            type=ParamType.BOOLEAN,
            description="Sort in descending order.",
            default=DEFAULT_DESC,
        ),
    )


def _nls_params(example: str) -> Tuple[Parameter, ...]:
    return (
        Parameter(
            name="query",
            kind=ParamKind.BODY,
            required=True,
            description=f"Natural language search query (e.g., '{example}').",
        ),
        *_paging_params(),
    )


def _lookup(name: str, path: str, description: str, *parameters: Parameter) -> Operation:
    return Operation(
        name=name,
        http_method="GET",
        path=path,
        route=f"/api{path}",
        description=description,
        parameters=parameters,
    )


def _search(platform: str, description: str, filters_description: str, sort_description: str) -> Operation:
    return Operation(
        name=f"{platform}_search",
        http_method="POST",
        path=f"/{platform}/search",
        route=f"/api/{platform}/search",
        description=description,
        parameters=_search_params(filters_description, sort_description),
        body_shape=BodyShape.SEARCH,
    )


def _nls(platform: str, description: str, example: str) -> Operation:
    return Operation(
        name=f"{platform}_natural_language_search",
        http_method="POST",
        path=f"/{platform}/nls",
        route=f"/api/{platform}/natural-language-search",
        description=description,
        parameters=_nls_params(example),
        body_shape=BodyShape.NLS,
    )


# ============================================================================
# Operation table
# ============================================================================

_IG_ID = "Instagram account ID (e.g., 'instagram' or '@instagram'). The @ symbol will be automatically removed."
_YT_ID = "YouTube channel ID (format: UC followed by 22 characters, e.g., 'UCBR8-60-B28hp2BmDPdntcQ')."
_TT_ID = "TikTok account ID (e.g., 'tiktok' or '@tiktok'). The @ symbol will be automatically removed."

OPERATIONS: Tuple[Operation, ...] = (
    # General
    _lookup(
        "get_api_usage", "/usage",
        "Get API usage statistics for the authenticated user within a specified date range (max 365 days). "
        "Returns request counts and quota usage per endpoint and platform.",
        Parameter(name="start", kind=ParamKind.QUERY,
                  description="Start unix timestamp in milliseconds. Defaults to 7 days ago if not provided."),
        Parameter(name="end", kind=ParamKind.QUERY,
                  description="End unix timestamp in milliseconds. Defaults to current time if not provided."),
    ),

    # Instagram
    _lookup("instagram_get_profile", "/instagram/profile",
            "Get complete Instagram creator profile including metadata, statistics, hashtags, niches, and content analysis.",
            _identifier("uniqueId", _IG_ID)),
    _lookup("instagram_get_contact", "/instagram/contact",
            "Retrieve contact information (emails) for an Instagram creator.",
            _identifier("uniqueId", _IG_ID)),
    _lookup("instagram_get_content_detail", "/instagram/content-detail",
            "Get detailed information about specific Instagram content by content ID.",
            _content_id("The Instagram content ID.")),
    _lookup("instagram_get_performance", "/instagram/performance",
            "Get advanced performance metrics including post activity, follower growth, engagement rates, "
            "likes, comments, and consistency scores.",
            _identifier("uniqueId", _IG_ID)),
    _lookup("instagram_get_performance_history", "/instagram/performance-history",
            "Get historical performance data for an Instagram creator over time.",
            _identifier("uniqueId", _IG_ID)),
    _lookup("instagram_get_sponsorship", "/instagram/sponsorship",
            "Get sponsorship/branded content information for an Instagram creator.",
            _identifier("uniqueId", _IG_ID)),
    _lookup("instagram_get_audience", "/instagram/audience",
            "Get audience demographic insights including country distribution, gender breakdown, "
            "age composition, and average age.",
            _identifier("uniqueId", _IG_ID)),
    _lookup("instagram_get_niches", "/instagram/niches",
            "Get all available Instagram niches with their categories and creator counts."),
    _search("instagram",
            "Search for Instagram creators using advanced filters. Supports filtering by displayName, follower count, "
            "engagement rate, country, language, niches, and more. Max 10 filters per request.",
            "Array of filter objects. Each filter has: filterName (field to filter), op ('in', '>', '=', '<'), "
            "value (string/number/array/boolean), isFuzzySearch (optional, for string fields).",
            "Field to sort by (e.g., 'totalFollowers', 'avgEngagementRate', 'displayName')."),
    _nls("instagram",
         "Search Instagram creators using natural language. AI converts your plain text query into structured filters.",
         "fashion influencers in USA with over 100k followers"),

    # YouTube
    _lookup("youtube_get_profile", "/youtube/profile",
            "Get complete YouTube creator profile including metadata, subscriber count, categories, hashtags, "
            "topics, niches, pricing estimates, and related creators.",
            _identifier("channelId", _YT_ID)),
    _lookup("youtube_get_performance", "/youtube/performance",
            "Get YouTube creator performance metrics including view counts, engagement rates, and content statistics.",
            _identifier("channelId", _YT_ID)),
    _lookup("youtube_get_performance_history", "/youtube/performance-history",
            "Get historical performance data for a YouTube creator.",
            _identifier("channelId", _YT_ID)),
    _lookup("youtube_get_content_detail", "/youtube/content-detail",
            "Get detailed information about a specific YouTube video.",
            _content_id("YouTube video ID.")),
    _lookup("youtube_get_sponsorship", "/youtube/sponsorship",
            "Get sponsorship/branded content data for a YouTube creator.",
            _identifier("channelId", _YT_ID)),
    _lookup("youtube_get_contact", "/youtube/contact",
            "Get contact information for a YouTube creator.",
            _identifier("channelId", _YT_ID)),
    _lookup("youtube_get_audience", "/youtube/audience",
            "Get audience demographic insights for a YouTube creator including location, gender, and age breakdown.",
            _identifier("channelId", _YT_ID)),
    _lookup("youtube_get_topics", "/youtube/topics",
            "Get all available YouTube topics (content categories) with creator counts."),
    _lookup("youtube_get_niches", "/youtube/niches",
            "Get all available YouTube niches with categories and creator counts."),
    _search("youtube",
            "Search for YouTube creators using advanced filters including subscriber count, engagement, country, "
            "language, topics, and niches. Max 10 filters per request.",
            "Array of filter objects (e.g., filterName 'displayName', 'totalSubscribers', 'country', 'topics', 'niches').",
            "Field to sort by (e.g., 'totalSubscribers')."),
    _nls("youtube", "Search YouTube creators using natural language queries.",
         "tech reviewers in Japan"),

    # TikTok
    _lookup("tiktok_get_profile", "/tiktok/profile",
            "Get complete TikTok creator profile including metadata, follower stats, hashtags, niches, and content analysis.",
            _identifier("uniqueId", _TT_ID)),
    _lookup("tiktok_get_contact", "/tiktok/contact",
            "Get contact information for a TikTok creator.",
            _identifier("uniqueId", _TT_ID)),
    _lookup("tiktok_get_performance", "/tiktok/performance",
            "Get TikTok creator performance metrics including view counts, engagement rates, and content statistics.",
            _identifier("uniqueId", _TT_ID)),
    _lookup("tiktok_get_performance_history", "/tiktok/performance-history",
            "Get historical performance data for a TikTok creator.",
            _identifier("uniqueId", _TT_ID)),
    _lookup("tiktok_get_content_detail", "/tiktok/content-detail",
            "Get detailed information about a specific TikTok video.",
            _content_id("TikTok content ID.")),
    _lookup("tiktok_get_audience", "/tiktok/audience",
            "Get audience demographic insights for a TikTok creator including location, gender, and age breakdown.",
            _identifier("uniqueId", _TT_ID)),
    _lookup("tiktok_get_niches", "/tiktok/niches",
            "Get all available TikTok niches with categories and creator counts."),
    _search("tiktok",
            "Search for TikTok creators using advanced filters including follower count, engagement, country, "
            "language, and niches. Max 10 filters per request.",
            "Array of filter objects (e.g., filterName 'displayName', 'totalFollowers', 'country', 'niches').",
            "Field to sort by (e.g., 'totalFollowers')."),
    _nls("tiktok", "Search TikTok creators using natural language queries.",
         "dance creators in Brazil"),
)


def build_registry(operations: Iterable[Operation]) -> Mapping[str, Operation]:
    """
    Index operations by name.

    Raises:
        ValueError: If two operations share a name
    """
    registry: Dict[str, Operation] = {}
    for operation in operations:
        if operation.name in registry:
            raise ValueError(f"Duplicate operation name: {operation.name}")
        registry[operation.name] = operation
    return MappingProxyType(registry)


REGISTRY: Mapping[str, Operation] = build_registry(OPERATIONS)


def get_operation(name: str, registry: Mapping[str, Operation] = REGISTRY) -> Optional[Operation]:
    """Look up an operation by name, None if unknown"""
    return registry.get(name)
