"""
CreatorDB Proxy

Translates MCP tool calls and REST requests into authenticated calls
against the CreatorDB influencer data API.
"""

from creatordb_proxy.classifier import NormalizedResult
from creatordb_proxy.client import UpstreamClient
from creatordb_proxy.config import ProxyConfig, UpstreamConfig, load_config
from creatordb_proxy.dispatch import Dispatcher, build_request
from creatordb_proxy.registry import OPERATIONS, REGISTRY

__version__ = "1.0.0"

__all__ = [
    "Dispatcher",
    "NormalizedResult",
    "OPERATIONS",
    "ProxyConfig",
    "REGISTRY",
    "UpstreamClient",
    "UpstreamConfig",
    "build_request",
    "load_config",
]
