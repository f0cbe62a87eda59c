"""
CreatorDB Proxy - Main entry point

Exposes the CreatorDB API as MCP tools (stdio or streamable HTTP) or as a
REST API. All shells share one Dispatcher, so they translate requests
identically.

Usage:
    creatordb-proxy            # MCP over stdio
    creatordb-proxy http       # MCP over streamable HTTP
    creatordb-proxy rest       # REST API with /openapi.json
"""

import logging
import sys
from typing import List, Optional

import uvicorn

from creatordb_proxy.client import UpstreamClient
from creatordb_proxy.config import ProxyConfig, load_config
from creatordb_proxy.dispatch import Dispatcher
from creatordb_proxy.errors import ConfigurationError
from creatordb_proxy.http_app import create_http_app
from creatordb_proxy.mcp_server import create_mcp_server
from creatordb_proxy.middleware import setup_logging

logger = logging.getLogger(__name__)

TRANSPORTS = ("stdio", "http", "rest")


def build_dispatcher(config: ProxyConfig) -> Dispatcher:
    """Wire the upstream client into a dispatcher"""
    return Dispatcher(UpstreamClient(config.upstream))


def run(transport: str = "stdio", config: Optional[ProxyConfig] = None) -> None:
    """
    Start the proxy.

    Args:
        transport: "stdio", "http" (MCP) or "rest"
        config: Preloaded configuration; loaded from the environment if None
    """
    if transport not in TRANSPORTS:
        raise ValueError(f"Unknown transport '{transport}', expected one of {', '.join(TRANSPORTS)}")

    if config is None:
        config = load_config()

    dispatcher = build_dispatcher(config)
    logger.info(f"Upstream: {config.upstream.base_url} (transport={transport})")

    if transport == "rest":
        app = create_http_app(dispatcher, config)
        uvicorn.run(
            app,
            host=config.http.host,
            port=config.http.port,
            log_level=config.log_level.lower()
        )
        return

    mcp = create_mcp_server(dispatcher, name=config.name)
    if transport == "stdio":
        logger.info("CreatorDB MCP Server running on stdio")
        mcp.run(transport="stdio")
    else:
        mcp.run(
            transport="http",
            host=config.http.host,
            port=config.http.port
        )


def main(argv: Optional[List[str]] = None) -> int:
    """Console entry point"""
    args = sys.argv[1:] if argv is None else argv
    transport = args[0] if args else "stdio"

    setup_logging()

    if transport not in TRANSPORTS:
        logger.error(f"Unknown transport '{transport}'. Usage: creatordb-proxy [{'|'.join(TRANSPORTS)}]")
        return 2

    try:
        config = load_config()
    except ConfigurationError as e:
        logger.error(f"Error: {e}")
        return 1

    run(transport=transport, config=config)
    return 0


if __name__ == "__main__":
    # For local development: python -m creatordb_proxy.main [stdio|http|rest]
    sys.exit(main())
