"""
Upstream request executor.

Issues exactly one HTTP call per invocation against the CreatorDB API.
No retries and no timeout of its own; the httpx default applies.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from creatordb_proxy.classifier import transport_error_from
from creatordb_proxy.config import UpstreamConfig


@dataclass(frozen=True)
class UpstreamReply:
    """Status code and decoded JSON body of an upstream response"""
    status_code: int
    body: Any


class UpstreamClient:
    """
    Sends authenticated requests to the upstream API.

    Either reuses an injected httpx.AsyncClient (the owner closes it) or
    opens a short-lived client per call.
    """

    def __init__(
        self,
        config: UpstreamConfig,
        http_client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Args:
            config: Upstream base URL and credentials
            http_client: Optional shared client
            transport: Optional transport for per-call clients (tests use
                httpx.MockTransport)
        """
        self.config = config
        self.http_client = http_client
        self.transport = transport

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            self.config.api_key_header: self.config.api_key,
        }

    def url_for(self, path: str) -> str:
        return f"{self.config.base_url}{path}"

    async def execute(
        self,
        method: str,
        path: str,
        body: Optional[Dict[str, Any]] = None
    ) -> UpstreamReply:
        """
        Perform one upstream call.

        Args:
            method: "GET" or "POST"
            path: Path plus query string, appended to the base URL
            body: JSON body, only sent for POST

        Returns:
            UpstreamReply with the decoded body

        Raises:
            UpstreamTransportError: Network failure or undecodable body
        """
        content = None
        if method == "POST" and body is not None:
            content = json.dumps(body).encode("utf-8")

        try:
            if self.http_client is not None:
                response = await self._send(self.http_client, method, path, content)
            else:
                async with httpx.AsyncClient(transport=self.transport) as client:
                    response = await self._send(client, method, path, content)
        except httpx.RequestError as e:
            raise transport_error_from(e) from e

        try:
            decoded = response.json()
        except ValueError as e:
            raise transport_error_from(e) from e

        return UpstreamReply(status_code=response.status_code, body=decoded)

    async def _send(
        self,
        client: httpx.AsyncClient,
        method: str,
        path: str,
        content: Optional[bytes]
    ) -> httpx.Response:
        return await client.request(
            method,
            self.url_for(path),
            headers=self.headers,
            content=content,
        )
