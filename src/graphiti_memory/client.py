"""HTTP client for the Graphiti knowledge graph server."""

import asyncio
import json
import logging
from typing import Any

import httpx

from .exceptions import GraphClientError, RemoteError, UnreachableError
from .models import Episode, Fact, IngestResult, Message

logger = logging.getLogger(__name__)

HEALTH_TIMEOUT = 5.0
REQUEST_TIMEOUT = 15.0
EPISODES_TIMEOUT = 10.0

# Longest response body quoted in a RemoteError
BODY_SNIPPET_CHARS = 500


class GraphClient:
    """Talks to the Graphiti FastAPI server.

    Every call opens its own ``httpx.AsyncClient`` bounded by an explicit
    timeout, so a client instance holds nothing but immutable settings and
    can be shared by concurrent hooks.

    Example:
        client = GraphClient("http://localhost:8100", "my-group")

        if await client.healthy():
            facts = await client.search("Where does Alice work?", max_facts=5)
    """

    def __init__(
        self,
        base_url: str,
        group_id: str,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Server URL, e.g. ``http://localhost:8100``.
            group_id: Namespace scoping every search, ingest and listing.
            token: Optional bearer token attached to every request.
            transport: Optional httpx transport (used by tests to stub the server).
        """
        self.base_url = base_url.rstrip("/")
        self.group_id = group_id
        self._token = token
        self._transport = transport

    def _headers(self, with_body: bool = False) -> dict[str, str]:
        headers: dict[str, str] = {}
        if with_body:
            headers["Content-Type"] = "application/json"
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def _request(
        self, method: str, path: str, timeout: float, **kwargs: Any
    ) -> httpx.Response:
        """Send one request with the whole exchange bounded by ``timeout``.

        httpx timeouts only bound each connect, read and write phase;
        ``wait_for`` bounds the total and cancels the request in flight.

        Raises:
            asyncio.TimeoutError: The exchange took longer than ``timeout``.
            httpx.HTTPError: Transport failure.
            httpx.InvalidURL: The base URL is malformed.
        """

        async def send() -> httpx.Response:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=timeout,
                transport=self._transport,
            ) as http:
                return await http.request(method, path, **kwargs)

        return await asyncio.wait_for(send(), timeout)

    async def _post(self, path: str, body: dict[str, Any]) -> Any:
        """POST a JSON body and return the decoded response.

        Raises:
            RemoteError: The server answered outside the 2xx range.
            UnreachableError: Connection failure or timeout.
            GraphClientError: The response body was not JSON.
        """
        content = json.dumps(body, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
        try:
            response = await self._request(
                "POST",
                path,
                REQUEST_TIMEOUT,
                content=content,
                headers=self._headers(with_body=True),
            )
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            raise UnreachableError(path, f"timed out after {REQUEST_TIMEOUT}s") from e
        except (httpx.RequestError, httpx.InvalidURL) as e:
            raise UnreachableError(path, str(e) or type(e).__name__) from e

        if not response.is_success:
            raise RemoteError(path, response.status_code, response.text[:BODY_SNIPPET_CHARS])

        try:
            return response.json()
        except ValueError as e:
            raise GraphClientError(f"Graphiti {path} returned invalid JSON") from e

    @staticmethod
    def _facts(data: Any) -> list[Fact]:
        if not isinstance(data, dict):
            return []
        items = data.get("facts")
        if not isinstance(items, list):
            return []
        return [Fact.from_dict(item) for item in items if isinstance(item, dict)]

    async def healthy(self) -> bool:
        """Check server liveness. Never raises."""
        try:
            response = await self._request(
                "GET", "/healthcheck", HEALTH_TIMEOUT, headers=self._headers()
            )
            return response.is_success
        except (httpx.HTTPError, httpx.InvalidURL, asyncio.TimeoutError) as e:
            logger.debug("Health check failed: %s", e)
            return False

    async def search(self, query: str, max_facts: int = 10) -> list[Fact]:
        """Search facts in this client's group.

        Args:
            query: Natural language query.
            max_facts: Maximum number of facts the server should return.

        Returns:
            Facts in the order the server ranked them.
        """
        data = await self._post(
            "/search",
            {"query": query, "group_ids": [self.group_id], "max_facts": max_facts},
        )
        return self._facts(data)

    async def get_memory(self, messages: list[Message], max_facts: int = 10) -> list[Fact]:
        """Get facts relevant to a list of messages."""
        data = await self._post(
            "/get-memory",
            {
                "group_id": self.group_id,
                "center_node_uuid": None,
                "messages": [m.to_dict() for m in messages],
                "max_facts": max_facts,
            },
        )
        return self._facts(data)

    async def ingest(self, messages: list[Message]) -> IngestResult:
        """Submit messages for asynchronous extraction.

        The server answers 202 (queued), not 200; any 2xx status counts as
        success.
        """
        data = await self._post(
            "/messages",
            {"group_id": self.group_id, "messages": [m.to_dict() for m in messages]},
        )
        if not isinstance(data, dict):
            return IngestResult(success=True)
        return IngestResult(
            success=bool(data.get("success", True)),
            message=str(data.get("message", "")),
        )

    async def episodes(self, last_n: int = 10) -> list[Episode]:
        """List the most recent episodes. Never raises.

        The server returns a bare JSON array, not a wrapped object.
        """
        path = f"/episodes/{self.group_id}"
        try:
            response = await self._request(
                "GET",
                path,
                EPISODES_TIMEOUT,
                params={"last_n": last_n},
                headers=self._headers(),
            )
            if not response.is_success:
                return []
            data = response.json()
            if not isinstance(data, list):
                return []
            return [Episode.from_dict(item) for item in data if isinstance(item, dict)]
        except (
            httpx.HTTPError,
            httpx.InvalidURL,
            asyncio.TimeoutError,
            ValueError,
            TypeError,
        ) as e:
            logger.debug("Listing episodes failed: %s", e)
            return []
