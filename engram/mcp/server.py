"""MCP tool server exposing episode memory to agents.

Tools: add_memory, search, get_episodes, update_episode, get_status. Deleting
episodes is not offered to agents.

The tool bodies live on MemoryTools as plain coroutines so they can be
called directly; ``create_mcp_server`` registers them on a FastMCP instance
served over stdio or mounted as an SSE app.
"""

from datetime import datetime
from typing import Annotated, Any

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from mcp.types import ToolAnnotations
from pydantic import Field

from engram.api.models.memory import EpisodeResponse
from engram.db.errors import StoreError
from engram.memory.models import DEFAULT_MAX_RESULTS
from engram.memory.service import MemoryService, SearchResult
from engram.observability.logging import get_logger

logger = get_logger(__name__)


def parse_timestamp(field: str, value: str | None) -> datetime | None:
    """Parse an ISO 8601 timestamp argument."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError as e:
        raise ToolError(f"invalid {field} format, use ISO 8601") from e


def _episodes_payload(result: SearchResult) -> dict[str, Any]:
    return {
        "episodes": [
            EpisodeResponse.from_episode(ep).model_dump(mode="json") for ep in result.episodes
        ],
        "count": result.count,
        "ranking": result.ranking,
    }


class MemoryTools:
    """Tool implementations bound to one MemoryService."""

    def __init__(self, service: MemoryService) -> None:
        self._service = service

    async def add_memory(
        self,
        content: Annotated[str, Field(description="The information to remember")],
        source: Annotated[str, Field(description="Who is writing, e.g. an agent name")],
        name: Annotated[str | None, Field(description="Short label")] = None,
        source_model: Annotated[str | None, Field(description="Model that produced it")] = None,
        source_description: Annotated[str | None, Field(description="Provenance")] = None,
        group_id: Annotated[str | None, Field(description="Memory partition")] = None,
        tags: Annotated[list[str] | None, Field(description="Labels")] = None,
        valid_at: Annotated[str | None, Field(description="ISO 8601 time it became true")] = None,
        metadata: Annotated[str | None, Field(description="JSON text")] = None,
    ) -> dict[str, Any]:
        """Store a new memory episode. Works even when embeddings are unavailable."""
        try:
            result = await self._service.add_memory(
                content,
                source,
                name=name,
                source_model=source_model,
                source_description=source_description,
                group_id=group_id,
                tags=tags,
                valid_at=parse_timestamp("valid_at", valid_at),
                metadata=metadata,
            )
        except StoreError as e:
            raise ToolError(str(e)) from e

        return {
            "success": True,
            "episode": EpisodeResponse.from_episode(result.episode).model_dump(mode="json"),
            "embedded": result.embedded,
        }

    async def search(
        self,
        query: Annotated[str, Field(description="What to look for; ranks by meaning")] = "",
        group_id: Annotated[str | None, Field(description="Memory partition")] = None,
        source: Annotated[str | None, Field(description="Only this writer")] = None,
        before: Annotated[str | None, Field(description="ISO 8601 upper bound")] = None,
        after: Annotated[str | None, Field(description="ISO 8601 lower bound")] = None,
        tags: Annotated[list[str] | None, Field(description="Must carry all tags")] = None,
        include_expired: Annotated[bool, Field(description="Include retired episodes")] = False,
        max_results: Annotated[int, Field(description="Result cap")] = DEFAULT_MAX_RESULTS,
    ) -> dict[str, Any]:
        """Search memory episodes by meaning, time, source and tags."""
        try:
            result = await self._service.search(
                query,
                group_id=group_id,
                source=source,
                before=parse_timestamp("before", before),
                after=parse_timestamp("after", after),
                tags=tags,
                include_expired=include_expired,
                max_results=max_results,
            )
        except StoreError as e:
            raise ToolError(str(e)) from e
        return _episodes_payload(result)

    async def get_episodes(
        self,
        group_id: Annotated[str | None, Field(description="Memory partition")] = None,
        before: Annotated[str | None, Field(description="ISO 8601 upper bound")] = None,
        after: Annotated[str | None, Field(description="ISO 8601 lower bound")] = None,
        max_results: Annotated[int, Field(description="Result cap")] = DEFAULT_MAX_RESULTS,
    ) -> dict[str, Any]:
        """List the most recent memory episodes."""
        try:
            result = await self._service.get_episodes(
                group_id=group_id,
                before=parse_timestamp("before", before),
                after=parse_timestamp("after", after),
                max_results=max_results,
            )
        except StoreError as e:
            raise ToolError(str(e)) from e
        return _episodes_payload(result)

    async def update_episode(
        self,
        episode_id: Annotated[str, Field(description="Episode to change")],
        tags: Annotated[list[str] | None, Field(description="Replacement tags")] = None,
        expires_at: Annotated[
            str | None, Field(description="ISO 8601 time after which it is hidden")
        ] = None,
        metadata: Annotated[str | None, Field(description="Replacement JSON metadata")] = None,
    ) -> dict[str, Any]:
        """Change the tags, expiry or metadata of an episode."""
        try:
            episode = await self._service.update_episode(
                episode_id,
                tags=tags,
                expired_at=parse_timestamp("expires_at", expires_at),
                metadata=metadata,
            )
        except StoreError as e:
            raise ToolError(str(e)) from e

        return {
            "success": True,
            "message": "Episode updated successfully",
            "episode": EpisodeResponse.from_episode(episode).model_dump(mode="json"),
        }

    async def get_status(self) -> dict[str, Any]:
        """Health check for the memory system."""
        return (await self._service.status()).model_dump()


def create_mcp_server(service: MemoryService, name: str = "engram") -> FastMCP:
    """Build a FastMCP server whose tools operate on ``service``."""
    mcp = FastMCP(name)
    tools = MemoryTools(service)

    mcp.add_tool(
        tools.add_memory,
        name="add_memory",
        annotations=ToolAnnotations(title="Add Memory", readOnlyHint=False, idempotentHint=False),
    )
    mcp.add_tool(
        tools.search,
        name="search",
        annotations=ToolAnnotations(title="Search Memory", readOnlyHint=True),
    )
    mcp.add_tool(
        tools.get_episodes,
        name="get_episodes",
        annotations=ToolAnnotations(title="Recent Episodes", readOnlyHint=True),
    )
    mcp.add_tool(
        tools.update_episode,
        name="update_episode",
        annotations=ToolAnnotations(
            title="Update Episode", readOnlyHint=False, destructiveHint=False, idempotentHint=True
        ),
    )
    mcp.add_tool(
        tools.get_status,
        name="get_status",
        annotations=ToolAnnotations(title="Memory Status", readOnlyHint=True),
    )

    logger.debug("mcp_tools_registered", server=name)
    return mcp
