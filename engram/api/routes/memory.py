"""Memory endpoints: add, search, list and update episodes.

Deleting an episode is an operator action and is only available from the
command line.
"""

from datetime import datetime

from fastapi import APIRouter, Query

from engram.api.dependencies import MemoryServiceDep
from engram.api.models.memory import (
    AddMemoryRequest,
    AddMemoryResponse,
    EpisodeListResponse,
    EpisodeResponse,
    SearchRequest,
    UpdateEpisodeRequest,
    UpdateEpisodeResponse,
)
from engram.memory.models import DEFAULT_MAX_RESULTS
from engram.memory.service import SearchResult
from engram.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/memory")


def _list_response(result: SearchResult) -> EpisodeListResponse:
    return EpisodeListResponse(
        episodes=[EpisodeResponse.from_episode(ep) for ep in result.episodes],
        count=result.count,
        ranking=result.ranking,
    )


@router.post("", response_model=AddMemoryResponse, status_code=201)
async def add_memory(request: AddMemoryRequest, service: MemoryServiceDep) -> AddMemoryResponse:
    """Store a new episode.

    The content is embedded first; if the embedding service is unavailable
    the episode is still stored and ``embedded`` is false.
    """
    result = await service.add_memory(
        request.content,
        request.source,
        name=request.name,
        source_model=request.source_model,
        source_description=request.source_description,
        group_id=request.group_id,
        tags=request.tags,
        valid_at=request.valid_at,
        metadata=request.metadata,
    )
    return AddMemoryResponse(
        episode=EpisodeResponse.from_episode(result.episode),
        embedded=result.embedded,
    )


@router.get("/search", response_model=EpisodeListResponse)
async def search_memory(
    service: MemoryServiceDep,
    query: str = Query(default="", description="Text to rank by semantic similarity"),
    group_id: str | None = Query(default=None, description="Group to search; 'default' if omitted"),
    source: str | None = Query(default=None, description="Only episodes from this writer"),
    before: datetime | None = Query(default=None, description="Created strictly before"),
    after: datetime | None = Query(default=None, description="Created strictly after"),
    tags: list[str] = Query(default=[], description="Episodes must carry every tag"),
    include_expired: bool = Query(default=False, description="Include retired episodes"),
    max_results: int = Query(default=DEFAULT_MAX_RESULTS, description="Result cap"),
) -> EpisodeListResponse:
    """Search episodes with query-string filters."""
    result = await service.search(
        query,
        group_id=group_id,
        source=source,
        before=before,
        after=after,
        tags=tags,
        include_expired=include_expired,
        max_results=max_results,
    )
    return _list_response(result)


@router.post("/search", response_model=EpisodeListResponse)
async def search_memory_body(
    request: SearchRequest, service: MemoryServiceDep
) -> EpisodeListResponse:
    """Search episodes with a JSON body."""
    result = await service.search(
        request.query,
        group_id=request.group_id,
        source=request.source,
        before=request.before,
        after=request.after,
        tags=request.tags,
        include_expired=request.include_expired,
        max_results=request.max_results,
    )
    return _list_response(result)


@router.get("/episodes", response_model=EpisodeListResponse)
async def get_episodes(
    service: MemoryServiceDep,
    group_id: str | None = Query(default=None),
    before: datetime | None = Query(default=None),
    after: datetime | None = Query(default=None),
    include_expired: bool = Query(default=False),
    max_results: int = Query(default=DEFAULT_MAX_RESULTS),
) -> EpisodeListResponse:
    """List episodes newest first."""
    result = await service.get_episodes(
        group_id=group_id,
        before=before,
        after=after,
        include_expired=include_expired,
        max_results=max_results,
    )
    return _list_response(result)


@router.get("/episodes/{episode_id}", response_model=EpisodeResponse)
async def get_episode(episode_id: str, service: MemoryServiceDep) -> EpisodeResponse:
    """Fetch one episode, including retired ones."""
    return EpisodeResponse.from_episode(await service.get_episode(episode_id))


@router.put("/episodes/{episode_id}", response_model=UpdateEpisodeResponse)
async def update_episode(
    episode_id: str,
    request: UpdateEpisodeRequest,
    service: MemoryServiceDep,
) -> UpdateEpisodeResponse:
    """Update tags, expiry or metadata of an episode."""
    episode = await service.update_episode(
        episode_id,
        tags=request.tags,
        expired_at=request.expired_at,
        metadata=request.metadata,
    )
    logger.info("update_episode_request_completed", episode_id=episode_id)
    return UpdateEpisodeResponse(episode=EpisodeResponse.from_episode(episode))
