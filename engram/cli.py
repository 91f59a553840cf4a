"""Command-line entry point.

    engram serve --mode stdio            # MCP over stdin/stdout
    engram serve --mode http --port 8080 # REST API + MCP SSE at /mcp
    engram migrate                       # create or upgrade the database
    engram delete-episode ID --yes       # permanently remove one episode
"""

import argparse
import asyncio
import json
import sys

import uvicorn

from engram.api.app import create_app
from engram.bootstrap import open_service
from engram.config import Settings, get_settings
from engram.db.errors import NotFoundError, StoreError
from engram.db.schema import SCHEMA_VERSION
from engram.mcp.server import create_mcp_server
from engram.memory.stores import DuckDBEpisodeStore
from engram.observability.logging import get_logger, setup_logging

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="engram", description="Episode memory server")
    parser.add_argument("--db-path", help="DuckDB file (overrides storage.db_path)")
    subcommands = parser.add_subparsers(dest="command", required=True)

    serve = subcommands.add_parser("serve", help="Run the MCP or HTTP server")
    serve.add_argument("--mode", choices=["stdio", "http"], help="Transport (default from config)")
    serve.add_argument("--host", help="Bind address in http mode")
    serve.add_argument("--port", type=int, help="Port in http mode")

    subcommands.add_parser("migrate", help="Create or upgrade the database schema")

    delete = subcommands.add_parser("delete-episode", help="Permanently delete an episode")
    delete.add_argument("episode_id")
    delete.add_argument("--yes", action="store_true", help="Confirm the deletion")

    return parser


async def serve_stdio(settings: Settings) -> None:
    async with open_service(settings) as service:
        server = create_mcp_server(service, settings.mcp.server_name)
        logger.info("mcp_stdio_serving")
        await server.run_stdio_async()


async def serve_http(settings: Settings, host: str, port: int) -> None:
    async with open_service(settings) as service:
        server = create_mcp_server(service, settings.mcp.server_name)
        app = create_app(
            settings,
            service=service,
            mcp_app=server.sse_app(settings.mcp.mount_path),
        )
        config = uvicorn.Config(app, host=host, port=port, log_config=None)
        logger.info("http_serving", host=host, port=port)
        await uvicorn.Server(config).serve()


async def run_migrate(settings: Settings) -> dict[str, object]:
    store = await DuckDBEpisodeStore.open(
        settings.storage.db_path,
        dimensions=settings.storage.dimensions,
        enable_vector_index=settings.storage.enable_vector_index,
    )
    try:
        schema = store.schema
        return {
            "db_path": settings.storage.db_path,
            "schema_version": schema.version if schema else SCHEMA_VERSION,
            "applied": schema.applied if schema else [],
            "vector_index": store.vector_index_enabled,
            "episode_count": await store.count_episodes(),
        }
    finally:
        await store.close()


async def run_delete(settings: Settings, episode_id: str) -> None:
    async with open_service(settings, with_embeddings=False) as service:
        await service.delete_episode(episode_id)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    settings = get_settings()
    if args.db_path:
        settings.storage.db_path = args.db_path

    log_config = settings.observability.logging
    setup_logging(
        level=log_config.level,
        format=log_config.format,
        redact_secrets=log_config.redact_secrets,
    )

    try:
        if args.command == "serve":
            mode = args.mode or settings.mcp.mode
            if mode == "http":
                asyncio.run(
                    serve_http(settings, args.host or settings.api.host, args.port or settings.api.port)
                )
            else:
                asyncio.run(serve_stdio(settings))
        elif args.command == "migrate":
            print(json.dumps(asyncio.run(run_migrate(settings)), indent=2))
        elif args.command == "delete-episode":
            if not args.yes:
                print(
                    f"refusing to delete {args.episode_id} without --yes; this cannot be undone",
                    file=sys.stderr,
                )
                return 2
            asyncio.run(run_delete(settings, args.episode_id))
            print(f"deleted {args.episode_id}")
    except NotFoundError as e:
        print(str(e), file=sys.stderr)
        return 1
    except StoreError as e:
        logger.error("command_failed", command=args.command, error=str(e))
        print(str(e), file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
