"""CLI entry point for the API-reference search server."""

from __future__ import annotations

import asyncio
import logging
import sys

import click

from apiref_search.domain.exceptions import DomainException


@click.command()
@click.option(
    "--config", "-c",
    default=None,
    help="Path to YAML config file",
)
@click.option(
    "--shards-path", "-p",
    default=None,
    help="Directory holding the shard assets (overrides config/env)",
)
@click.option(
    "--base-url",
    default=None,
    help="Base URL serving the shard assets; selects the http source (overrides config/env)",
)
@click.option(
    "--manifest",
    default=None,
    help="Bucket manifest relative to the source: searchdata.js or manifest.json (overrides config/env)",
)
@click.option(
    "--mode", "-m",
    type=click.Choice(["stdio", "sse", "streamable-http", "console"]),
    default=None,
    help="Transport mode, or 'console' to search interactively from stdin (overrides config/env)",
)
@click.option(
    "--port",
    type=int,
    default=None,
    help="Port for HTTP server (overrides config/env)",
)
@click.option(
    "--query", "-q",
    default=None,
    help="Run a single query, print the results and exit",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=None,
    help="Enable debug logging (overrides config/env)",
)
def cli(
    config: str | None,
    shards_path: str | None,
    base_url: str | None,
    manifest: str | None,
    mode: str | None,
    port: int | None,
    query: str | None,
    verbose: bool | None,
) -> None:
    """Incremental symbol search over a generated API reference.

    Loads the index shards of a Doxygen-style documentation site lazily and
    answers partial symbol names with ranked, grouped definitions.

    Configuration priority: YAML config < env vars (APIREF_SEARCH_*) < CLI arguments.
    """
    from apiref_search.config import load_config

    cli_overrides = {
        "shards.path": shards_path,
        "shards.base_url": base_url,
        "shards.source": "http" if base_url else None,
        "shards.manifest": manifest,
        "server.mode": mode,
        "server.port": port,
        "server.verbose": verbose,
    }

    app_config = load_config(config_path=config, cli_overrides=cli_overrides)

    log_level = logging.DEBUG if app_config.server.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    from apiref_search.presentation.console import run_console, run_query
    from apiref_search.server import create_engine, create_server, create_service

    try:
        engine = create_engine(app_config)
    except DomainException as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if query is not None:
        service = create_service(app_config, engine)
        try:
            click.echo(asyncio.run(run_query(service, engine, query)))
        except DomainException as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)
        return

    if app_config.server.mode == "console":
        asyncio.run(
            run_console(
                engine,
                sys.stdin,
                click.echo,
                debounce_ms=app_config.session.debounce_ms,
                limit=app_config.search.default_limit,
            )
        )
        return

    server = create_server(app_config, engine)

    if app_config.server.mode == "stdio":
        server.run(transport="stdio")
    else:
        server.run(transport=app_config.server.mode, port=app_config.server.port)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
