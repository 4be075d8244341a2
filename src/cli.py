"""
Command-line interface for review-pulse.

Provides commands to run the API, initialize the database, generate the
executive report on a schedule, and run diagnostic checks.

Usage:
    review-pulse serve     # Run the API server
    review-pulse init-db   # Create the reviews table
    review-pulse report    # Generate the executive report once (cron)
    review-pulse health    # Check service health
"""

import asyncio
import sys
from pathlib import Path

import click

from src.config.settings import get_settings
from src.observability.logging import setup_logging
from src.observability.metrics import get_metrics

# Exit code for "nothing to report", distinct from failure
EXIT_NO_DATA = 2


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """Review Pulse - AI-assisted customer feedback service."""
    if debug:
        import os
        os.environ["DEBUG"] = "true"
        get_settings.cache_clear()

    setup_logging()


@main.command()
@click.option("--host", default=None, help="API server host")
@click.option("--port", default=None, type=int, help="API server port")
@click.option("--reload", is_flag=True, help="Enable auto-reload (dev only)")
@click.option("--metrics/--no-metrics", default=True, help="Enable metrics server")
@click.option("--metrics-port", default=None, type=int, help="Metrics server port")
def serve(
    host: str | None,
    port: int | None,
    reload: bool,
    metrics: bool,
    metrics_port: int | None,
) -> None:
    """Start the review API server."""
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port
    metrics_port = metrics_port or settings.metrics_port

    if metrics:
        get_metrics().start_server(port=metrics_port)
        click.echo(f"Metrics available on http://localhost:{metrics_port}/metrics")

    click.echo(f"Starting API server on {host}:{port}")
    click.echo(f"API docs available on http://localhost:{port}/docs")

    uvicorn.run(
        "src.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=get_settings().effective_log_level.lower(),
    )


@main.command("init-db")
def init_db() -> None:
    """Initialize the database schema."""
    from src.reviews.repository import ReviewRepository
    from src.storage.database import Database

    async def run():
        async with Database() as db:
            await ReviewRepository(db).create_tables()
        click.echo("Database initialized successfully")

    asyncio.run(run())


@main.command()
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the markdown report to this file instead of stdout",
)
def report(output: Path | None) -> None:
    """Generate the executive report from the most recent reviews."""
    from src.ai.config import AIConfig
    from src.ai.gateway import AIGateway, create_openai_client
    from src.reports.config import ReportConfig
    from src.reports.job import ReportJob
    from src.reviews.repository import ReviewRepository
    from src.storage.database import Database

    ai_config = AIConfig()
    if not ai_config.configured:
        click.echo(click.style("AI_OPENAI_API_KEY is not set", fg="red"), err=True)
        sys.exit(1)

    async def run():
        client = create_openai_client(ai_config)
        try:
            async with Database() as db:
                job = ReportJob(
                    gateway=AIGateway(client, ai_config),
                    repository=ReviewRepository(db),
                    config=ReportConfig(),
                )
                return await job.generate()
        finally:
            await client.close()

    result = asyncio.run(run())

    if result.no_data:
        click.echo("No reviews found to analyze.", err=True)
        sys.exit(EXIT_NO_DATA)

    if output is not None:
        output.write_text(result.markdown, encoding="utf-8")
        click.echo(f"Report from {result.review_count} reviews written to {output}")
    else:
        click.echo(result.markdown)


@main.command()
def health() -> None:
    """Check health of all dependencies."""
    import structlog

    from src.ai.config import AIConfig
    from src.storage.database import Database

    logger = structlog.get_logger()

    async def check():
        results: dict[str, bool] = {}

        try:
            async with Database() as db:
                results["postgres"] = await db.health_check()
        except Exception as e:
            results["postgres"] = False
            logger.error("Postgres health check failed", error=str(e))

        results["ai_configured"] = AIConfig().configured
        return results

    results = asyncio.run(check())

    click.echo("\nHealth Check Results:")
    click.echo("-" * 40)
    for name, status in results.items():
        icon = "✓" if status else "✗"
        color = "green" if status else "red"
        click.echo(click.style(f"  {icon} {name}: {status}", fg=color))
    click.echo("-" * 40)

    if all(results.values()):
        click.echo(click.style("All core services healthy!", fg="green"))
        sys.exit(0)
    click.echo(click.style("Some services unhealthy!", fg="red"))
    sys.exit(1)


if __name__ == "__main__":
    main()
