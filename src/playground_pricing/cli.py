"""CLI for Playground Pricing."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import httpx
import structlog
import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from playground_pricing import __version__
from playground_pricing.core.config import AppConfig, load_config
from playground_pricing.core.errors import ConfigurationError, PlaygroundError
from playground_pricing.services.analytics import (
    AdminAnalytics,
    AnalyticsService,
    UserAnalytics,
)
from playground_pricing.services.llm import (
    create_models_client,
    format_cost,
    format_tokens,
    get_model_type_description,
    price_response,
)
from playground_pricing.services.llm.client import ModelsClient
from playground_pricing.services.model_sync import ModelSyncService
from playground_pricing.services.storage import (
    ModelRepository,
    SessionRepository,
    create_db_engine,
)
from playground_pricing.services.tools import (
    calculate_total_tool_costs,
    format_tool_cost,
    format_tool_name,
    parse_tool_calls,
)

# Configure structlog
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

app = typer.Typer(
    name="playground-pricing",
    help="Playground Pricing - model catalog, cost accounting and usage analytics",
    add_completion=False,
)
console = Console()

ConfigOption = Annotated[
    Path | None, typer.Option("--config", "-c", help="Path to config YAML file")
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-V", help="Verbose output")]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"playground-pricing v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
) -> None:
    """Playground Pricing CLI."""
    load_dotenv()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _create_client(config: AppConfig, dry_run: bool) -> ModelsClient:
    if dry_run:
        console.print("[yellow]DRY RUN MODE - using the built-in model listing[/yellow]")
        return create_models_client(dry_run=True)

    return create_models_client(
        api_key=config.get_api_key(),
        base_url=config.api_base_url,
        timeout=config.request_timeout,
    )


@app.command("refresh-models")
def refresh_models(
    config_path: ConfigOption = None,
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="Use the built-in listing, no API calls")
    ] = False,
    verbose: VerboseOption = False,
) -> None:
    """Fetch the provider's model listing and upsert it into the models table.

    Args:
        config_path: Path to YAML configuration file.
        dry_run: If True, use the fake models client.
        verbose: Enable verbose logging.
    """
    _configure_logging(verbose)

    try:
        config = load_config(config_path)
        client = _create_client(config, dry_run)
        engine = create_db_engine(config.database_url)

        async def _run() -> int:
            async with client:
                service = ModelSyncService(client, ModelRepository(engine))
                models = await service.refresh()
            return len(models)

        try:
            count = asyncio.run(_run())
        finally:
            engine.dispose()

        console.print(f"[bold green]Successfully refreshed {count} models[/bold green]")

    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except PlaygroundError as e:
        console.print(f"[red]{e}")
        raise typer.Exit(1) from e
    except httpx.HTTPError as e:
        console.print(f"[red]Provider API error:[/red] {e}")
        raise typer.Exit(1) from e
    except Exception as e:
        console.print(f"[red]Unexpected error:[/red] {escape(str(e))}")
        if verbose:
            console.print_exception()
        raise typer.Exit(1) from e


@app.command()
def models(
    config_path: ConfigOption = None,
    describe: Annotated[
        bool, typer.Option("--describe", help="Show model type descriptions")
    ] = False,
) -> None:
    """List active models from the catalog with pricing.

    Args:
        config_path: Path to YAML configuration file.
        describe: Add a column describing each model type.
    """
    try:
        config = load_config(config_path)
        engine = create_db_engine(config.database_url)
        try:
            rows = asyncio.run(ModelRepository(engine).list_active_models())
        finally:
            engine.dispose()

    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except ConfigurationError as e:
        console.print(f"[red]{e}")
        raise typer.Exit(1) from e
    except Exception as e:
        console.print(f"[red]Unexpected error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e

    if not rows:
        console.print("[yellow]No models stored. Run refresh-models first.[/yellow]")
        return

    table = Table(title="Active models")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Owner")
    table.add_column("Context", justify="right")
    table.add_column("Input $/1M", justify="right")
    table.add_column("Output $/1M", justify="right")
    if describe:
        table.add_column("Description")

    for row in rows:
        cells = [
            row.id,
            row.display_name,
            row.model_type,
            row.owner,
            format_tokens(row.context_window),
            f"{row.input_pricing:.2f}",
            f"{row.output_pricing:.2f}",
        ]
        if describe:
            cells.append(get_model_type_description(row.model_type))
        table.add_row(*cells)

    console.print(table)


@app.command("tool-cost")
def tool_cost(
    payload: Annotated[str, typer.Argument(help="Executed-tools JSON payload")],
) -> None:
    """Price a provider executed-tools payload.

    Args:
        payload: JSON text of one executed tool or a list of them.
    """
    result = calculate_total_tool_costs(parse_tool_calls(payload))
    if not result.breakdown:
        console.print("[yellow]No tool usage found in payload[/yellow]")
        return

    table = Table(title="Tool costs")
    table.add_column("Tool")
    table.add_column("Usage", justify="right")
    table.add_column("Cost", justify="right")
    for item in result.breakdown:
        if item.duration is not None:
            usage = f"{item.duration:g}s"
        else:
            usage = str(item.count or 0)
        table.add_row(format_tool_name(item.tool, item.action), usage, format_tool_cost(item.cost))

    console.print(table)
    console.print(f"[bold]Total:[/bold] {format_tool_cost(result.total)}")


@app.command("message-cost")
def message_cost(
    model: Annotated[str, typer.Argument(help="Model ID")],
    prompt_tokens: Annotated[int, typer.Argument(help="Prompt tokens", min=0)],
    completion_tokens: Annotated[int, typer.Argument(help="Completion tokens", min=0)],
    cached_tokens: Annotated[
        int, typer.Option("--cached", help="Cached prompt tokens", min=0)
    ] = 0,
    tools: Annotated[
        str | None, typer.Option("--tools", help="Executed-tools JSON payload")
    ] = None,
) -> None:
    """Price one model response from its token usage and executed tools.

    Args:
        model: Provider model ID.
        prompt_tokens: Number of prompt tokens.
        completion_tokens: Number of completion tokens.
        cached_tokens: Number of cached prompt tokens.
        tools: Optional executed-tools payload.
    """
    cost = price_response(model, prompt_tokens, completion_tokens, cached_tokens, tools)

    console.print(f"[bold]{model}[/bold]")
    console.print(
        f"  Input:  {format_tokens(prompt_tokens)} tokens  {format_cost(cost.tokens.input_cost)}"
    )
    console.print(
        f"  Output: {format_tokens(completion_tokens)} tokens  "
        f"{format_cost(cost.tokens.output_cost)}"
    )
    if cached_tokens:
        console.print(f"  Cached: {format_tokens(cached_tokens)} tokens")
    if cost.tools.breakdown:
        console.print(f"  Tools:  {format_tool_cost(cost.tools.total)}")
    console.print(f"  [bold]Total:[/bold] {format_cost(cost.total_cost)}")


@app.command()
def analytics(
    config_path: ConfigOption = None,
    user: Annotated[
        str | None, typer.Option("--user", "-u", help="Show analytics for one user")
    ] = None,
    days: Annotated[
        int | None, typer.Option("--days", "-d", help="Admin window in days", min=1)
    ] = None,
) -> None:
    """Show usage and cost analytics for one user or across all users.

    Args:
        config_path: Path to YAML configuration file.
        user: User ID; when omitted the admin view is shown.
        days: Admin window length; defaults to the configured value.
    """
    try:
        config = load_config(config_path)
        engine = create_db_engine(config.database_url)
        service = AnalyticsService(SessionRepository(engine))
        try:
            if user:
                _print_user_analytics(user, asyncio.run(service.get_user_analytics(user)))
            else:
                window = days or config.analytics.days
                _print_admin_analytics(asyncio.run(service.get_admin_analytics(window)))
        finally:
            engine.dispose()

    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except ConfigurationError as e:
        console.print(f"[red]{e}")
        raise typer.Exit(1) from e
    except Exception as e:
        console.print(f"[red]Unexpected error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e


def _print_user_analytics(user_id: str, report: UserAnalytics) -> None:
    console.print(f"[bold]Analytics for {user_id}[/bold]")
    console.print(f"  Sessions: {report.total_sessions}")
    console.print(f"  Total cost: {format_cost(report.total_cost)}")
    console.print(
        f"  Tokens: {format_tokens(report.total_tokens)} "
        f"(input {format_tokens(report.total_input_tokens)}, "
        f"output {format_tokens(report.total_output_tokens)}, "
        f"cached {format_tokens(report.total_cached_tokens)})"
    )
    console.print(f"  Avg cost per session: {format_cost(report.avg_cost_per_session)}")

    if report.cost_by_model:
        table = Table(title="Cost by model")
        table.add_column("Model")
        table.add_column("Sessions", justify="right")
        table.add_column("Cost", justify="right")
        for bucket in report.cost_by_model:
            table.add_row(bucket.model, str(bucket.count), format_cost(bucket.cost))
        console.print(table)

    if report.cost_by_date:
        table = Table(title="Cost by date")
        table.add_column("Date")
        table.add_column("Cost", justify="right")
        for day in report.cost_by_date:
            table.add_row(day.date, format_cost(day.cost))
        console.print(table)


def _print_admin_analytics(report: AdminAnalytics) -> None:
    summary = report.summary
    console.print(f"[bold]Usage over the last {report.days} days[/bold]")
    console.print(f"  Messages: {summary.total_messages} ({summary.avg_messages_per_day}/day)")
    console.print(f"  Sessions: {summary.total_sessions} ({summary.avg_sessions_per_day}/day)")
    console.print(
        f"  Cost: {format_cost(summary.total_cost)} "
        f"({format_cost(summary.avg_cost_per_day)}/day)"
    )

    if report.model_usage:
        table = Table(title="Model usage")
        table.add_column("Model")
        table.add_column("Sessions", justify="right")
        table.add_column("Cost", justify="right")
        for bucket in report.model_usage:
            table.add_row(bucket.model, str(bucket.count), format_cost(bucket.cost))
        console.print(table)

    if report.top_users:
        table = Table(title="Top users")
        table.add_column("User")
        table.add_column("Messages", justify="right")
        table.add_column("Cost", justify="right")
        for spend in report.top_users:
            table.add_row(spend.user_id, str(spend.message_count), format_cost(spend.total_cost))
        console.print(table)


@app.command()
def validate(
    config_path: Annotated[Path, typer.Argument(help="Path to config YAML file")],
) -> None:
    """Validate a configuration file.

    Args:
        config_path: Path to YAML configuration file.
    """
    try:
        config = load_config(config_path)
        console.print("[green]Configuration is valid![/green]")
        console.print(f"  Database: {config.database_url}")
        console.print(f"  API base URL: {config.api_base_url}")
        console.print(f"  API key in file: {'yes' if config.api_key else 'no'}")
        console.print(f"  Request timeout: {config.request_timeout}s")
        console.print(f"  Analytics window: {config.analytics.days} days")

    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except ConfigurationError as e:
        console.print(f"[red]{e}")
        raise typer.Exit(1) from e
    except Exception as e:
        console.print(f"[red]Validation error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e


@app.command()
def info() -> None:
    """Show tool information and example commands."""
    console.print("[bold]Playground Pricing[/bold]")
    console.print(f"Version: {__version__}\n")

    console.print("[bold]Example Commands:[/bold]")
    console.print("  # Populate the catalog without API calls")
    console.print("  uv run playground-pricing refresh-models --dry-run\n")

    console.print("  # Refresh from the provider (needs GROQ_API_KEY)")
    console.print("  uv run playground-pricing refresh-models --config config.yaml\n")

    console.print("  # Price a response")
    console.print("  uv run playground-pricing message-cost llama-3.3-70b-versatile 1200 350\n")

    console.print("  # Price executed tools")
    console.print(
        "  uv run playground-pricing tool-cost "
        '\'[{"type": "browser_search", "arguments": "{\\"action\\": \\"search\\"}"}]\'\n'
    )

    console.print("  # Admin analytics for the last week")
    console.print("  uv run playground-pricing analytics --days 7")


if __name__ == "__main__":
    app()
