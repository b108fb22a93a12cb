"""Click CLI entry point for NicheScout."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

from nichescout.config import Settings
from nichescout.db import KeyValueStore
from nichescout.errors import NicheScoutError, describe_failure
from nichescout.logging import configure_logging

if TYPE_CHECKING:
    from nichescout.models.result import PipelineResult
    from nichescout.service import ResearchService


def _get_store(settings: Settings) -> KeyValueStore:
    settings.ensure_data_dir()
    store = KeyValueStore(settings.db_path)
    store.init_schema()
    return store


def _get_service(ctx: click.Context) -> ResearchService:
    """Build the service once per invocation; tests may pre-seed ``ctx.obj["service"]``."""
    from nichescout.service import ResearchService

    if "service" not in ctx.obj:
        settings: Settings = ctx.obj["settings"]
        store = _get_store(settings)
        ctx.call_on_close(store.close)
        ctx.obj["service"] = ResearchService.from_settings(store, settings)
    return ctx.obj["service"]  # type: ignore[no-any-return]


def _fail(exc: BaseException) -> None:
    report = describe_failure(exc)
    click.echo(f"Error: {report.title}", err=True)
    click.echo(f"  {report.message}", err=True)
    if report.attempts:
        click.echo(f"  Attempts: {report.attempts}", err=True)
    click.echo(f"  {report.suggestion}", err=True)
    sys.exit(1)


def _print_summary(result: PipelineResult) -> None:
    market = result.chosen_market
    if market is not None:
        click.echo(f"Niche: {market.niche}")
        if market.core_market:
            click.echo(f"  Core market: {market.core_market}")
        if market.sub_niche:
            click.echo(f"  Sub-niche:   {market.sub_niche}")
        if market.reasoning:
            click.echo(f"  Reasoning:   {market.reasoning}")
    elif result.has("marketDiscovery"):
        click.echo("Niche: (unstructured discovery output)")

    if result.has("research") and isinstance(result.research, dict):
        click.echo(f"Search query: {result.research.get('query', '')}")
        threads = result.research.get("threads")
        if isinstance(threads, list):
            mock = any(isinstance(t, dict) and t.get("isMockData") for t in threads)
            click.echo(f"Reddit threads: {len(threads)}{' (mock data)' if mock else ''}")

    names = result.solution_names
    if names:
        click.echo("Solutions:")
        for name in names:
            click.echo(f"  - {name}")
    elif result.has("strategy"):
        click.echo("Strategy: (unstructured output, see export)")

    for failure in result.errors:
        click.echo(f"[{failure.agent}] failed ({failure.kind}): {failure.user_message}", err=True)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """NicheScout: AI market research pipeline."""
    ctx.ensure_object(dict)
    settings = ctx.obj.get("settings") or Settings()
    log_level = "DEBUG" if verbose else settings.log_level
    configure_logging(log_level=log_level, log_format=settings.log_format)
    ctx.obj["settings"] = settings
    ctx.obj["verbose"] = verbose


@cli.command()
@click.option(
    "--collect-errors",
    is_flag=True,
    help="Keep going after a stage failure and report what completed",
)
@click.option("--save", is_flag=True, help="Save the result to your idea bank")
@click.option(
    "--export",
    "export_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Also write the result as JSON into this directory",
)
@click.option("--json", "as_json", is_flag=True, help="Print the full result as JSON")
@click.pass_context
def run(
    ctx: click.Context,
    collect_errors: bool,
    save: bool,
    export_dir: Path | None,
    as_json: bool,
) -> None:
    """Run the four-stage research pipeline."""
    service = _get_service(ctx)
    if not service.settings.gemini_api_key:
        click.echo("Warning: GEMINI_API_KEY is not set", err=True)

    excluded = service.excluded_niches()
    if excluded:
        click.echo(f"Excluding {len(excluded)} previously explored niche(s)")

    try:
        result = asyncio.run(service.run(collect_errors=collect_errors))
    except NicheScoutError as exc:
        _fail(exc)
        return

    if as_json:
        click.echo(result.to_json())
    else:
        _print_summary(result)

    if save:
        if service.current_user() is None:
            click.echo("Not signed in; result not saved. Use `nichescout login`.", err=True)
        else:
            try:
                ideas = service.save_last_result()
            except NicheScoutError as exc:
                _fail(exc)
                return
            click.echo(f"Saved. Idea bank now holds {len(ideas)} idea(s).")

    if export_dir is not None:
        from nichescout.export import export_result

        path = export_result(result, export_dir)
        click.echo(f"Exported to {path}")


@cli.command("export")
@click.option(
    "--dir",
    "directory",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    help="Directory to write into",
)
@click.pass_context
def export_cmd(ctx: click.Context, directory: Path) -> None:
    """Export the most recent pipeline result as JSON."""
    from nichescout.export import export_result

    result = _get_service(ctx).last_result()
    if result is None:
        click.echo("No pipeline result yet. Run `nichescout run` first.", err=True)
        sys.exit(1)
    path = export_result(result, directory)
    click.echo(f"Exported to {path}")


@cli.group()
def ideas() -> None:
    """Manage your saved ideas."""


@ideas.command("ls")
@click.option("--content", "show_content", is_flag=True, help="Print each idea's content too")
@click.pass_context
def ideas_ls(ctx: click.Context, show_content: bool) -> None:
    """List saved ideas in the order they were saved."""
    service = _get_service(ctx)
    if service.current_user() is None:
        click.echo("Not signed in.")
        return
    saved = service.list_ideas()
    if not saved:
        click.echo("No saved ideas.")
        return
    for index, idea in enumerate(saved, start=1):
        click.echo(f"{index:3d}. {idea.name}")
        if show_content:
            click.echo(f"     {idea.content}")


@ideas.command("save")
@click.argument("content", required=False)
@click.pass_context
def ideas_save(ctx: click.Context, content: str | None) -> None:
    """Save CONTENT, or the most recent pipeline result when omitted."""
    from nichescout.service import NoLastResultError

    service = _get_service(ctx)
    if service.current_user() is None:
        click.echo("Not signed in. Use `nichescout login` first.", err=True)
        sys.exit(1)
    try:
        saved = service.save_idea(content) if content else service.save_last_result()
    except NoLastResultError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    except NicheScoutError as exc:
        _fail(exc)
        return
    click.echo(f"Idea bank holds {len(saved)} idea(s).")


@ideas.command("rm")
@click.argument("name")
@click.pass_context
def ideas_rm(ctx: click.Context, name: str) -> None:
    """Remove the saved idea called NAME."""
    service = _get_service(ctx)
    if service.current_user() is None:
        click.echo("Not signed in. Use `nichescout login` first.", err=True)
        sys.exit(1)
    before = len(service.list_ideas())
    try:
        remaining = service.remove_idea(name)
    except NicheScoutError as exc:
        _fail(exc)
        return
    if len(remaining) == before:
        click.echo(f"No idea named {name!r}.", err=True)
        sys.exit(1)
    click.echo(f"Removed. {len(remaining)} idea(s) left.")


@cli.group()
def niches() -> None:
    """Inspect or extend the niche exclusion list."""


@niches.command("ls")
@click.pass_context
def niches_ls(ctx: click.Context) -> None:
    """List niches future runs will avoid."""
    excluded = sorted(_get_service(ctx).excluded_niches())
    if not excluded:
        click.echo("No excluded niches.")
        return
    for niche in excluded:
        click.echo(f"  {niche}")


@niches.command("add")
@click.argument("niche")
@click.pass_context
def niches_add(ctx: click.Context, niche: str) -> None:
    """Exclude NICHE from future runs."""
    if not niche.strip():
        click.echo("Error: niche must not be blank", err=True)
        sys.exit(1)
    try:
        excluded = _get_service(ctx).exclusions.add(niche.strip())
    except NicheScoutError as exc:
        _fail(exc)
        return
    click.echo(f"{len(excluded)} niche(s) excluded.")


@cli.command()
@click.option("--email", prompt=True, help="Account email")
@click.option("--password", prompt=True, hide_input=True, help="Account password")
@click.pass_context
def login(ctx: click.Context, email: str, password: str) -> None:
    """Sign in (demo account only)."""
    from nichescout.auth import InvalidCredentialsError

    try:
        user = _get_service(ctx).auth.login(email, password)
    except InvalidCredentialsError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    click.echo(f"Signed in as {user.name} <{user.email}>")


@cli.command()
@click.pass_context
def logout(ctx: click.Context) -> None:
    """Sign out."""
    _get_service(ctx).auth.logout()
    click.echo("Signed out.")


@cli.command()
@click.pass_context
def whoami(ctx: click.Context) -> None:
    """Show the signed-in user."""
    user = _get_service(ctx).current_user()
    if user is None:
        click.echo("Not signed in.")
        return
    click.echo(json.dumps(user.model_dump(), indent=2))


@cli.command()
@click.pass_context
def check(ctx: click.Context) -> None:
    """Verify configuration."""
    settings: Settings = ctx.obj["settings"]
    keys = {
        "Gemini": bool(settings.gemini_api_key),
        "Reddit": settings.reddit_enabled,
    }
    for name, configured in keys.items():
        status = "OK" if configured else "-- not set"
        click.echo(f"  {name:16s} {status}")
    click.echo(f"  {'Fast model':16s} {settings.llm_fast_model}")
    click.echo(f"  {'Quality model':16s} {settings.llm_quality_model}")
    click.echo(f"  {'Data dir':16s} {settings.data_dir}")


@cli.command()
@click.option("--host", type=str, default=None, help="Bind host")
@click.option("--port", type=int, default=None, help="Bind port")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None) -> None:
    """Start the FastAPI API server."""
    import uvicorn

    settings = ctx.obj["settings"]
    uvicorn.run(
        "nichescout.api.app:create_app",
        factory=True,
        host=host or settings.api_host,
        port=port or settings.api_port,
    )
