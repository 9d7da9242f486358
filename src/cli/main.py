"""Command line interface (Typer).

Commands only parse arguments, call `BrandingService` and print results;
all remote logic lives in `core.services`.
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from adapters.asset_files import read_asset, write_output
from adapters.session_store import FileSessionStore
from cli import doctor
from cli.ui_components import (
    build_branding_panel,
    build_sessions_table,
    build_themes_table,
    print_result,
)
from core.config import AppSettings
from core.domain.models import AuthScheme, BrandingUpdate, CustomLink, MenuItemType, Session
from core.errors import BrandingError
from core.services.branding import BrandingService

app = typer.Typer(no_args_is_help=True, help="Manage portal branding and themes of a cloud director endpoint.")
branding_app = typer.Typer(no_args_is_help=True, help="Read and update the branding record.")
theme_app = typer.Typer(no_args_is_help=True, help="List, create, remove and activate themes.")
logo_app = typer.Typer(no_args_is_help=True, help="Upload or download the portal logo.")
icon_app = typer.Typer(no_args_is_help=True, help="Upload or download the browser icon.")
session_app = typer.Typer(no_args_is_help=True, help="Manage stored session references.")

app.add_typer(branding_app, name="branding")
app.add_typer(theme_app, name="theme")
app.add_typer(logo_app, name="logo")
app.add_typer(icon_app, name="icon")
app.add_typer(session_app, name="session")
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)

TenantOption = typer.Option(None, "--tenant", "-t", help="Apply to one tenant instead of the system default.")


def build_service(settings: AppSettings) -> BrandingService:
    return BrandingService(FileSessionStore(settings.sessions_path), settings)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=_err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    endpoint: Optional[str] = typer.Option(
        None,
        "--endpoint",
        "-e",
        help="Target endpoint when sessions to several endpoints are stored.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every request."),
) -> None:
    try:
        settings = AppSettings()
    except ValidationError as exc:
        _err_console.print(f"[red]Invalid configuration:[/red] {exc}")
        raise typer.Exit(code=2) from exc
    _configure_logging("DEBUG" if verbose else settings.log_level)
    ctx.obj = {"settings": settings, "endpoint": endpoint}


def _settings(ctx: typer.Context) -> AppSettings:
    return ctx.obj["settings"]


def _service(ctx: typer.Context) -> BrandingService:
    return build_service(_settings(ctx))


def _endpoint(ctx: typer.Context) -> str | None:
    return ctx.obj["endpoint"]


@contextmanager
def _reported() -> Iterator[None]:
    try:
        yield
    except BrandingError as exc:
        _err_console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc


def parse_link(value: str) -> CustomLink:
    """`NAME=URL` for a link, `-` for a separator."""

    if value.strip() == "-":
        return CustomLink(menu_item_type=MenuItemType.SEPARATOR)
    if "=" not in value:
        raise typer.BadParameter(f"Expected NAME=URL or '-', got {value!r}")
    name, url = value.split("=", 1)
    return CustomLink(name=name.strip(), url=url.strip(), menu_item_type=MenuItemType.LINK)


# -- branding ---------------------------------------------------------------


@branding_app.command("get")
def branding_get(
    ctx: typer.Context,
    tenant: Optional[str] = TenantOption,
    as_json: bool = typer.Option(False, "--json", help="Print the raw record as JSON."),
) -> None:
    """Show the current branding record."""

    with _reported():
        branding = _service(ctx).get_branding(endpoint=_endpoint(ctx), tenant=tenant)
    if as_json:
        typer.echo(json.dumps(branding.to_payload(), indent=2, sort_keys=True))
        return
    _console.print(build_branding_panel(branding, title=f"Branding ({tenant})" if tenant else "Branding"))


@branding_app.command("set")
def branding_set(
    ctx: typer.Context,
    name: Optional[str] = typer.Option(None, "--name", help="Portal name."),
    color: Optional[str] = typer.Option(None, "--color", help="Portal color (#RRGGBB), or 'Remove' to clear it."),
    theme: Optional[str] = typer.Option(None, "--theme", help="Name of an existing theme to select."),
    links: Optional[list[str]] = typer.Option(None, "--link", help="Custom link NAME=URL, or '-' for a separator."),
    clear_links: bool = typer.Option(False, "--clear-links", help="Remove every custom link."),
    tenant: Optional[str] = TenantOption,
) -> None:
    """Update branding fields; fields not given keep their current value."""

    custom_links: list[CustomLink] | None = None
    if clear_links:
        custom_links = []
    elif links:
        custom_links = [parse_link(v) for v in links]

    update = BrandingUpdate(portal_name=name, portal_color=color, custom_links=custom_links)
    with _reported():
        result = _service(ctx).set_branding(update, theme=theme, endpoint=_endpoint(ctx), tenant=tenant)
    print_result(_console, result)


# -- themes -----------------------------------------------------------------


@theme_app.command("list")
def theme_list(ctx: typer.Context) -> None:
    """List built-in and custom themes."""

    with _reported():
        themes = _service(ctx).list_themes(endpoint=_endpoint(ctx))
    _console.print(build_themes_table(themes))


@theme_app.command("create")
def theme_create(ctx: typer.Context, name: str = typer.Argument(..., help="New theme name.")) -> None:
    with _reported():
        result = _service(ctx).create_theme(name, endpoint=_endpoint(ctx))
    print_result(_console, result)


@theme_app.command("remove")
def theme_remove(ctx: typer.Context, name: str = typer.Argument(..., help="Custom theme to delete.")) -> None:
    with _reported():
        result = _service(ctx).remove_theme(name, endpoint=_endpoint(ctx))
    print_result(_console, result)


@theme_app.command("activate")
def theme_activate(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Theme to select."),
    tenant: Optional[str] = TenantOption,
) -> None:
    """Select a theme for the portal (or for one tenant)."""

    with _reported():
        result = _service(ctx).activate_theme(name, endpoint=_endpoint(ctx), tenant=tenant)
    print_result(_console, result)


@theme_app.command("upload-css")
def theme_upload_css(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Custom theme receiving the stylesheet."),
    path: Path = typer.Argument(..., help="CSS file to upload."),
) -> None:
    with _reported():
        asset = read_asset(path)
        result = _service(ctx).upload_css(name, asset, endpoint=_endpoint(ctx))
    print_result(_console, result)


@theme_app.command("download-css")
def theme_download_css(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Theme whose stylesheet is fetched."),
    path: Path = typer.Argument(..., help="Output file."),
) -> None:
    with _reported():
        css = _service(ctx).download_css(name, endpoint=_endpoint(ctx))
        write_output(path, css)
    _console.print(f"[green]Saved CSS of '{name}' to:[/green] {path}")


# -- logo / icon ------------------------------------------------------------


@logo_app.command("upload")
def logo_upload(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="PNG file."),
    tenant: Optional[str] = TenantOption,
) -> None:
    with _reported():
        asset = read_asset(path)
        result = _service(ctx).upload_logo(asset, endpoint=_endpoint(ctx), tenant=tenant)
    print_result(_console, result)


@logo_app.command("download")
def logo_download(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Output file."),
    tenant: Optional[str] = TenantOption,
) -> None:
    with _reported():
        content = _service(ctx).download_logo(endpoint=_endpoint(ctx), tenant=tenant)
        write_output(path, content)
    _console.print(f"[green]Saved logo to:[/green] {path}")


@icon_app.command("upload")
def icon_upload(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="PNG or SVG file."),
    tenant: Optional[str] = TenantOption,
) -> None:
    with _reported():
        asset = read_asset(path)
        result = _service(ctx).upload_icon(asset, endpoint=_endpoint(ctx), tenant=tenant)
    print_result(_console, result)


@icon_app.command("download")
def icon_download(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Output file."),
    tenant: Optional[str] = TenantOption,
) -> None:
    with _reported():
        content = _service(ctx).download_icon(endpoint=_endpoint(ctx), tenant=tenant)
        write_output(path, content)
    _console.print(f"[green]Saved icon to:[/green] {path}")


# -- sessions ---------------------------------------------------------------


@session_app.command("add")
def session_add(
    ctx: typer.Context,
    endpoint: str = typer.Option(..., "--endpoint", help="Endpoint host name."),
    token: str = typer.Option(..., "--token", prompt=True, hide_input=True, help="Session reference from a login."),
    scheme: AuthScheme = typer.Option(AuthScheme.VCLOUD, "--scheme", help="How the token is sent."),
    org: Optional[str] = typer.Option(None, "--org"),
    user: Optional[str] = typer.Option(None, "--user"),
) -> None:
    """Store a session obtained by logging in elsewhere."""

    store = FileSessionStore(_settings(ctx).sessions_path)
    session = Session(endpoint=endpoint, token=token, auth_scheme=scheme, org=org, user=user)
    with _reported():
        store.add(session)
    _console.print(f"[green]Stored session for:[/green] {session.key}")


@session_app.command("list")
def session_list(ctx: typer.Context) -> None:
    store = FileSessionStore(_settings(ctx).sessions_path)
    with _reported():
        sessions = store.active_sessions()
    _console.print(build_sessions_table(sessions))


@session_app.command("remove")
def session_remove(ctx: typer.Context, endpoint: str = typer.Argument(...)) -> None:
    store = FileSessionStore(_settings(ctx).sessions_path)
    with _reported():
        removed = store.remove(endpoint)
    if not removed:
        _err_console.print(f"[yellow]No session stored for {endpoint}.[/yellow]")
        raise typer.Exit(code=1)
    _console.print(f"[green]Removed session for:[/green] {endpoint}")


def run() -> None:
    app()
