"""Doctor command for environment diagnostics."""

from __future__ import annotations

import httpx
import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_client
from adapters.session_store import FileSessionStore
from adapters.version_negotiator import negotiate_version
from core.config import AppSettings, write_user_env_vars
from core.domain.models import Session
from core.domain.version import BASELINE_VERSION, ICON_VERSION, TENANT_BRANDING_VERSION
from core.errors import BrandingError

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def check_session(
    session: Session,
    settings: AppSettings,
    *,
    transport: httpx.BaseTransport | None = None,
) -> tuple[bool, str]:
    """Negotiate the API version of `session`'s endpoint and list what it unlocks."""

    try:
        with build_client(settings, transport=transport) as client:
            version = negotiate_version(client, session)
    except BrandingError as exc:
        return False, str(exc)

    if version < BASELINE_VERSION:
        return False, f"API {version}: branding requires {BASELINE_VERSION}"
    features = ["branding", "themes", "css", "logo"]
    if version >= TENANT_BRANDING_VERSION:
        features.append("tenant branding")
    if version >= ICON_VERSION:
        features.append("icon")
    return True, f"API {version}: " + ", ".join(features)


@app.command()
def run(ctx: typer.Context) -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings: AppSettings = (ctx.obj or {}).get("settings") or AppSettings()

    table = Table(title="vcd-branding Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white", no_wrap=True)
    table.add_column("Details", style="dim")

    # Config
    if settings.verify_tls:
        detail = f"CA bundle: {settings.ca_bundle}" if settings.ca_bundle else "System trust store"
        table.add_row("TLS verification", "OK", detail)
    else:
        table.add_row("TLS verification", "WARN", "Disabled (VCD_BRANDING_VERIFY_TLS=false)")
    table.add_row("HTTP timeout", "OK", f"{settings.http_timeout_seconds:g}s")

    # Sessions
    try:
        sessions = FileSessionStore(settings.sessions_path).active_sessions()
    except BrandingError as exc:
        sessions = []
        table.add_row("Session registry", "FAIL", str(exc))
    else:
        status = "OK" if sessions else "EMPTY"
        table.add_row("Session registry", status, f"{len(sessions)} session(s) in {settings.sessions_path}")

    any_failed = False
    for session in sessions:
        ok, detail = check_session(session, settings)
        any_failed = any_failed or not ok
        table.add_row(session.key, "OK" if ok else "FAIL", detail)

    _console.print(table)

    if not sessions:
        _console.print("\n[yellow]Note:[/yellow] add a session with `vcd-branding session add`.")
    if any_failed:
        raise typer.Exit(code=1)


@app.command(name="setup")
def setup() -> None:
    """Interactive setup (stores defaults in the user config .env)."""

    verify = typer.confirm("Verify TLS certificates?", default=True)
    ca_bundle = ""
    if verify:
        ca_bundle = typer.prompt("CA bundle path (empty for the system store)", default="", show_default=False).strip()
    timeout = typer.prompt("HTTP timeout (seconds)", default=20.0, type=float)
    if timeout <= 0:
        raise typer.BadParameter("timeout must be positive")

    env_path = write_user_env_vars(
        {
            "VCD_BRANDING_VERIFY_TLS": "true" if verify else "false",
            "VCD_BRANDING_CA_BUNDLE": ca_bundle or None,
            "VCD_BRANDING_HTTP_TIMEOUT_SECONDS": f"{timeout:g}",
        }
    )

    _console.print(f"[green]Saved config to:[/green] {env_path}")
