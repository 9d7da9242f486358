"""CLI UI components (Rich).

Keeps command logic apart from tables and panels, so several commands can
reuse them.
"""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import BrandingSettings, OperationResult, Session, ThemeDescriptor


def build_branding_panel(branding: BrandingSettings, *, title: str = "Branding") -> Panel:
    body = Text()
    body.append("Portal name:  ", style="bold")
    body.append(f"{branding.portal_name or '-'}\n")
    body.append("Portal color: ", style="bold")
    body.append(branding.portal_color or "-")
    body.append("\nTheme:        ", style="bold")
    if branding.selected_theme:
        body.append(f"{branding.selected_theme.name} ({branding.selected_theme.theme_type.value})")
    else:
        body.append("-")

    if branding.custom_links:
        body.append("\n\nCustom links:\n", style="bold")
        for link in branding.custom_links:
            if link.menu_item_type.value == "separator":
                body.append("  ────\n", style="dim")
                continue
            body.append(f"  - {link.name or '(unnamed)'}")
            if link.url:
                body.append(f"  {link.url}", style="magenta")
            body.append("\n")

    return Panel(body, title=Text(title, style="bold cyan"), border_style="cyan")


def build_themes_table(themes: list[ThemeDescriptor]) -> Table:
    table = Table(title="Themes")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Type", style="white")
    for theme in themes:
        table.add_row(theme.name, theme.theme_type.value)
    return table


def build_sessions_table(sessions: list[Session]) -> Table:
    table = Table(title="Sessions")
    table.add_column("Endpoint", style="cyan", no_wrap=True)
    table.add_column("Scheme", style="white")
    table.add_column("Org", style="magenta")
    table.add_column("User", style="dim")
    for session in sessions:
        table.add_row(session.key, session.auth_scheme.value, session.org or "-", session.user or "-")
    return table


def print_result(console: Console, result: OperationResult) -> None:
    console.print(f"[green]{result.message}[/green] [dim](API {result.version})[/dim]")
