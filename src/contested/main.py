"""
Contested - CLI Entry Point.

Usage:
    contested onboard        Run the onboarding wizard in the terminal
    contested serve          Start the web server
    contested health         Check configuration
    contested --help         Show help
"""

import asyncio
import logging
import sys
from typing import Any, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from onboarding.forms import MULTI_VALUE_TYPES, FieldDefinition, FieldType
from onboarding.steps import UserType, WizardStep, dashboard_route
from onboarding.wizard import OnboardingWizard, Toast

app = typer.Typer(
    name="contested",
    help="Contested - NIL partnership onboarding for athletes and businesses.",
    add_completion=False,
)
console = Console()

BOOLEAN_TYPES = {FieldType.CHECKBOX, FieldType.BOOLEAN}
TRUE_WORDS = {"y", "yes", "true", "1"}
FALSE_WORDS = {"n", "no", "false", "0"}


def setup_logging(level: str = "INFO") -> None:
    """Send log output to stderr so it stays out of the prompts."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    # Quiet down noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def parse_cli_value(field: FieldDefinition, raw: str) -> Any:
    """
    Turn a typed answer into the value stored for a field.

    Blank answers become None. Raises ValueError for unparseable numbers
    or yes/no answers.
    """
    raw = raw.strip()
    if not raw:
        return None

    if field.type in MULTI_VALUE_TYPES:
        return [part.strip() for part in raw.split(",") if part.strip()]

    if field.type in BOOLEAN_TYPES:
        lowered = raw.lower()
        if lowered in TRUE_WORDS:
            return True
        if lowered in FALSE_WORDS:
            return False
        raise ValueError(f"Answer yes or no for {field.label}")

    if field.type == FieldType.SLIDER:
        number = float(raw)
        return int(number) if number.is_integer() else number

    return raw


# =============================================================================
# Interactive Wizard
# =============================================================================


def _print_toast(toast: Toast) -> None:
    style = "red" if toast.variant == "destructive" else "green"
    console.print(f"[{style}]{toast.title}:[/{style}] {toast.description}")


def _field_hint(field: FieldDefinition) -> str:
    if field.options:
        ids = ", ".join(o.id for o in field.options)
        if field.type in MULTI_VALUE_TYPES:
            return f"comma-separated: {ids}"
        return ids
    if field.type in BOOLEAN_TYPES:
        return "y/n"
    if field.type == FieldType.SLIDER and field.min is not None and field.max is not None:
        return f"{field.min:g}-{field.max:g}"
    return field.placeholder or ""


def _ask_field(field: FieldDefinition, current: Any) -> Any:
    label = field.label + (" *" if field.required else "")
    hint = _field_hint(field)
    if hint:
        label += f" [dim]({hint})[/dim]"
    if field.description:
        console.print(f"[dim]{field.description}[/dim]")

    default = ""
    if current not in (None, "", []):
        default = ", ".join(current) if isinstance(current, list) else str(current)

    while True:
        raw = Prompt.ask(label, default=default, show_default=bool(default), console=console)
        try:
            return parse_cli_value(field, raw)
        except ValueError as e:
            console.print(f"[red]{e}[/red]")


def _fill_current_step(wizard: OnboardingWizard) -> None:
    """Prompt for each visible field; conditional fields appear as they unlock."""
    asked: set[str] = set()
    while True:
        pending = [f for f in wizard.current_fields() if f.id not in asked]
        if not pending:
            return
        field = pending[0]
        asked.add(field.id)
        current = wizard.state.current_data().get(field.id)
        wizard.update_field(field.id, _ask_field(field, current))


def _show_review(wizard: OnboardingWizard) -> None:
    for section in wizard.review_summary():
        table = Table(title=section["title"], show_header=False, title_justify="left")
        table.add_column("Field", style="bold")
        table.add_column("Value")
        for row in section["rows"]:
            table.add_row(row["label"], row["value"])
        console.print(table)


def _show_complete(wizard: OnboardingWizard) -> None:
    if wizard.state.recommendations:
        console.print("\n[bold]Recommendations[/bold]")
        for item in wizard.state.recommendations:
            console.print(f"  • {item}")
    if wizard.state.campaign:
        console.print("\n[bold]Suggested campaign[/bold]")
        for key, value in wizard.state.campaign.items():
            console.print(f"  {key}: {value}")
    console.print(f"\n[dim]Continue at {dashboard_route(wizard.user_type)}[/dim]")


async def _run_wizard(wizard: OnboardingWizard) -> dict | None:
    await wizard.start()

    while wizard.step != WizardStep.COMPLETE:
        info = wizard.info()
        console.print(
            Panel.fit(
                f"[bold]{info.title}[/bold]\n{info.description}",
                subtitle=f"{wizard.progress()}%",
                border_style="green",
            )
        )

        if wizard.step == WizardStep.WELCOME:
            Prompt.ask("Press Enter to get started", default="", show_default=False, console=console)
            wizard.begin()
            continue

        if wizard.step == WizardStep.USER_TYPE_SELECTION:
            choice = Prompt.ask(
                "Account type",
                choices=[t.value for t in UserType],
                console=console,
            )
            wizard.select_user_type(choice)
            continue

        if wizard.step == WizardStep.REVIEW_SUBMIT:
            _show_review(wizard)
            _fill_current_step(wizard)
            action = Prompt.ask(
                "Action",
                choices=["submit", "back", "quit"],
                default="submit",
                console=console,
            )
            if action == "quit":
                return None
            if action == "back":
                wizard.back()
                continue
            if not wizard.session_id and not await wizard.ensure_session():
                if not Confirm.ask("Try again?", default=True, console=console):
                    return None
                continue
            result = await wizard.submit()
            if result is not None:
                _show_complete(wizard)
                return result
            continue

        _fill_current_step(wizard)
        action = Prompt.ask(
            "Action",
            choices=["next", "back", "quit"],
            default="next",
            console=console,
        )
        if action == "quit":
            return None
        if action == "back":
            wizard.back()
        else:
            for field_id, message in wizard.next().items():
                console.print(f"  [red]{field_id}: {message}[/red]")

    return None


# =============================================================================
# Commands
# =============================================================================


@app.command()
def onboard(
    user_type: Optional[UserType] = typer.Option(None, "--user-type", "-t", help="Skip account type selection"),
    session_id: Optional[str] = typer.Option(None, "--session-id", "-s", help="Reuse an existing session"),
) -> None:
    """Run the onboarding wizard interactively."""
    from contested.config import settings
    from onboarding.client import OnboardingClient

    setup_logging(settings.log_level)

    async def run() -> dict | None:
        async with OnboardingClient.from_settings() as client:
            wizard = OnboardingWizard(
                client,
                session_id=session_id,
                user_type=user_type,
                notify=_print_toast,
            )
            return await _run_wizard(wizard)

    try:
        result = asyncio.run(run())
    except KeyboardInterrupt:
        console.print("\n\n[dim]Onboarding interrupted. Nothing was submitted.[/dim]")
        raise typer.Exit(1)

    if result is None:
        console.print("\n[dim]Onboarding not completed.[/dim]")
        raise typer.Exit(1)


@app.command()
def serve(
    port: int = typer.Option(8000, "--port", "-p", help="Port to run on"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload for development"),
) -> None:
    """Start the web server."""
    import os

    import uvicorn

    from contested.config import settings

    setup_logging(settings.log_level)

    # Hosting platforms set PORT
    actual_port = int(os.environ.get("PORT", port))

    console.print("\n[bold green]Contested[/bold green]")
    console.print(f"Starting server on http://localhost:{actual_port}")
    console.print("[dim]Press Ctrl+C to stop[/dim]\n")

    uvicorn.run(
        "contested.web.app:app",
        host="0.0.0.0",
        port=actual_port,
        reload=reload,
    )


@app.command()
def health() -> None:
    """Check configuration."""
    from contested.config import get_settings

    console.print("\n[bold]Contested Health Check[/bold]\n")

    try:
        settings = get_settings()
        console.print("[green]OK[/green] Configuration loaded")
        console.print(f"   Environment: {settings.contested_env}")
        console.print(f"   Log level: {settings.log_level}")

        if settings.contested_api_base_url.startswith(("http://", "https://")):
            console.print(f"[green]OK[/green] API base URL: {settings.contested_api_base_url}")
        else:
            console.print("[red]FAIL[/red] API base URL must start with http:// or https://")
            raise typer.Exit(1)

        if settings.contested_request_timeout is None:
            console.print("[dim]INFO[/dim] No request timeout configured")
        else:
            console.print(f"[green]OK[/green] Request timeout: {settings.contested_request_timeout}s")

        if settings.supabase_configured:
            console.print("[green]OK[/green] Supabase configured")
        else:
            console.print("[dim]INFO[/dim] Supabase not configured; sessions kept in memory")

        console.print("\n[green]All checks passed![/green]")

    except ValueError as e:
        # pydantic.ValidationError subclasses ValueError
        console.print(f"\n[red]Configuration error: {e}[/red]")
        console.print("[dim]Check your .env file and CONTESTED_* environment variables.[/dim]")
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show version information."""
    from contested import __version__

    console.print(f"Contested version {__version__}")


if __name__ == "__main__":
    app()
