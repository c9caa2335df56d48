"""Display manager for replies, history and error banners."""

from datetime import datetime
from typing import Dict, List

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from .config import HistoryItem
from .errors import (
    EmptyRequestError,
    GermanStudyError,
    ImageProcessingError,
    MissingCredentialError,
    NetworkUnreachableError,
    ProviderHttpError,
)
from .service import AIResponse

console = Console()

APOLOGY = "Sorry, there was an error processing your request. Please try again."

# Border colours per theme setting
THEME_STYLES = {
    "light": "blue",
    "dark": "cyan",
    "system": "cyan",
}


class DisplayManager:
    """
    Renders what the user sees.

    Replies are shown as Markdown (German expressions come back in italics)
    unless render_markdown is off.
    """

    def __init__(self, config: Dict):
        """
        Initialize display manager.

        Args:
            config: Configuration dict with display settings
        """
        self.render_markdown = config.get("render_markdown", True)
        self.border_style = THEME_STYLES.get(config.get("theme", "system"), "cyan")

    def show_response(self, response: AIResponse):
        """Display an AI reply."""
        body = Markdown(response.text) if self.render_markdown else response.text
        console.print(
            Panel(
                body,
                title=f"[bold]{response.provider.value}[/bold]",
                border_style=self.border_style,
            )
        )
        if response.scaled_image_path:
            console.print(f"[dim]Resized image saved to {response.scaled_image_path}[/dim]")

    def show_error(self, error: Exception, provider: str):
        """
        Display a banner for a failed request.

        Args:
            error: The raised error
            provider: Provider the request was sent to
        """
        if isinstance(error, ProviderHttpError):
            title, message = f"{provider} API Error", error.message
        elif isinstance(error, NetworkUnreachableError):
            title = "Network Error"
            message = "No response from server. Please check your internet connection."
        elif isinstance(error, MissingCredentialError):
            title = "API Key Missing"
            message = f"Please set up your {provider} API key."
        elif isinstance(error, ImageProcessingError):
            title, message = "Image Error", str(error)
        elif isinstance(error, EmptyRequestError):
            title, message = "Nothing to send", "Type a question or attach an image."
        elif isinstance(error, GermanStudyError):
            title, message = "Error", str(error)
        else:
            title, message = "Error", f"{type(error).__name__}: {error}"

        console.print(Panel(message, title=f"[bold]{title}[/bold]", border_style="red"))

        if not isinstance(error, (MissingCredentialError, EmptyRequestError)):
            console.print(f"[red]{APOLOGY}[/red]")

    def show_history(self, items: List[HistoryItem]):
        """Display stored exchanges as a table, newest first."""
        if not items:
            console.print("[yellow]No history yet[/yellow]")
            return

        table = Table(title="History")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("When", style="yellow")
        table.add_column("Provider", style="green")
        table.add_column("Prompt")
        table.add_column("Response", style="dim")
        table.add_column("Image", style="dim")

        for item in items:
            when = datetime.fromtimestamp(item.timestamp / 1000).strftime("%Y-%m-%d %H:%M")
            table.add_row(
                item.id[:8],
                when,
                item.provider,
                _truncate(item.prompt or "(image)", 40),
                _truncate(item.response, 60),
                "yes" if item.image_path else "",
            )

        console.print(table)

    def show_settings(self, settings: Dict):
        """Display current settings."""
        table = Table(title="Current Configuration")
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="green")

        for key, value in settings.items():
            table.add_row(key, str(value))

        console.print(table)


def _truncate(text: str, width: int) -> str:
    text = " ".join(text.split())
    if len(text) <= width:
        return text
    return text[: width - 1] + "…"
