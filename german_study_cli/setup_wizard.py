"""Setup wizard for provider selection and API key entry."""

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from .providers.base import Provider
from .providers.factory import ProviderFactory

console = Console()


class SetupWizard:
    """
    Interactive setup wizard for German Study configuration.

    The key prompts are generated from the metadata of the discovered
    providers.
    """

    @staticmethod
    def run() -> dict:
        """
        Run the setup wizard.

        Returns:
            Dictionary with "default_provider" and "api_key"
        """
        console.print(
            Panel.fit(
                "[bold cyan]Willkommen! Welcome to German Study![/bold cyan]\n\n"
                "Let's set up your AI provider.\n"
                "You can add keys for other providers later with the 'keys' command.",
                border_style="cyan",
            )
        )

        # Step 1: Select default provider
        provider_metadata = SetupWizard._select_provider()

        # Step 2: Enter its API key
        api_key = SetupWizard.prompt_api_key(provider_metadata.name, step=2)

        SetupWizard._show_summary(provider_metadata, api_key)

        console.print("\n[green]✓ Setup complete![/green]\n")

        return {"default_provider": provider_metadata.name, "api_key": api_key}

    @staticmethod
    def _select_provider():
        """
        Prompt user to select a provider from all discovered providers.

        Returns:
            ProviderMetadata object for selected provider
        """
        console.print("\n[bold]Step 1: Select Your AI Provider[/bold]\n")

        providers = ProviderFactory.list_available_providers()

        if not providers:
            raise RuntimeError(
                "No providers found! Please ensure provider files are in german_study_cli/providers/"
            )

        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Option", style="cyan")
        table.add_column("Provider", style="green")
        table.add_column("Model")
        table.add_column("Description")

        choice_map = {}
        default_choice = "1"
        for idx, provider in enumerate(providers, start=1):
            choice_map[str(idx)] = provider
            if provider.name == Provider.ANTHROPIC.value:
                default_choice = str(idx)
            table.add_row(str(idx), provider.display_name, provider.model, provider.description)

        console.print(table)
        console.print()

        choice = Prompt.ask(
            "[bold yellow]Choose your default provider[/bold yellow]",
            choices=list(choice_map.keys()),
            default=default_choice,
        )

        return choice_map[choice]

    @staticmethod
    def prompt_api_key(provider_name: str, step: int = None) -> str:
        """
        Ask for the API key of one provider.

        Args:
            provider_name: Provider to configure
            step: Optional wizard step number for the heading

        Returns:
            The entered key, stripped of surrounding whitespace
        """
        metadata = ProviderFactory.get_provider_metadata(provider_name)
        heading = f"Configure {metadata.display_name}"
        if step is not None:
            heading = f"Step {step}: {heading}"
        console.print(f"\n[bold]{heading}[/bold]\n")

        key_field = next(f for f in metadata.config_fields if f.get("type") == "password")
        if key_field.get("help_text"):
            console.print(f"[dim]{key_field['help_text']}[/dim]\n")

        while True:
            value = Prompt.ask(f"[cyan]{key_field['label']}[/cyan]", password=True).strip()
            if value:
                return value
            console.print("[yellow]The API key cannot be empty.[/yellow]")

    @staticmethod
    def _show_summary(metadata, api_key: str):
        """Show configuration summary with the key masked."""
        console.print("\n[bold]Configuration Summary[/bold]\n")
        console.print(f"[cyan]Default provider:[/cyan] {metadata.display_name}")
        console.print(f"[cyan]Model:[/cyan] {metadata.model}")
        console.print(f"[cyan]API key:[/cyan] {mask_secret(api_key)}")


def mask_secret(value: str) -> str:
    """Show only the last four characters of a secret."""
    if not value:
        return ""
    return f"{'*' * 20}{value[-4:]}"
