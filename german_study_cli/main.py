#!/usr/bin/env python3
"""Main CLI entry point for German Study."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from .config import HistoryItem, StudyConfig
from .display import DisplayManager
from .errors import GermanStudyError, MissingCredentialError
from .prompts import SUPPORTED_LANGUAGES
from .providers.base import Provider
from .service import AIResponse, resolve_provider, send_to_provider
from .setup_wizard import SetupWizard, mask_secret

console = Console()

HELP_TEXT = """
[bold cyan]Available Commands:[/bold cyan]

[green]/image PATH[/green]        - Attach an image to the next message
[green]/remove-image[/green]      - Detach the current image
[green]/provider [NAME][/green]   - Switch provider (openai, anthropic, perplexity)
[green]/history [N][/green]       - Show the last N exchanges (default: 20)
[green]/delete-history ID[/green] - Delete one exchange (ID from /history)
[green]/clear-history[/green]     - Delete all stored exchanges
[green]/config [all][/green]      - Show settings (all: every stored value)
[green]/config KEY VALUE[/green]  - Set a configuration value
[green]/keys[/green]              - Enter an API key
[green]/help[/green]              - Show this help message

Type [green]exit[/green] or [green]quit[/green] to leave.
"""


class StudyCLI:
    """Chat session and one-shot commands."""

    def __init__(
        self,
        config: StudyConfig,
        provider: Optional[str] = None,
        language: Optional[str] = None,
    ):
        """
        Initialize the CLI.

        Args:
            config: StudyConfig instance
            provider: Provider name (overrides config)
            language: Interface language (overrides config)
        """
        self.config = config
        self.provider = resolve_provider(provider) if provider else config.default_provider
        self.language = language or config.language
        self.display_manager = DisplayManager(config.get_all())
        self.image_path: Optional[Path] = None

    def ask(self, prompt_text: str, image_path: Optional[Path] = None) -> Optional[AIResponse]:
        """
        Send one request and show the reply.

        A history record is written only when the request succeeds.

        Args:
            prompt_text: The question (may be empty with an image)
            image_path: Optional image to attach

        Returns:
            The response, or None if the request failed
        """
        provider = self.provider
        credential = self.config.get_api_key(provider)

        try:
            with console.status(f"[cyan]Asking {provider.value}...[/cyan]"):
                response = send_to_provider(
                    provider,
                    credential,
                    prompt_text,
                    image_path,
                    language=self.language,
                    image_dir=self.config.images_dir,
                )
        except MissingCredentialError as e:
            self.display_manager.show_error(e, provider.value)
            self.configure_key(provider)
            console.print("[dim]Send your message again to use the new key.[/dim]")
            return None
        except GermanStudyError as e:
            self.display_manager.show_error(e, provider.value)
            return None

        self.display_manager.show_response(response)
        self._record(prompt_text, response, image_path)
        return response

    def _record(self, prompt_text: str, response: AIResponse, image_path: Optional[Path]):
        """Store the exchange, preferring the resized image copy."""
        if not self.config.get("save_history", True):
            return

        stored_image = response.scaled_image_path or image_path
        self.config.save_history_item(
            HistoryItem(
                prompt=prompt_text,
                response=response.text,
                provider=response.provider.value,
                image_path=str(stored_image) if stored_image else None,
            )
        )

    def configure_key(self, provider: Optional[Provider] = None):
        """Prompt for an API key and store it."""
        if provider is None:
            from .ui import select_provider

            provider = select_provider(self.provider)
            if provider is None:
                return

        key = SetupWizard.prompt_api_key(provider.value)
        self.config.save_api_key(provider, key)
        console.print(
            f"[green]{provider.value} API key saved ({mask_secret(key)})[/green]"
        )

    def delete_history(self, id_prefix: str) -> bool:
        """
        Delete one exchange by its ID or an unambiguous ID prefix.

        Returns:
            True if an exchange was deleted
        """
        matches = [i.id for i in self.config.get_history() if i.id.startswith(id_prefix)]
        if len(matches) != 1:
            reason = "No exchange matches" if not matches else "Ambiguous ID"
            console.print(f"[red]{reason}: {id_prefix}[/red]")
            return False

        self.config.delete_history_item(matches[0])
        console.print(f"[green]Deleted {matches[0][:8]}[/green]")
        return True

    def run(self):
        """Run the interactive chat session."""
        from .ui import ChatPrompt

        console.print(
            Panel.fit(
                "[bold cyan]German Study[/bold cyan]\n"
                "Ask about German words, grammar or homework.\n"
                "Attach a photo of an exercise with /image PATH.\n"
                "Type '/help' to see available commands.",
                border_style="cyan",
            )
        )

        prompt = ChatPrompt(
            get_provider=lambda: self.provider,
            get_image=lambda: self.image_path,
            history_file=self.config.data_dir / "input_history",
        )

        while True:
            try:
                user_input = prompt.get_input()

                if user_input.lower() in ["exit", "quit", "q"]:
                    console.print("[cyan]Tschüss![/cyan]")
                    break

                if user_input.startswith("/"):
                    self._handle_command(user_input)
                    continue

                if not user_input and not self.image_path:
                    continue

                response = self.ask(user_input, self.image_path)
                if response is not None:
                    self.image_path = None

            except KeyboardInterrupt:
                console.print("\n[cyan]Tschüss![/cyan]")
                break

    def _handle_command(self, command: str):
        """Handle special chat commands."""
        parts = command.strip().split(maxsplit=1)
        cmd = parts[0].lower()
        arg = parts[1].strip() if len(parts) > 1 else ""

        if cmd == "/image":
            if not arg:
                console.print("[yellow]Usage: /image PATH[/yellow]")
                return
            path = Path(arg.strip("'\"")).expanduser()
            if not path.is_file():
                console.print(f"[red]No such file: {path}[/red]")
                return
            self.image_path = path
            console.print(f"[green]Attached {path.name}[/green]")

        elif cmd == "/remove-image":
            self.image_path = None
            console.print("[green]Image removed[/green]")

        elif cmd == "/provider":
            if arg:
                try:
                    self.provider = resolve_provider(arg)
                except ValueError as e:
                    console.print(f"[red]{e}[/red]")
                    return
            else:
                from .ui import select_provider

                chosen = select_provider(self.provider)
                if chosen is None:
                    return
                self.provider = chosen
            console.print(f"[green]Using {self.provider.value}[/green]")

        elif cmd == "/history":
            if not arg:
                limit = 20
            elif arg.isdigit() and int(arg) >= 1:
                limit = int(arg)
            else:
                console.print("[yellow]Usage: /history [N] (N >= 1)[/yellow]")
                return
            self.display_manager.show_history(self.config.get_history(limit=limit))

        elif cmd == "/delete-history":
            if not arg:
                console.print("[yellow]Usage: /delete-history ID[/yellow]")
                return
            self.delete_history(arg)

        elif cmd == "/clear-history":
            from .ui import confirm

            if confirm(
                "Are you sure you want to clear all chat history? "
                "This action cannot be undone."
            ):
                self.config.clear_history()
                console.print("[green]History cleared successfully[/green]")

        elif cmd == "/config":
            if not arg:
                self.display_manager.show_settings(self.config.get_settings())
                return
            if arg == "all":
                self.display_manager.show_settings(self.config.get_all())
                return

            key_value = arg.split(maxsplit=1)
            if len(key_value) != 2:
                console.print("[yellow]Usage: /config [all | KEY VALUE][/yellow]")
                return

            set_config_value(self.config, key_value[0], key_value[1])
            self.display_manager = DisplayManager(self.config.get_all())
            if key_value[0] == "language":
                self.language = self.config.language

        elif cmd == "/keys":
            self.configure_key()

        elif cmd == "/help":
            console.print(HELP_TEXT)

        else:
            console.print(f"[yellow]Unknown command: {cmd}[/yellow]")
            console.print(
                "[dim]Available commands: /image, /remove-image, /provider, /history, "
                "/delete-history, /clear-history, /config, /keys, /help[/dim]"
            )


def set_config_value(config: StudyConfig, key: str, value: str) -> bool:
    """Parse and store a setting; report invalid values instead of raising."""
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        parsed = value  # Keep as string

    try:
        config.save_settings({key: parsed})
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        return False

    console.print(f"[green]Set {key} = {parsed}[/green]")
    return True


def setup_logging(verbose: bool = False):
    """Route log records through rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def positive_int(value: str) -> int:
    """argparse type for counts that must be at least 1."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1: {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="german-study",
        description="German Study - ask AI providers about German texts and images",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  german-study                                   # Start a chat session
  german-study ask "Was bedeutet 'Haus'?"        # One question
  german-study ask --image homework.jpg          # Explain a photo
  german-study --provider openai ask "Hallo"     # Use a specific provider
  german-study history --limit 10                # Show recent exchanges
  german-study history --delete 1a2b3c4d         # Delete one exchange
  german-study keys anthropic                    # Enter an API key
        """,
    )

    parser.add_argument(
        "--provider",
        choices=[p.value for p in Provider],
        default=None,
        help="Provider to use (default from config)",
    )
    parser.add_argument(
        "--language",
        choices=list(SUPPORTED_LANGUAGES),
        default=None,
        help="Language of the instructions sent with images (default from config)",
    )
    parser.add_argument(
        "--data-dir",
        default=None,
        help="Directory for settings, keys and history (default: ~/.german_study)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command")

    ask_parser = subparsers.add_parser("ask", help="Ask a single question")
    ask_parser.add_argument("prompt", nargs="?", default="", help="Question text")
    ask_parser.add_argument("--image", default=None, help="Image file to attach")

    history_parser = subparsers.add_parser("history", help="Show stored exchanges")
    history_parser.add_argument(
        "--limit", type=positive_int, default=20, help="Number of items"
    )
    history_parser.add_argument(
        "--delete", metavar="ID", default=None, help="Delete one exchange (ID or prefix)"
    )
    history_parser.add_argument("--clear", action="store_true", help="Delete all history")

    keys_parser = subparsers.add_parser("keys", help="Enter an API key")
    keys_parser.add_argument(
        "key_provider", nargs="?", choices=[p.value for p in Provider], default=None
    )

    config_parser = subparsers.add_parser("config", help="Show or change settings")
    config_parser.add_argument("key", nargs="?", default=None)
    config_parser.add_argument("value", nargs="?", default=None)
    config_parser.add_argument("--all", action="store_true", help="Show every stored value")

    return parser


def main(argv=None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    config = StudyConfig(base_dir=args.data_dir)
    cli = StudyCLI(config=config, provider=args.provider, language=args.language)

    if args.command == "ask":
        image = Path(args.image).expanduser() if args.image else None
        if not args.prompt.strip() and image is None:
            parser.error("ask needs a prompt or --image")
        return 0 if cli.ask(args.prompt, image) is not None else 1

    if args.command == "history":
        if args.clear:
            config.clear_history()
            console.print("[green]History cleared successfully[/green]")
        elif args.delete:
            return 0 if cli.delete_history(args.delete) else 1
        else:
            cli.display_manager.show_history(config.get_history(limit=args.limit))
        return 0

    if args.command == "keys":
        cli.configure_key(Provider(args.key_provider) if args.key_provider else None)
        return 0

    if args.command == "config":
        if args.key is None:
            settings = config.get_all() if args.all else config.get_settings()
            cli.display_manager.show_settings(settings)
            return 0
        if args.value is None:
            parser.error("config needs both KEY and VALUE to change a setting")
        return 0 if set_config_value(config, args.key, args.value) else 1

    cli.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
