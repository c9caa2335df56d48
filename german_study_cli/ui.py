"""Interactive input components for the chat session."""

from pathlib import Path
from typing import Callable, Optional

import questionary
from prompt_toolkit import PromptSession
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.history import FileHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.styles import Style

from .providers.base import Provider
from .providers.factory import ProviderFactory

QUESTIONARY_STYLE = questionary.Style(
    [
        ("selected", "fg:cyan bold"),
        ("pointer", "fg:cyan bold"),
        ("highlighted", "fg:cyan"),
    ]
)


class ChatPrompt:
    """Multiline prompt with a status bar showing provider and attached image."""

    def __init__(
        self,
        get_provider: Callable[[], Provider],
        get_image: Callable[[], Optional[Path]],
        history_file: Optional[Path] = None,
    ):
        """
        Initialize chat prompt.

        Args:
            get_provider: Returns the provider currently selected
            get_image: Returns the image currently attached, if any
            history_file: Optional file for input history across sessions
        """
        self.get_provider = get_provider
        self.get_image = get_image

        self.style = Style.from_dict(
            {
                "prompt": "bold green",
                "statusbar": "fg:#888888 nobold noitalic nounderline noreverse",
                "statusbar.provider": "fg:#5dade2 nobold noitalic nounderline noreverse",
                "statusbar.image": "fg:#f39c12 nobold noitalic nounderline noreverse",
            }
        )

        self.session = PromptSession(
            multiline=True,  # Enter submits, Alt+Enter for newlines
            key_bindings=self._create_key_bindings(),
            style=self.style,
            bottom_toolbar=self._get_bottom_toolbar,
            history=FileHistory(str(history_file)) if history_file else None,
            enable_history_search=True,
            mouse_support=False,
        )

    def _create_key_bindings(self) -> KeyBindings:
        """Create custom key bindings."""
        kb = KeyBindings()

        @kb.add("enter")
        def _(event):
            """Submit; empty input is allowed when an image is attached."""
            buffer = event.app.current_buffer
            if buffer.text.strip() or self.get_image():
                buffer.validate_and_handle()

        @kb.add("escape", "enter")
        def _(event):
            """Alt+Enter adds a new line."""
            event.app.current_buffer.insert_text("\n")

        return kb

    def _get_bottom_toolbar(self):
        """Show selected provider and attached image."""
        provider = self.get_provider()
        parts = [
            ("class:statusbar", " Provider: "),
            ("class:statusbar.provider", provider.value),
        ]

        image = self.get_image()
        if image:
            parts.append(("class:statusbar", "  │  Image: "))
            parts.append(("class:statusbar.image", image.name))

        parts.append(("class:statusbar", "  │  /help for commands"))
        return parts

    def get_input(self, prompt_text: str = "Du") -> str:
        """
        Read one message.

        Returns:
            The stripped input, or "exit" on Ctrl+D
        """
        try:
            user_input = self.session.prompt(HTML(f"<prompt>{prompt_text}> </prompt>"))
            return user_input.strip()
        except EOFError:
            return "exit"


def select_provider(current: Optional[Provider] = None) -> Optional[Provider]:
    """
    Let the user pick a provider from a list.

    Returns:
        The chosen provider, or None if cancelled
    """
    choices = [
        questionary.Choice(title=f"{m.display_name} ({m.model})", value=m.name)
        for m in ProviderFactory.list_available_providers()
    ]
    choice = questionary.select(
        "Which provider should answer?",
        choices=choices,
        default=current.value if current else None,
        style=QUESTIONARY_STYLE,
    ).ask()

    return Provider(choice) if choice else None


def confirm(message: str) -> bool:
    """Yes/no question defaulting to no; Ctrl+C counts as no."""
    answer = questionary.confirm(message, default=False, style=QUESTIONARY_STYLE).ask()
    return bool(answer)
