# quill: Interactive shell around the core flows. Routes each line to a settings command, the edit flow or a plain chat turn, and recovers from every failure at the turn boundary.

import re
from typing import List, Optional

from pydantic import ValidationError

from .client import CohereClient, ProviderError
from .config import EDIT_VERBS
from .context import Context, Session
from .editor import perform_edit
from .materializer import offer_files_from_response
from .models import EditFailure, EditResult, ModelInfo, ProviderResponse, TargetKind
from .resolver import choose_edit_target, resolve_edit_target

_EDIT_INTENT = re.compile(r"\b(" + "|".join(EDIT_VERBS) + r")\b", re.IGNORECASE)


def is_edit_request(text: str) -> bool:
    """True when the line asks to change a file rather than chat."""
    return bool(_EDIT_INTENT.search(text or ""))


def format_response(response: ProviderResponse) -> str:
    """Plain-text rendering of a reply: body, token usage and numbered citations."""
    parts: List[str] = [response.text.strip()]
    tc = response.meta.token_count if response.meta else None
    if tc is not None:
        parts.append(
            f"Tokens: {tc.prompt_tokens} prompt + {tc.completion_tokens} completion = {tc.total} total"
        )
    if response.citations:
        parts.append("Citations:")
        for i, c in enumerate(response.citations, start=1):
            parts.append(f"  [{i}] {c.title or 'Unknown source'} {c.url or 'No URL'}")
    return "\n".join(parts)


class Quill:
    """
    Session-level orchestrator for the chat REPL.

    Responsibilities include:
      - Settings commands (model, temperature, tokens, history)
      - Routing edit requests through resolver -> editor -> materializer
      - Plain chat turns with optional history and file creation afterwards
    """

    def __init__(self, client: CohereClient, session: Optional[Session] = None, ctx: Optional[Context] = None) -> None:
        self.client = client
        self.session = session or Session()
        self.ctx = ctx or Context()

    # ---------- Start-up ----------

    def ensure_default_model(self, ctx: Context) -> None:
        """Pick the first chat model (else first generate model) when none is configured."""
        if self.session.settings.model:
            return
        try:
            models = self.client.list_models()
        except ProviderError as e:
            ctx.error_message(f"Failed to fetch models: {e}")
            return
        chat = next((m for m in models if m.supports("chat")), None)
        gen = next((m for m in models if m.supports("generate")), None)
        if chat is not None:
            self.session.settings.model = chat.name
            self.session.settings.model_type = "chat"
        elif gen is not None:
            self.session.settings.model = gen.name
            self.session.settings.model_type = "generate"
        else:
            ctx.send_to_user('No default model found. Use "model:<name>" to select a model.')
            return
        ctx.send_to_user(f"Using default model: {self.session.settings.model} ({self.session.settings.model_type})")

    # ---------- Commands ----------

    def cmd_help(self, ctx: Context) -> None:
        """Print a list of supported commands and brief descriptions."""
        ctx.send_to_user("Commands:")
        ctx.send_to_user("help              - Show this help")
        ctx.send_to_user("clear             - Clear chat history")
        ctx.send_to_user("model             - List available models")
        ctx.send_to_user("model:<name>      - Switch to a specific model")
        ctx.send_to_user("temp:<value>      - Set temperature (0-1)")
        ctx.send_to_user("tokens:<value>    - Set max token limit")
        ctx.send_to_user("history:on        - Enable chat history")
        ctx.send_to_user("history:off       - Disable chat history")
        ctx.send_to_user("settings          - Show current settings")
        ctx.send_to_user("files             - Show files written this session")
        ctx.send_to_user("exit              - Exit")
        ctx.send_to_user("Lines mentioning edit/update/modify/change/append/replace start an AI edit of a file.")

    def cmd_settings(self, ctx: Context) -> None:
        """Print one line per session setting."""
        s = self.session.settings
        ctx.send_to_user(f"Model: {s.model or 'Not selected'}")
        ctx.send_to_user(f"Type: {s.model_type}")
        ctx.send_to_user(f"Temperature: {s.temperature}")
        ctx.send_to_user(f"Max Tokens: {s.max_tokens}")
        ctx.send_to_user(f"Chat History: {'Enabled' if s.include_history else 'Disabled'}")

    def cmd_models(self, ctx: Context) -> None:
        """List models that support chat or generate."""
        try:
            models: List[ModelInfo] = self.client.list_models()
        except ProviderError as e:
            ctx.error_message(f"Failed to fetch models: {e}")
            return
        if not models:
            ctx.send_to_user("No chat or generate models available.")
            return
        for m in models:
            kind = "chat" if m.supports("chat") else "gen"
            desc = f" - {m.description}" if m.description else ""
            marker = "*" if m.name == self.session.settings.model else " "
            ctx.send_to_user(f"{marker} {m.name} [{kind}]{desc}")
        ctx.send_to_user('Use "model:<name>" to switch.')

    def cmd_set_model(self, ctx: Context, name: str) -> None:
        if not name:
            ctx.error_message("Usage: model:<name>")
            return
        self.session.settings.model = name
        ctx.send_to_user(f"Model switched to: {name}")

    def cmd_temperature(self, ctx: Context, raw: str) -> None:
        try:
            self.session.settings.temperature = float(raw)
        except (ValueError, ValidationError):
            ctx.error_message("Temperature must be a number between 0 and 1")
            return
        ctx.send_to_user(f"Temperature set to: {self.session.settings.temperature}")

    def cmd_tokens(self, ctx: Context, raw: str) -> None:
        try:
            self.session.settings.max_tokens = int(raw)
        except (ValueError, ValidationError):
            ctx.error_message("Max tokens must be a positive number")
            return
        ctx.send_to_user(f"Max tokens set to: {self.session.settings.max_tokens}")

    def cmd_files(self, ctx: Context) -> None:
        if not len(self.session.recent_files):
            ctx.send_to_user("No files written this session.")
            return
        for p in self.session.recent_files:
            ctx.send_to_user(p)

    def process_command(self, ctx: Context, text: str) -> bool:
        """Run text as a command if it is one. Returns True when handled."""
        raw = text.strip()
        low = raw.lower()
        if low == "help":
            self.cmd_help(ctx)
        elif low == "clear":
            self.session.clear_history()
            ctx.send_to_user("Chat history cleared")
        elif low == "model":
            self.cmd_models(ctx)
        elif low == "settings":
            self.cmd_settings(ctx)
        elif low == "files":
            self.cmd_files(ctx)
        elif low.startswith("model:"):
            self.cmd_set_model(ctx, raw[len("model:"):].strip())
        elif low.startswith("temp:"):
            self.cmd_temperature(ctx, raw[len("temp:"):].strip())
        elif low.startswith("tokens:"):
            self.cmd_tokens(ctx, raw[len("tokens:"):].strip())
        elif low == "history:on":
            self.session.settings.include_history = True
            ctx.send_to_user("Chat history enabled")
        elif low == "history:off":
            self.session.settings.include_history = False
            ctx.send_to_user("Chat history disabled")
        else:
            return False
        return True

    # ---------- Turns ----------

    def handle_edit(self, ctx: Context, text: str) -> EditResult:
        """Resolve the target for an edit request, then run the edit flow."""
        resolution = resolve_edit_target(text, self.session.recent_files)
        path = choose_edit_target(ctx, resolution)
        if not path:
            if resolution.kind == TargetKind.ambiguous:
                ctx.error_message("No file selected. Edit canceled.")
            else:
                ctx.error_message("No recent files to edit. Please specify a filename.")
            return EditResult(written=False, path="", reason=EditFailure.target_ambiguous)
        return perform_edit(ctx, path, text, self.client, self.session.settings)

    def handle_chat(self, ctx: Context, text: str) -> Optional[ProviderResponse]:
        """Send one chat turn, print the reply and offer to create files from its code blocks."""
        if not self.session.settings.model:
            ctx.error_message('No model selected. Use "model:<name>" to select one.')
            return None
        history = list(self.session.history) if self.session.settings.include_history else None
        self.session.add_turn("user", text)
        try:
            response = self.client.complete(self.session.settings, text, history=history)
        except ProviderError as e:
            # quill: Drop the unanswered user turn so history keeps alternating.
            self.session.history.pop()
            ctx.error_message(f"Error getting response: {e}")
            return None
        ctx.send_to_user(format_response(response))
        offer_files_from_response(ctx, response.text, self.session.recent_files)
        self.session.add_turn("chatbot", response.text)
        return response

    def handle_user_input(self, ctx: Context, text: str) -> bool:
        """
        Handle a line of user input. Returns False when the session should end.
        """
        text = text.strip()
        if not text:
            return True
        if text.lower() == "exit":
            ctx.send_to_user("Goodbye!")
            return False
        if self.process_command(ctx, text):
            return True
        if is_edit_request(text):
            self.handle_edit(ctx, text)
            return True
        self.handle_chat(ctx, text)
        return True

    def run(self) -> None:
        """Start the interactive REPL loop."""
        ctx = self.ctx
        ctx.send_to_user('Welcome to Quill! Type "help" for available commands or "exit" to quit.')
        self.ensure_default_model(ctx)
        while True:
            try:
                text = input("You: ")
            except EOFError:
                print("\nGoodbye!")
                break
            if not self.handle_user_input(ctx, text):
                break

    def run_single(self) -> None:
        """Ask for one message, print the reply, offer file creation and return."""
        ctx = self.ctx
        self.ensure_default_model(ctx)
        text = ctx.ask("You:")
        if not text:
            ctx.error_message("No message entered.")
            return
        self.handle_chat(ctx, text)
