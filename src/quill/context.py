# quill: Console Context (output, logging and the interactive prompt surface) plus the per-process Session that owns settings, chat history and the recent-files list.

import getpass
import sys
from typing import Any, Dict, Iterator, List, Optional, Sequence

from .models import ChatMessage, SessionSettings


class Context:
    """
    Thin wrapper around console I/O and logging used by Quill.

    Core flows only talk to the user through this object (messages, yes/no
    confirmation, free text, single choice), so tests can substitute a
    scripted subclass.
    """

    def __init__(self, settings: Optional[Dict[str, Any]] = None) -> None:
        """Initialize a console context; settings is the loaded YAML mapping (may be empty)."""
        self.settings: Dict[str, Any] = settings or {}
        log_cfg = self.settings.get("logging") or {}
        self.console_log = bool(log_cfg.get("console", True)) if isinstance(log_cfg, dict) else True

    def send_to_user(self, message: str) -> None:
        """Send a user-facing message to stdout."""
        print(message)

    def log(self, message: str) -> None:
        """Emit a lightweight log line to stdout, prefixed for readability."""
        if self.console_log:
            print(f"[LOG] {message}")

    def error_message(self, message: str) -> None:
        """Print an error message to stderr."""
        print(f"Error: {message}", file=sys.stderr)

    # ---------- Prompt surface ----------

    def _input(self, prompt: str) -> Optional[str]:
        try:
            return input(prompt)
        except EOFError:
            return None

    def ask(self, message: str, default: Optional[str] = None) -> str:
        """Ask for free text; an empty answer (or EOF) returns default."""
        suffix = f" ({default})" if default else ""
        ans = self._input(f"{message}{suffix} ")
        if ans is None or not ans.strip():
            return default or ""
        return ans.strip()

    def confirm(self, message: str, default: bool = False) -> bool:
        """
        Ask a yes/no question.

        Only "y"/"yes" count as yes. A blank answer takes default; EOF and any
        other answer are a no, whatever the default.
        """
        hint = "[Y/n]" if default else "[y/N]"
        ans = self._input(f"{message} {hint} ")
        if ans is None:
            return False
        ans = ans.strip().lower()
        if not ans:
            return default
        return ans in ("y", "yes")

    def choose(self, message: str, choices: Sequence[str]) -> Optional[str]:
        """Ask the user to pick one of choices by number. Returns None on EOF or empty choices."""
        if not choices:
            return None
        self.send_to_user(message)
        for i, c in enumerate(choices, start=1):
            self.send_to_user(f"  {i}) {c}")
        while True:
            ans = self._input(f"Select 1-{len(choices)} [1]: ")
            if ans is None:
                return None
            ans = ans.strip()
            if not ans:
                return choices[0]
            if ans.isdigit() and 1 <= int(ans) <= len(choices):
                return choices[int(ans) - 1]
            self.error_message(f"Please enter a number between 1 and {len(choices)}.")

    def ask_secret(self, message: str) -> str:
        """Read a secret (e.g., API key) without echo."""
        try:
            return getpass.getpass(f"{message} ").strip()
        except EOFError:
            return ""


class RecentFiles:
    """Ordered, duplicate-free record of absolute paths written this session."""

    def __init__(self) -> None:
        self._paths: List[str] = []

    def add(self, path: str) -> bool:
        """Append path unless already present (exact string match). Returns True when added."""
        if path in self._paths:
            return False
        self._paths.append(path)
        return True

    @property
    def paths(self) -> List[str]:
        return list(self._paths)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._paths))

    def __len__(self) -> int:
        return len(self._paths)

    def __contains__(self, path: object) -> bool:
        return path in self._paths


class Session:
    """
    Mutable state for one interactive session.

    Owned by the shell; core calls borrow the pieces they need (settings for
    provider calls, recent_files for resolution and materialization).
    """

    def __init__(self, settings: Optional[SessionSettings] = None) -> None:
        self.settings = settings or SessionSettings()
        self.recent_files = RecentFiles()
        self.history: List[ChatMessage] = []

    def add_turn(self, role: str, text: str) -> None:
        self.history.append(ChatMessage(role=role, text=text))

    def clear_history(self) -> None:
        self.history = []
