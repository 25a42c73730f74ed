from __future__ import annotations

from typing import Any, List, Optional

import pytest

from quill.client import ProviderError
from quill.context import Context, RecentFiles
from quill.models import ProviderResponse


class ScriptedContext(Context):
    """Context that answers prompts from a queue and records everything it is asked or told."""

    def __init__(self, answers: Optional[List[Any]] = None) -> None:
        super().__init__({"logging": {"console": False}})
        self.answers: List[Any] = list(answers or [])
        self.messages: List[str] = []
        self.errors: List[str] = []
        self.prompts: List[tuple] = []

    def send_to_user(self, message: str) -> None:
        self.messages.append(message)

    def error_message(self, message: str) -> None:
        self.errors.append(message)

    def _next(self, kind: str, message: str, default: Any) -> Any:
        self.prompts.append((kind, message, default))
        if not self.answers:
            return default
        ans = self.answers.pop(0)
        return default if ans is None else ans

    def ask(self, message: str, default: Optional[str] = None) -> str:
        return self._next("ask", message, default) or ""

    def confirm(self, message: str, default: bool = False) -> bool:
        return bool(self._next("confirm", message, default))

    def choose(self, message, choices):
        self.prompts.append(("choose", message, list(choices)))
        ans = self.answers.pop(0) if self.answers else None
        if ans is None:
            return choices[0] if choices else None
        return ans

    def ask_secret(self, message: str) -> str:
        return self._next("secret", message, "") or ""


class FakeProvider:
    """Provider stub: returns canned text or raises, and records each request."""

    def __init__(self, text: str = "", error: Optional[Exception] = None) -> None:
        self.text = text
        self.error = error
        self.calls: List[dict] = []
        self.models: List[Any] = []

    def complete(self, settings, text, history=None):
        self.calls.append({"settings": settings, "text": text, "history": history})
        if self.error is not None:
            raise self.error
        return ProviderResponse(text=self.text)

    def list_models(self):
        if self.error is not None:
            raise self.error
        return list(self.models)


@pytest.fixture
def ctx():
    return ScriptedContext()


@pytest.fixture
def recent():
    return RecentFiles()


@pytest.fixture
def make_ctx():
    return ScriptedContext


@pytest.fixture
def make_provider():
    return FakeProvider


@pytest.fixture
def provider_error():
    return ProviderError("API Error 500: boom", status_code=500)
