# quill: Centralize environment-driven configuration constants. CLI flags and .quill/settings.yaml override these at start-up.

import os

# Cohere env
COHERE_API_KEY = os.environ.get("COHERE_API_KEY", "")
COHERE_BASE_URL = os.environ.get("COHERE_BASE_URL", "https://api.cohere.ai/v1")

# Default model and sampling knobs. An empty model means "discover one at start-up".
DEFAULT_MODEL = os.environ.get("QUILL_MODEL", "")
DEFAULT_TEMPERATURE = float(os.environ.get("QUILL_TEMPERATURE", "0.7"))
DEFAULT_MAX_TOKENS = int(os.environ.get("QUILL_MAX_TOKENS", "1024"))

# HTTP behavior
REQUEST_TIMEOUT_SEC = int(os.environ.get("QUILL_TIMEOUT_SEC", "120"))
MAX_RETRIES = int(os.environ.get("QUILL_MAX_RETRIES", "3") or "0")

# Words that route a line of input to the edit flow instead of a chat turn
EDIT_VERBS = ("edit", "update", "modify", "change", "append", "replace")

VERSION = "1.0.0"
