# quill: CLI entrypoint. Parses flags, merges them over settings.yaml and environment defaults, then starts the REPL or a single-message turn.

import sys
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from .client import CohereClient, ProviderError
from .config import COHERE_API_KEY, DEFAULT_MAX_TOKENS, DEFAULT_MODEL, DEFAULT_TEMPERATURE, VERSION
from .context import Context, Session
from .models import SessionSettings
from .settings import load_settings, section
from .shell import Quill

USAGE = "Usage: quill [-k KEY] [-m MODEL] [-t TEMP] [--max-tokens N] [--no-history] [-s]"

# flag -> (option key, takes a value)
_FLAGS = {
    "-k": ("api_key", True),
    "--api-key": ("api_key", True),
    "-m": ("model", True),
    "--model": ("model", True),
    "-t": ("temperature", True),
    "--temperature": ("temperature", True),
    "--max-tokens": ("max_tokens", True),
    "-s": ("single_message", False),
    "--single-message": ("single_message", False),
    "--no-history": ("no_history", False),
}


def print_help() -> None:
    print(USAGE)
    print("Options:")
    print("  -k, --api-key KEY        Cohere API key (overrides COHERE_API_KEY)")
    print("  -m, --model MODEL        Model to use")
    print("  -t, --temperature TEMP   Sampling temperature (0-1)")
    print("      --max-tokens N       Maximum tokens for a response")
    print("  -s, --single-message     Send a single message and exit")
    print("      --no-history         Don't include chat history in requests")
    print("  -V, --version            Print version and exit")
    print("Environment:")
    print("  COHERE_API_KEY, COHERE_BASE_URL, QUILL_MODEL, QUILL_TEMPERATURE, QUILL_MAX_TOKENS")


def parse_args(args: List[str]) -> Dict[str, Any]:
    """
    Parse argv (without the program name) into an options dict.

    Supports "--flag VALUE" and "--flag=VALUE".

    Raises:
        ValueError: On unknown options, missing values or positional arguments.
    """
    opts: Dict[str, Any] = {}
    i = 0
    while i < len(args):
        a = args[i]
        flag, value = a, None
        if a.startswith("--") and "=" in a:
            flag, value = a.split("=", 1)
        if flag not in _FLAGS:
            raise ValueError(f"unknown option: {a}" if a.startswith("-") else f"unexpected argument: {a}")
        key, takes_value = _FLAGS[flag]
        if not takes_value:
            if value is not None:
                raise ValueError(f"{flag} does not take a value")
            opts[key] = True
            i += 1
            continue
        if value is None:
            if i + 1 >= len(args):
                raise ValueError(f"{flag} requires a value")
            value = args[i + 1]
            i += 1
        opts[key] = value
        i += 1
    return opts


def build_session_settings(opts: Dict[str, Any], settings: Dict[str, Any]) -> SessionSettings:
    """
    Resolve session settings with precedence CLI > settings.yaml > environment defaults.

    Raises:
        ValidationError: When a resolved value is out of range.
        ValueError: When a numeric flag cannot be parsed.
    """
    api_cfg = section(settings, "api")
    sess_cfg = section(settings, "session")
    model = opts.get("model") or api_cfg.get("model") or DEFAULT_MODEL
    temperature = opts.get("temperature", sess_cfg.get("temperature", DEFAULT_TEMPERATURE))
    max_tokens = opts.get("max_tokens", sess_cfg.get("max_tokens", DEFAULT_MAX_TOKENS))
    include_history = bool(sess_cfg.get("history", True)) and not opts.get("no_history")
    return SessionSettings(
        model=model,
        model_type=sess_cfg.get("model_type", "chat"),
        temperature=float(temperature),
        max_tokens=int(max_tokens),
        include_history=include_history,
    )


def main(argv: Optional[List[str]] = None) -> None:
    """
    Quill CLI entrypoint.

    Notes:
        - COHERE_API_KEY is read from the environment unless --api-key is given;
          when neither is set the key is requested interactively.
        - Settings are read from ~/.quill/settings.yaml and ./.quill/settings.yaml.
    """
    args = sys.argv[1:] if argv is None else argv
    if any(a in ("-h", "--help") for a in args):
        print_help()
        return
    if any(a in ("-V", "--version") for a in args):
        print(f"quill {VERSION}")
        return

    try:
        opts = parse_args(args)
    except ValueError as e:
        print(f"error: {e}")
        print(USAGE)
        return

    settings = load_settings()
    ctx = Context(settings)
    try:
        session_settings = build_session_settings(opts, settings)
    except (ValueError, ValidationError) as e:
        ctx.error_message(f"Invalid settings: {e}")
        return

    api_key = opts.get("api_key") or section(settings, "api").get("api_key") or COHERE_API_KEY
    if not api_key:
        ctx.error_message("An API key is required to use Quill (get one at https://dashboard.cohere.com/api-keys).")
        api_key = ctx.ask_secret("Please enter your Cohere API key:")
        if not api_key:
            ctx.error_message("API key cannot be empty")
            return

    try:
        client = CohereClient(api_key=api_key, settings=settings, ctx=ctx)
    except ProviderError as e:
        ctx.error_message(str(e))
        return

    app = Quill(client, Session(session_settings), ctx)
    if opts.get("single_message"):
        app.run_single()
    else:
        app.run()


if __name__ == "__main__":
    main()
