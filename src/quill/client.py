# quill: Minimal requests-based client for the Cohere v1 API (models, chat, generate). Every call goes through one POST/GET helper with bounded retries and optional .httpcalls request/response dumps; results are normalized into ProviderResponse.

import json
import os
import pathlib
import random
import time
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError

from .config import COHERE_BASE_URL, MAX_RETRIES, REQUEST_TIMEOUT_SEC
from .context import Context
from .fs import now_ts
from .models import ChatMessage, ModelInfo, ProviderResponse, SessionSettings
from .prompts import get_prompt
from .settings import section


class ProviderError(RuntimeError):
    """Raised for any failure talking to the model provider (transport, status or payload)."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _api_message(r: requests.Response) -> str:
    """Pull the human-readable error out of an API error body, falling back to the reason phrase."""
    try:
        body = r.json()
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
    except ValueError:
        pass
    return (r.text or "")[:2000] or getattr(r, "reason", "") or "unknown error"


class CohereClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        settings: Optional[Dict[str, Any]] = None,
        ctx: Optional[Context] = None,
        timeout: int = REQUEST_TIMEOUT_SEC,
        max_retries: int = MAX_RETRIES,
    ) -> None:
        """
        Initialize an HTTP client for the Cohere v1 API.

        Value precedence (highest first):
          1) Constructor args (api_key/base_url)
          2) settings['api'] values (api_key, base_url)
          3) Environment: COHERE_API_KEY, COHERE_BASE_URL

        Raises:
            ProviderError: If no API key can be resolved.
        """
        api_cfg = section(settings or {}, "api")
        resolved_key = api_key or api_cfg.get("api_key") or os.environ.get("COHERE_API_KEY")
        if not resolved_key:
            raise ProviderError("Cohere API key missing. Set COHERE_API_KEY or pass --api-key.")
        self.base_url = str(base_url or api_cfg.get("base_url") or COHERE_BASE_URL).rstrip("/")
        self.settings = settings or {}
        self.ctx = ctx or Context(self.settings)
        self.timeout = timeout
        self.max_retries = max(0, int(max_retries))
        self.session = requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {resolved_key}",
                "Content-Type": "application/json",
            }
        )

    # ---------- Endpoints ----------

    def list_models(self) -> List[ModelInfo]:
        """Return models that support the chat or generate endpoint."""
        data = self._request("GET", "/models")
        out: List[ModelInfo] = []
        for raw in data.get("models") or []:
            try:
                m = ModelInfo.model_validate(raw)
            except ValidationError:
                continue
            if m.supports("chat") or m.supports("generate"):
                out.append(m)
        return out

    def chat(
        self,
        message: str,
        chat_history: Optional[List[ChatMessage]] = None,
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> ProviderResponse:
        """Send one chat turn; prior turns go in chat_history and the system prompt as preamble."""
        payload: Dict[str, Any] = {
            "message": message,
            "preamble": get_prompt("prompt_chat_system.txt"),
            "chat_history": [
                {"role": "USER" if m.role == "user" else "CHATBOT", "message": m.text}
                for m in (chat_history or [])
            ],
            "temperature": float(temperature),
            "max_tokens": int(max_tokens),
        }
        if model:
            payload["model"] = model
        data = self._request("POST", "/chat", payload)
        try:
            resp = ProviderResponse.model_validate(
                {"text": data.get("text") or "", "meta": _normalize_meta(data.get("meta")), "citations": data.get("citations")}
            )
        except ValidationError as e:
            raise ProviderError(f"Chat error: unexpected response shape: {e}")
        self._log_usage("chat", resp)
        return resp

    def generate(
        self,
        prompt: str,
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 1024,
    ) -> ProviderResponse:
        """Single-shot completion via the generate endpoint."""
        payload: Dict[str, Any] = {
            "prompt": prompt,
            "temperature": float(temperature),
            "max_tokens": int(max_tokens),
            "return_likelihoods": "NONE",
        }
        if model:
            payload["model"] = model
        data = self._request("POST", "/generate", payload)
        generations = data.get("generations") or []
        if not generations or not isinstance(generations[0], dict):
            raise ProviderError("Generate error: response contained no generations")
        meta = _normalize_meta(data.get("meta")) or {}
        meta.setdefault("model", model)
        try:
            resp = ProviderResponse.model_validate({"text": generations[0].get("text") or "", "meta": meta})
        except ValidationError as e:
            raise ProviderError(f"Generate error: unexpected response shape: {e}")
        self._log_usage("generate", resp)
        return resp

    def complete(
        self,
        settings: SessionSettings,
        text: str,
        history: Optional[List[ChatMessage]] = None,
    ) -> ProviderResponse:
        """
        Dispatch one request using the session settings.

        Chat models receive history (pass None to omit it); generate models
        ignore history since the endpoint is single-shot.
        """
        if settings.model_type == "chat":
            return self.chat(
                text,
                chat_history=history or [],
                model=settings.model or None,
                temperature=settings.temperature,
                max_tokens=settings.max_tokens,
            )
        return self.generate(
            text,
            model=settings.model or None,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
        )

    # ---------- Transport ----------

    def _http_log_dir(self) -> Optional[pathlib.Path]:
        """Directory for .http dumps, or None when request logging is off."""
        log_cfg = section(section(self.settings, "logging"), "httpcalls")
        enabled = log_cfg.get("enabled")
        if enabled is False:
            return None
        if enabled is True:
            custom = log_cfg.get("dir")
            base = pathlib.Path(str(custom)) if custom else pathlib.Path.cwd() / ".httpcalls"
            base.mkdir(parents=True, exist_ok=True)
            return base
        # quill: Without explicit config, only log when the default directory already exists.
        maybe = pathlib.Path.cwd() / ".httpcalls"
        return maybe if maybe.is_dir() else None

    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Issue one API call and return the decoded JSON body.

        Timeouts, connection errors, 429 and 5xx responses are retried with
        exponential backoff and jitter up to max_retries; other 4xx fail
        immediately.

        Raises:
            ProviderError: On exhausted retries, non-200 status or a non-JSON body.
        """
        url = f"{self.base_url}{path}"
        http_file: Optional[pathlib.Path] = None
        log_dir = self._http_log_dir()
        if log_dir is not None:
            http_file = log_dir / f"call-{int(now_ts() * 1000)}.http"
            headers_for_log = dict(self.session.headers)
            headers_for_log["Authorization"] = "Bearer {{COHERE_API_KEY}}"
            dumpHttpFile(str(http_file), url, method, headers_for_log, payload)

        attempt = 0
        while True:
            attempt += 1
            t0 = time.time()
            try:
                self.ctx.log(f"Calling {method} {path} (attempt {attempt})")
                r = self.session.request(method, url, json=payload, timeout=self.timeout)
            except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
                if attempt <= self.max_retries:
                    self._backoff(attempt, f"{type(e).__name__} on {path}")
                    continue
                raise ProviderError(f"{path} failed after {attempt} attempt(s): {e}")
            except requests.exceptions.RequestException as e:
                raise ProviderError(f"{path} request error: {e}")

            if http_file is not None:
                _append_http_response(http_file, r, int((time.time() - t0) * 1000))

            if r.status_code == 200:
                break
            if (r.status_code == 429 or r.status_code >= 500) and attempt <= self.max_retries:
                self._backoff(attempt, f"HTTP {r.status_code} on {path}")
                continue
            raise ProviderError(f"API Error {r.status_code}: {_api_message(r)}", status_code=r.status_code)

        try:
            data = r.json()
        except ValueError:
            raise ProviderError(f"{path} returned a non-JSON body: {r.text[:200]}")
        if not isinstance(data, dict):
            raise ProviderError(f"{path} returned an unexpected JSON payload")
        return data

    def _backoff(self, attempt: int, why: str) -> None:
        base_delay = [1.0, 2.0, 4.0][min(attempt - 1, 2)]
        delay = base_delay * random.uniform(0.5, 1.5)
        self.ctx.log(f"{why}; retrying in {delay:.2f}s...")
        time.sleep(delay)

    def _log_usage(self, endpoint: str, resp: ProviderResponse) -> None:
        tc = resp.meta.token_count if resp.meta else None
        if tc is not None:
            self.ctx.log(
                f"Cohere {endpoint} usage: prompt_tokens={tc.prompt_tokens}, completion_tokens={tc.completion_tokens}"
            )


def _normalize_meta(meta: Any) -> Optional[Dict[str, Any]]:
    """
    Map the provider's meta block onto ResponseMeta fields.

    Chat responses report billed_units.input_tokens/output_tokens; generate
    responses may carry prompt_tokens/completion_tokens directly.
    """
    if not isinstance(meta, dict):
        return None
    out: Dict[str, Any] = {}
    tokens = meta.get("tokens") or meta.get("billed_units") or meta.get("token_count") or meta
    if isinstance(tokens, dict):
        prompt = tokens.get("input_tokens", tokens.get("prompt_tokens"))
        completion = tokens.get("output_tokens", tokens.get("completion_tokens"))
        if prompt is not None or completion is not None:
            out["token_count"] = {"prompt_tokens": int(prompt or 0), "completion_tokens": int(completion or 0)}
    if meta.get("model"):
        out["model"] = meta["model"]
    return out


def _append_http_response(http_file: pathlib.Path, r: requests.Response, elapsed_ms: int) -> None:
    """Append the response section to a dumped .http file; failures are reported, not raised."""
    try:
        with open(http_file, "a", encoding="utf-8") as f:
            f.write(f"\n\n### Response - elapsed_ms: {elapsed_ms}\n")
            f.write(f"HTTP/1.1 {r.status_code} {getattr(r, 'reason', '')}\n")
            for hk, hv in r.headers.items():
                f.write(f"{hk}: {hv}\n")
            f.write("\n")
            f.write(r.text)
    except OSError as e:
        print(f"Error: Could not append response to {http_file}. Details: {e}")


def dumpHttpFile(file: str, url: str, method: str, headers: Dict[str, str], obj: Any) -> None:
    """
    Write a human-readable HTTP request dump to disk for debugging.

    Args:
        file: Destination file path for the dump.
        url: The target URL of the request.
        method: HTTP verb (GET/POST/...).
        headers: Request headers that will be sent.
        obj: JSON-serializable body object that will be pretty-printed (None for GET).

    Notes:
        This helper is best-effort: it catches serialization and I/O errors and
        prints a descriptive message instead of raising.
    """
    try:
        json_str = json.dumps(obj, indent=2, ensure_ascii=False) if obj is not None else ""
        with open(file, "w", encoding="utf-8") as f:
            f.write(f"{method.upper()} {url}\n")
            for key, value in headers.items():
                f.write(f"{key}: {value}\n")
            f.write("\n")
            f.write(json_str)
    except TypeError as e:
        print(f"Error: The object could not be serialized to JSON. Details: {e}")
    except OSError as e:
        print(f"Error: Could not write to file {file}. Details: {e}")
