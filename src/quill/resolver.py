# quill: Resolve which file an edit instruction refers to. Pure lookup over the instruction text and the session's recent files; the interactive pick is a separate step so resolution never touches disk.

import re
from typing import Iterable, List, Optional

from .context import Context
from .fs import normalize_path
from .models import TargetKind, TargetResolution

# First filename-like token: word characters, dashes, dots and path separators ending in .<ext>
_FILE_TOKEN = re.compile(r"([\w\-./~]*[\w\-]\.\w+)")


def find_filename_token(text: str) -> Optional[str]:
    """Return the first filename-like token in text, or None."""
    m = _FILE_TOKEN.search(text or "")
    return m.group(1) if m else None


def _match_recent(token: str, recent_files: Iterable[str]) -> Optional[str]:
    """
    Return the first recent path ending with token on a path-component boundary.

    "app.js" matches "/tmp/proj/app.js" but not "/tmp/proj/myapp.js".
    """
    want = normalize_path(token)
    for path in recent_files:
        norm = normalize_path(path)
        if norm == want or norm.endswith("/" + want):
            return path
    return None


def resolve_edit_target(instruction: str, recent_files: Iterable[str]) -> TargetResolution:
    """
    Decide the edit target for a free-form instruction.

    - A filename token that matches a recent file resolves to that recent path.
    - A filename token with no recent match resolves to the literal token.
    - No token and some recent files: ambiguous, candidates are the recent files.
    - No token and no recent files: not_found.
    """
    recent: List[str] = list(recent_files)
    token = find_filename_token(instruction)
    if token:
        found = _match_recent(token, recent)
        return TargetResolution(kind=TargetKind.path, path=found or token)
    if recent:
        return TargetResolution(kind=TargetKind.ambiguous, candidates=recent)
    return TargetResolution(kind=TargetKind.not_found)


def choose_edit_target(ctx: Context, resolution: TargetResolution) -> Optional[str]:
    """Turn a resolution into a single path, asking the user when it is ambiguous."""
    if resolution.kind == TargetKind.path:
        return resolution.path
    if resolution.kind == TargetKind.ambiguous:
        return ctx.choose("Which file do you want to edit?", resolution.candidates)
    return None
