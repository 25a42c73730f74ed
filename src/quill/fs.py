# quill: Filesystem helpers used by the edit and materialize flows. Reads and writes are plain UTF-8 text with no path sandboxing; callers decide where files go.

import os
import pathlib
import time
from typing import Union

PathLike = Union[str, pathlib.Path]


def now_ts() -> float:
    """Return the current UNIX timestamp in seconds (float)."""
    return time.time()


# quill: Normalized to POSIX for consistent display and suffix matching.
def normalize_path(p: PathLike) -> str:
    """Normalize a filesystem path to POSIX-style string (forward slashes)."""
    return str(pathlib.Path(p).as_posix())


def resolve_path(base_dir: PathLike, name: PathLike) -> str:
    """
    Join name onto base_dir and return the absolute result.

    An absolute name wins over base_dir, matching os.path.join semantics. A
    leading ~ in either part is expanded.
    """
    base = pathlib.Path(os.path.expanduser(str(base_dir or os.getcwd())))
    target = base / os.path.expanduser(str(name))
    return str(target.resolve())


def read_text(path: PathLike) -> str:
    """Read a whole file as UTF-8 text (~ expanded). Raises OSError/UnicodeDecodeError on failure."""
    with pathlib.Path(path).expanduser().open("r", encoding="utf-8") as f:
        return f.read()


def write_text(path: PathLike, content: str) -> None:
    """Write content verbatim as UTF-8 (~ expanded), creating parent directories as needed."""
    p = pathlib.Path(path).expanduser()
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        f.write(content)


def count_lines(s: str) -> int:
    """Return the number of lines in a string, handling trailing newline gracefully."""
    if not s:
        return 0
    return s.count("\n") + (0 if s.endswith("\n") else 1)
