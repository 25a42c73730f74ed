# quill: Code block extraction for model responses. Fences are found by an explicit line scan (open fence, info string, body, close fence) instead of one large pattern, so malformed input simply yields fewer blocks.

import re
from typing import Iterator, List, Optional, Tuple

from .models import CodeBlock

DEFAULT_LANGUAGE = "txt"

# filename="app.py" inside the info string
_FILENAME_ATTR = re.compile(r'filename\s*=\s*"([^"]+)"', re.IGNORECASE)

# A bare filename: word characters, dashes and dots, ending in .<ext>
_NAME = r"([\w\-.]+\.\w+)"

# Single-line comments that carry only a filename, e.g. "// app.js" or "/* app.js */".
_FILENAME_COMMENTS = (
    re.compile(r"^//\s*" + _NAME + r"$"),
    re.compile(r"^/\*\s*" + _NAME + r"\s*\*/$"),
    re.compile(r"^#\s*" + _NAME + r"$"),
    re.compile(r"^<!--\s*" + _NAME + r"\s*-->$"),
)


def _open_fence(line: str) -> Tuple[int, str]:
    """
    Return (width, info) when line opens a fence, else (0, "").

    Width is the length of the backtick run (at least three). Info strings may
    not contain backticks, which keeps inline ```code``` spans from opening a
    block.
    """
    s = line.lstrip()
    width = len(s) - len(s.lstrip("`"))
    if width < 3:
        return 0, ""
    info = s[width:].strip()
    if "`" in info:
        return 0, ""
    return width, info


def _closes(line: str, width: int) -> Optional[str]:
    """
    Return the code left on line when it closes a fence of width, else None.

    A closer is a run of at least width backticks ending the line, either on a
    line of its own ("" is returned) or trailing the last line of code.
    """
    s = line.rstrip()
    run = len(s) - len(s.rstrip("`"))
    if run < width:
        return None
    return s[:-run] if s[:-run].strip() else ""


def scan_fences(text: str) -> Iterator[Tuple[str, str]]:
    """
    Yield (info, body) for each terminated fence in document order.

    An unterminated fence stops the scan: everything after it belongs to that
    open block, so no further blocks can be produced.
    """
    lines = (text or "").replace("\r\n", "\n").replace("\r", "\n").split("\n")
    i = 0
    while i < len(lines):
        width, info = _open_fence(lines[i])
        if not width:
            i += 1
            continue
        for j in range(i + 1, len(lines)):
            tail = _closes(lines[j], width)
            if tail is not None:
                body = lines[i + 1 : j] + ([tail] if tail else [])
                yield info, "\n".join(body)
                i = j + 1
                break
        else:
            return


def parse_info(info: str) -> Tuple[str, Optional[str]]:
    """Split an info string into (language, explicit filename or None)."""
    tokens = info.split(None, 1)
    language = DEFAULT_LANGUAGE
    if tokens and "=" not in tokens[0]:
        language = tokens[0]
    m = _FILENAME_ATTR.search(info)
    filename = m.group(1).strip() if m else None
    return language, filename or None


def split_filename_comment(body: str) -> Tuple[Optional[str], str]:
    """
    Detect a leading filename comment in body.

    Returns (filename, remaining_body). When the first line is not a filename
    comment, returns (None, body) unchanged.
    """
    lines = body.split("\n")
    first = lines[0].strip()
    for pattern in _FILENAME_COMMENTS:
        m = pattern.match(first)
        if m:
            return m.group(1), "\n".join(lines[1:])
    return None, body


def extract_code_blocks(text: str) -> List[CodeBlock]:
    """Parse every fenced block in text into a CodeBlock, preserving order."""
    blocks: List[CodeBlock] = []
    for info, body in scan_fences(text):
        language, filename = parse_info(info)
        code = body.strip()
        if filename is None:
            filename, code = split_filename_comment(code)
        blocks.append(CodeBlock(language=language, code=code.strip(), filename=filename))
    return blocks
