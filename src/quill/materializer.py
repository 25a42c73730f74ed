# quill: Confirm-before-write materialization of extracted code blocks. Covers the single-file overwrite used by edits and the multi-block creation flow offered after chat replies; per-file failures are reported and never stop the remaining blocks.

import os
from typing import List, Optional, Sequence

from .blocks import extract_code_blocks
from .context import Context, RecentFiles
from .fs import resolve_path, write_text
from .models import CodeBlock, WriteOutcome


def preview_block(ctx: Context, block: CodeBlock, title: Optional[str] = None) -> None:
    """Print a block with a simple header line so the user can review it before writing."""
    header = title or block.filename or "untitled"
    ctx.send_to_user(f"--- {header} [{block.language}] ---")
    ctx.send_to_user(block.code)
    ctx.send_to_user("--- end ---")


def write_edit(ctx: Context, path: str, block: CodeBlock) -> WriteOutcome:
    """
    Show the edit candidate and overwrite path only after an explicit yes.

    A "no" performs no I/O. Write errors are reported and returned, not raised.
    """
    preview_block(ctx, block)
    if not ctx.confirm(f"Overwrite {path} with AI-updated content?", default=True):
        ctx.send_to_user("Edit canceled.")
        return WriteOutcome(index=1, path=path, written=False)
    try:
        write_text(path, block.code)
    except (OSError, ValueError) as e:
        ctx.error_message(f"Failed to update {path}: {e}")
        return WriteOutcome(index=1, path=path, written=False, error=str(e))
    ctx.send_to_user(f"Updated: {path}")
    return WriteOutcome(index=1, path=path, written=True)


def materialize_blocks(
    ctx: Context,
    blocks: Sequence[CodeBlock],
    recent_files: RecentFiles,
    base_dir: Optional[str] = None,
) -> List[WriteOutcome]:
    """
    Offer to write blocks to disk and return one outcome per attempted block.

    Asks once whether to create files (declined -> []) and once for the base
    directory. Blocks without a filename get a prompted name defaulting to
    file<N>. Successful writes are recorded in recent_files by absolute path.
    """
    if not blocks:
        return []
    if not ctx.confirm(
        f"Detected {len(blocks)} code block(s). Do you want to create file(s) from them?", default=False
    ):
        return []

    default_dir = base_dir or os.getcwd()
    target_dir = ctx.ask(
        "Where should the files be saved? (directory path, blank for default)", default=default_dir
    ) or default_dir

    outcomes: List[WriteOutcome] = []
    for i, block in enumerate(blocks, start=1):
        name = block.filename
        if name:
            ctx.send_to_user(f"Detected filename for code block #{i}: {name}")
        else:
            name = ctx.ask(f"Enter filename for code block #{i} (language: {block.language}):", default=f"file{i}")
            name = name or f"file{i}"
        full_path = str(name)
        try:
            full_path = resolve_path(target_dir, name)
            write_text(full_path, block.code)
        except (OSError, ValueError) as e:
            ctx.error_message(f"Failed to write {full_path}: {e}")
            outcomes.append(WriteOutcome(index=i, path=full_path, written=False, error=str(e)))
            continue
        ctx.send_to_user(f"Created: {full_path}")
        recent_files.add(full_path)
        outcomes.append(WriteOutcome(index=i, path=full_path, written=True))
    return outcomes


def offer_files_from_response(
    ctx: Context, text: str, recent_files: RecentFiles, base_dir: Optional[str] = None
) -> List[WriteOutcome]:
    """Extract blocks from a chat reply and run the creation flow when there are any."""
    return materialize_blocks(ctx, extract_code_blocks(text), recent_files, base_dir=base_dir)
