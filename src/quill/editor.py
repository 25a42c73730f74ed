# quill: Edit flow orchestration. Reads the resolved target, asks the provider for a full replacement file, extracts the first fenced block and hands it to the materializer for a confirmed overwrite. Each failure kind ends the flow with an EditResult and leaves the file untouched.

import os
from typing import Optional, Protocol

from .blocks import extract_code_blocks
from .client import ProviderError
from .context import Context
from .fs import count_lines, read_text
from .materializer import write_edit
from .models import EditFailure, EditRequest, EditResult, ProviderResponse, SessionSettings
from .prompts import get_prompt


class Provider(Protocol):
    def complete(self, settings: SessionSettings, text: str, history=None) -> ProviderResponse: ...


def build_edit_prompt(req: EditRequest) -> str:
    """Render the edit directive: original content and instruction are embedded verbatim."""
    return get_prompt(
        "prompt_edit.txt",
        filename=os.path.basename(req.target_path),
        content=req.original_content,
        instruction=req.instruction,
    )


def perform_edit(
    ctx: Context,
    path: str,
    instruction: str,
    provider: Provider,
    settings: Optional[SessionSettings] = None,
) -> EditResult:
    """
    Run one AI-assisted edit of path.

    Steps:
      - read the current content (FileUnreadable aborts)
      - send the edit prompt without chat history (ProviderFailure aborts)
      - take the first extracted block as the candidate (NoEditProduced aborts)
      - confirm and write through the materializer (EditCancelled / WriteFailure)

    Returns:
        EditResult with written=True only when the file was overwritten.
    """
    settings = settings or SessionSettings()
    try:
        original = read_text(path)
    except (OSError, ValueError) as e:
        ctx.error_message(f"Could not read file: {path}")
        return EditResult(written=False, path=path, reason=EditFailure.file_unreadable, detail=str(e))

    req = EditRequest(target_path=path, original_content=original, instruction=instruction)
    prompt = build_edit_prompt(req)

    ctx.log(f"Requesting edit of {path} ({count_lines(original)} lines) from {settings.model or 'default model'}...")
    try:
        response = provider.complete(settings, prompt, history=None)
    except ProviderError as e:
        ctx.error_message(f"Edit error: {e}")
        return EditResult(written=False, path=path, reason=EditFailure.provider_failure, detail=str(e))

    blocks = extract_code_blocks(response.text)
    if not blocks:
        ctx.error_message("No code block found in AI response.")
        return EditResult(written=False, path=path, reason=EditFailure.no_edit_produced)
    if len(blocks) > 1:
        ctx.log(f"Response contained {len(blocks)} code blocks; using the first as the edit.")

    candidate = blocks[0]
    if not candidate.filename:
        candidate = candidate.model_copy(update={"filename": os.path.basename(path)})

    outcome = write_edit(ctx, path, candidate)
    if outcome.written:
        return EditResult(written=True, path=path, block=candidate)
    if outcome.error:
        return EditResult(
            written=False, path=path, reason=EditFailure.write_failure, detail=outcome.error, block=candidate
        )
    return EditResult(written=False, path=path, reason=EditFailure.cancelled, block=candidate)
