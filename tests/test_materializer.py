from __future__ import annotations

import os

from quill.materializer import materialize_blocks, offer_files_from_response, write_edit
from quill.models import CodeBlock


def _blocks(*names):
    return [CodeBlock(language="py", code=f"# block {i}", filename=n) for i, n in enumerate(names, start=1)]


def test_declining_creation_does_nothing(tmp_path, make_ctx, recent):
    ctx = make_ctx(answers=[False])
    assert materialize_blocks(ctx, _blocks("a.py"), recent, base_dir=str(tmp_path)) == []
    assert list(tmp_path.iterdir()) == []
    assert len(recent) == 0
    assert [p[0] for p in ctx.prompts] == ["confirm"]


def test_empty_block_list_asks_nothing(make_ctx, recent):
    ctx = make_ctx()
    assert materialize_blocks(ctx, [], recent) == []
    assert ctx.prompts == []


def test_prompts_for_name_only_when_block_has_none(tmp_path, make_ctx, recent):
    ctx = make_ctx(answers=[True, str(tmp_path), None])
    outcomes = materialize_blocks(ctx, _blocks(None, "second.py"), recent)

    asks = [p for p in ctx.prompts if p[0] == "ask"]
    assert len(asks) == 2  # base directory + one filename
    assert "code block #1" in asks[1][1]
    assert asks[1][2] == "file1"

    assert [o.written for o in outcomes] == [True, True]
    assert (tmp_path / "file1").read_text(encoding="utf-8") == "# block 1"
    assert (tmp_path / "second.py").read_text(encoding="utf-8") == "# block 2"


def test_user_supplied_name_is_joined_onto_base_dir(tmp_path, make_ctx, recent):
    ctx = make_ctx(answers=[True, str(tmp_path), "pkg/util.py"])
    (outcome,) = materialize_blocks(ctx, _blocks(None), recent)
    expected = str((tmp_path / "pkg" / "util.py").resolve())
    assert outcome.path == expected
    assert os.path.isfile(expected)


def test_default_base_dir_is_used_for_blank_answer(tmp_path, make_ctx, recent):
    ctx = make_ctx(answers=[True, None])
    materialize_blocks(ctx, _blocks("x.py"), recent, base_dir=str(tmp_path))
    assert (tmp_path / "x.py").exists()
    assert ctx.prompts[1] == ("ask", ctx.prompts[1][1], str(tmp_path))


def test_write_failure_does_not_stop_later_blocks(tmp_path, make_ctx, recent):
    # a directory where block 2 wants to write makes that open() fail
    (tmp_path / "two.py").mkdir()
    ctx = make_ctx(answers=[True, str(tmp_path)])

    outcomes = materialize_blocks(ctx, _blocks("one.py", "two.py", "three.py"), recent)

    assert [o.index for o in outcomes] == [1, 2, 3]
    assert [o.written for o in outcomes] == [True, False, True]
    assert outcomes[1].error
    assert (tmp_path / "three.py").read_text(encoding="utf-8") == "# block 3"
    assert len(ctx.errors) == 1 and "two.py" in ctx.errors[0]
    assert recent.paths == [outcomes[0].path, outcomes[2].path]


def test_recent_files_are_absolute_and_deduplicated(tmp_path, make_ctx, recent):
    for _ in range(2):
        ctx = make_ctx(answers=[True, str(tmp_path)])
        materialize_blocks(ctx, _blocks("same.py"), recent)
    assert recent.paths == [str((tmp_path / "same.py").resolve())]
    assert os.path.isabs(recent.paths[0])


def test_offer_files_from_response_extracts_then_writes(tmp_path, make_ctx, recent):
    text = 'Sure:\n```js filename="app.js"\nconsole.log(1);\n```'
    ctx = make_ctx(answers=[True, str(tmp_path)])
    (outcome,) = offer_files_from_response(ctx, text, recent)
    assert outcome.written
    assert (tmp_path / "app.js").read_text(encoding="utf-8") == "console.log(1);"
    assert "Detected filename for code block #1: app.js" in ctx.messages


def test_offer_files_without_blocks_asks_nothing(make_ctx, recent):
    ctx = make_ctx()
    assert offer_files_from_response(ctx, "no code", recent) == []
    assert ctx.prompts == []


def test_write_edit_declined_leaves_file(tmp_path, make_ctx):
    target = tmp_path / "f.txt"
    target.write_text("keep", encoding="utf-8")
    outcome = write_edit(make_ctx(answers=[False]), str(target), CodeBlock(code="new", filename="f.txt"))
    assert outcome.written is False
    assert outcome.error is None
    assert target.read_text(encoding="utf-8") == "keep"


def test_write_edit_does_not_touch_recent_files(tmp_path, make_ctx, recent):
    target = tmp_path / "f.txt"
    target.write_text("old", encoding="utf-8")
    outcome = write_edit(make_ctx(answers=[True]), str(target), CodeBlock(code="new"))
    assert outcome.written is True
    assert target.read_text(encoding="utf-8") == "new"
    assert len(recent) == 0


def test_unusable_filename_is_reported_and_later_blocks_still_written(tmp_path, make_ctx, recent):
    ctx = make_ctx(answers=[True, str(tmp_path)])

    outcomes = materialize_blocks(ctx, _blocks("bad\x00name.py", "ok.py"), recent)

    assert [o.written for o in outcomes] == [False, True]
    assert outcomes[0].error
    assert (tmp_path / "ok.py").read_text(encoding="utf-8") == "# block 2"
    assert len(ctx.errors) == 1
    assert recent.paths == [outcomes[1].path]
