from __future__ import annotations

import pytest
from pydantic import ValidationError

from quill.blocks import extract_code_blocks, parse_info, split_filename_comment


def test_returns_one_block_per_fence_in_order():
    text = (
        "Intro\n"
        "```python\nprint('a')\n```\n"
        "middle text\n"
        "```js\nconsole.log('b')\n```\n"
        "```sh\necho c\n```\n"
    )
    blocks = extract_code_blocks(text)
    assert [b.language for b in blocks] == ["python", "js", "sh"]
    assert [b.code for b in blocks] == ["print('a')", "console.log('b')", "echo c"]


def test_no_fences_yields_empty_list():
    assert extract_code_blocks("just prose, no code") == []
    assert extract_code_blocks("") == []


def test_explicit_filename_attribute_wins_over_body():
    text = '```python filename="x.ext"\n// other.js\nbody\n```'
    (block,) = extract_code_blocks(text)
    assert block.filename == "x.ext"
    # body comment is kept when the attribute already named the file
    assert block.code == "// other.js\nbody"


def test_filename_attribute_is_case_insensitive():
    (block,) = extract_code_blocks('```js FileName = "app.js"\nlet a = 1;\n```')
    assert block.filename == "app.js"
    assert block.language == "js"


def test_leading_slash_comment_sets_filename_and_is_stripped():
    (block,) = extract_code_blocks("```js\n// x.ext\nconst a = 1;\n```")
    assert block.filename == "x.ext"
    assert block.code == "const a = 1;"


@pytest.mark.parametrize(
    "first_line",
    ["/* styles.css */", "# main.py", "<!-- index.html -->", "//   spaced-name.min.js"],
)
def test_other_filename_comment_styles(first_line):
    (block,) = extract_code_blocks(f"```txt\n{first_line}\ncontent\n```")
    assert block.filename is not None
    assert block.filename in first_line
    assert block.code == "content"


def test_block_without_filename_keeps_trimmed_body():
    (block,) = extract_code_blocks("```python\n\n   x = 1\n\n```")
    assert block.filename is None
    assert block.code == "x = 1"


def test_comment_that_is_not_a_bare_filename_is_kept():
    (block,) = extract_code_blocks("```js\n// see app.js for details\nrun();\n```")
    assert block.filename is None
    assert block.code.startswith("// see app.js")


def test_missing_language_defaults_to_txt():
    (block,) = extract_code_blocks("```\nplain\n```")
    assert block.language == "txt"
    assert block.code == "plain"


def test_unterminated_fence_is_dropped_without_error():
    text = "```python\nok = True\n```\n\n```js\nnever closed\n"
    blocks = extract_code_blocks(text)
    assert len(blocks) == 1
    assert blocks[0].code == "ok = True"


def test_inline_triple_backticks_do_not_open_a_block():
    text = "Use ```code``` inline.\n```py\nx = 2\n```"
    (block,) = extract_code_blocks(text)
    assert block.language == "py"
    assert block.code == "x = 2"


def test_longer_fence_can_contain_shorter_fence():
    text = "````markdown\n```py\nx\n```\n````"
    (block,) = extract_code_blocks(text)
    assert block.language == "markdown"
    assert block.code == "```py\nx\n```"


def test_crlf_line_endings():
    (block,) = extract_code_blocks("```py\r\n# a.py\r\nx = 1\r\n```\r\n")
    assert block.filename == "a.py"
    assert block.code == "x = 1"


def test_blocks_are_immutable():
    (block,) = extract_code_blocks("```py\nx\n```")
    with pytest.raises(ValidationError):
        block.code = "y"


def test_parse_info_attribute_only():
    assert parse_info('filename="a.txt"') == ("txt", "a.txt")
    assert parse_info("") == ("txt", None)


def test_split_filename_comment_no_match_returns_body():
    assert split_filename_comment("x = 1\ny = 2") == (None, "x = 1\ny = 2")


def test_closing_fence_may_trail_the_last_code_line():
    blocks = extract_code_blocks('```js\nx()```\nthen\n```py filename="b.py"\na = 1\nb = 2 ```')
    assert [b.code for b in blocks] == ["x()", "a = 1\nb = 2"]
    assert blocks[1].filename == "b.py"


def test_shorter_trailing_run_does_not_close_longer_fence():
    (block,) = extract_code_blocks("````md\nsay ```\n````")
    assert block.code == "say ```"
