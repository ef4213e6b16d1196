# File: tests/test_splitter.py
import json

import pytest

from doc_scout.errors import ChunkSizeError, MinimumChunkSizeError
from doc_scout.splitter import (
    Chunk,
    CodeContentSplitter,
    JsonContentSplitter,
    MarkdownContentSplitter,
    TableContentSplitter,
    TextContentSplitter,
    byte_length,
    select_splitter,
    split_content,
)
from doc_scout.splitter.table import parse_table


def assert_within(chunks, max_size):
    for chunk in chunks:
        assert byte_length(chunk.content) <= max_size


# --------------------------------------------------------------------------- #
#                                    Text                                     #
# --------------------------------------------------------------------------- #


def test_text_fits_in_one_chunk():
    assert TextContentSplitter(100).split("short text") == [Chunk("short text")]


@pytest.mark.parametrize("splitter_cls", [TextContentSplitter, TableContentSplitter, JsonContentSplitter, MarkdownContentSplitter])
def test_empty_input_gives_one_empty_chunk(splitter_cls):
    chunks = splitter_cls(10).split("")
    assert [c.content for c in chunks] == [""]


def test_text_split_reconstructs_input():
    paragraphs = [f"Paragraph {i} " + "word " * 15 for i in range(10)]
    text = "\n\n".join(paragraphs) + "\nlast line\n"
    chunks = TextContentSplitter(120).split(text)
    assert len(chunks) > 1
    assert_within(chunks, 120)
    assert "".join(c.content for c in chunks) == text


def test_text_prefers_paragraph_boundaries():
    text = "a" * 40 + "\n\n" + "b" * 40
    chunks = TextContentSplitter(50).split(text)
    # the separator opens the next chunk
    assert [c.content for c in chunks] == ["a" * 40, "\n\n" + "b" * 40]


def test_text_size_is_measured_in_utf8_bytes():
    text = "я" * 30  # 60 bytes, one token
    with pytest.raises(MinimumChunkSizeError):
        TextContentSplitter(50).split(text)
    chunks = TextContentSplitter(50).split(" ".join(["яя"] * 30))
    assert_within(chunks, 50)


def test_text_unsplittable_word_raises():
    with pytest.raises(MinimumChunkSizeError) as exc_info:
        TextContentSplitter(10).split("tiny " + "x" * 25)
    assert exc_info.value.size == 25
    assert exc_info.value.max_size == 10


def test_text_long_whitespace_run_is_split():
    text = "a" + " " * 30 + "b"
    chunks = TextContentSplitter(10).split(text)
    assert_within(chunks, 10)
    assert "".join(c.content for c in chunks) == text


def test_splitter_is_restartable():
    splitter = TextContentSplitter(30)
    text = "one two three four five six seven eight nine ten eleven"
    assert splitter.split(text) == splitter.split(text)


def test_make_chunk_enforces_budget():
    with pytest.raises(ChunkSizeError):
        TextContentSplitter(3)._make_chunk("toolong")


def test_text_falls_back_to_line_boundaries():
    text = "line one\nline two\nline three"
    chunks = TextContentSplitter(20).split(text)
    assert [c.content for c in chunks] == ["line one\nline two", "\nline three"]


# --------------------------------------------------------------------------- #
#                                   Tables                                    #
# --------------------------------------------------------------------------- #

HEADER = "| Name | Value | Notes |"


def make_table(rows: int) -> str:
    lines = [HEADER, "|:-----|------:|-------|"]
    lines += [f"| row{i} | {i * 10} | note {i} |" for i in range(rows)]
    return "\n".join(lines)


def test_table_chunks_repeat_header_and_normalized_separator():
    table = make_table(40)
    chunks = TableContentSplitter(150).split(table)
    assert len(chunks) > 1
    assert_within(chunks, 150)

    rows = []
    for chunk in chunks:
        lines = chunk.content.split("\n")
        assert lines[0] == HEADER
        assert lines[1] == "|---|---|---|"
        assert chunk.metadata["headers"] == ["Name", "Value", "Notes"]
        rows.extend(lines[2:])
    assert rows == table.split("\n")[2:]


def test_table_row_too_large_raises():
    table = "| A | B |\n|---|---|\n| " + "x" * 200 + " | y |"
    with pytest.raises(MinimumChunkSizeError):
        TableContentSplitter(100).split(table)


def test_table_with_escaped_pipe_counts_columns_correctly():
    table = "| a \\| b | c |\n|---|---|\n| 1 | 2 |"
    chunks = TableContentSplitter(1000).split(table)
    assert chunks[0].metadata["headers"] == ["a \\| b", "c"]
    assert chunks[0].content.split("\n")[1] == "|---|---|"


def test_non_table_falls_back_to_text():
    text = "no table here\njust lines"
    assert [c.content for c in TableContentSplitter(1000).split(text)] == [text]


def test_table_followed_by_paragraph_keeps_paragraph_as_text():
    text = "| A | B |\n|---|---|\n| 1 | 2 |\n| 3 | 4 |\n\nSome paragraph."
    chunks = TableContentSplitter(44).split(text)
    assert [c.content for c in chunks] == [
        "| A | B |\n|---|---|\n| 1 | 2 |\n| 3 | 4 |",
        "\n\nSome paragraph.",
    ]
    assert chunks[0].metadata == {"headers": ["A", "B"]}
    assert chunks[1].metadata == {}
    assert "".join(c.content for c in chunks) == text


def test_table_trailing_newline_is_kept():
    text = "| A | B |\n|---|---|\n| 1 | 2 |\n"
    assert [c.content for c in TableContentSplitter(1000).split(text)] == [text]


def test_blank_line_ends_the_table():
    text = "| A | B |\n|---|---|\n| 1 | 2 |\n\n| 3 | 4 |\n"
    table = parse_table(text)
    assert table.rows == ["| 1 | 2 |"]
    assert table.rest == "\n\n| 3 | 4 |\n"
    chunks = TableContentSplitter(1000).split(text)
    assert [c.content for c in chunks] == ["| A | B |\n|---|---|\n| 1 | 2 |", "\n\n| 3 | 4 |\n"]


# --------------------------------------------------------------------------- #
#                                    JSON                                     #
# --------------------------------------------------------------------------- #


def test_json_array_round_trip():
    data = [{"id": i, "name": f"item-{i}"} for i in range(100)]
    chunks = JsonContentSplitter(200).split(json.dumps(data))
    assert len(chunks) > 1
    assert_within(chunks, 200)
    merged = []
    for chunk in chunks:
        part = json.loads(chunk.content)
        assert isinstance(part, list)
        merged.extend(part)
    assert merged == data


def test_json_object_keys_are_partitioned_in_order():
    data = {f"key{i}": "v" * 20 for i in range(20)}
    chunks = JsonContentSplitter(100).split(json.dumps(data, indent=2))
    assert_within(chunks, 100)
    keys = []
    for chunk in chunks:
        part = json.loads(chunk.content)
        assert isinstance(part, dict)
        keys.extend(part)
    assert keys == list(data)


def test_json_small_input_returned_verbatim():
    text = '{ "a": 1 }'
    assert [c.content for c in JsonContentSplitter(100).split(text)] == [text]


def test_json_member_too_large_raises():
    data = [1, "x" * 300, 2]
    with pytest.raises(MinimumChunkSizeError):
        JsonContentSplitter(100).split(json.dumps(data))


def test_json_large_scalar_raises():
    with pytest.raises(MinimumChunkSizeError):
        JsonContentSplitter(10).split(json.dumps("x" * 50))


def test_invalid_json_falls_back_to_text():
    text = "{broken " + "word " * 20
    chunks = JsonContentSplitter(30).split(text)
    assert "".join(c.content for c in chunks) == text


# --------------------------------------------------------------------------- #
#                                  Code                                       #
# --------------------------------------------------------------------------- #


def test_code_chunks_are_fenced_with_language():
    code = "\n".join(f"print({i})" for i in range(30))
    chunks = CodeContentSplitter(60, language="python").split(code)
    assert len(chunks) > 1
    assert_within(chunks, 60)
    body_lines = []
    for chunk in chunks:
        assert chunk.content.startswith("```python\n")
        assert chunk.content.endswith("\n```")
        assert chunk.metadata["language"] == "python"
        body_lines.extend(chunk.content.split("\n")[1:-1])
    assert body_lines == code.split("\n")


def test_code_line_too_long_raises():
    with pytest.raises(MinimumChunkSizeError):
        CodeContentSplitter(20).split("x" * 30)


# --------------------------------------------------------------------------- #
#                                  Markdown                                   #
# --------------------------------------------------------------------------- #

GUIDE = "\n".join(
    [
        "# Guide",
        "",
        "Intro text.",
        "",
        "## Install",
        "",
        "```bash",
        "pip install thing",
        "```",
        "",
        "| Opt | Default |",
        "|-----|---------|",
        "| a | 1 |",
        "",
        "### Details",
        "",
        "More words.",
        "",
        "## Usage",
        "",
        "Run it.",
        "",
    ]
)


def test_markdown_chunks_carry_type_and_section():
    chunks = MarkdownContentSplitter(1000).split(GUIDE)
    assert [c.metadata["type"] for c in chunks] == ["text", "text", "code", "table", "text", "text"]
    assert [c.metadata["section"]["path"] for c in chunks] == [
        ["Guide"],
        ["Guide", "Install"],
        ["Guide", "Install"],
        ["Guide", "Install"],
        ["Guide", "Install", "Details"],
        ["Guide", "Usage"],
    ]
    assert chunks[0].content == "# Guide\n\nIntro text.\n\n"
    assert chunks[2].content == "```bash\npip install thing\n```"
    assert chunks[2].metadata["language"] == "bash"
    assert chunks[3].content == "| Opt | Default |\n|---|---|\n| a | 1 |\n"
    assert chunks[3].metadata["headers"] == ["Opt", "Default"]
    assert chunks[4].metadata["section"] == {
        "title": "Details",
        "level": 3,
        "path": ["Guide", "Install", "Details"],
    }


def test_markdown_large_section_keeps_section_metadata():
    text = "# Title\n\n" + "\n\n".join("word " * 8 for _ in range(10))
    chunks = MarkdownContentSplitter(60).split(text)
    assert len(chunks) > 1
    assert_within(chunks, 60)
    assert all(c.metadata["section"]["title"] == "Title" for c in chunks)
    assert "".join(c.content for c in chunks) == text


def test_markdown_text_before_first_heading_has_empty_section():
    chunks = MarkdownContentSplitter(1000).split("Preface.\n\n# One\nBody\n")
    assert chunks[0].metadata["section"] == {"title": "", "level": 0, "path": []}
    assert chunks[1].metadata["section"]["path"] == ["One"]


def test_markdown_oversized_code_line_raises():
    text = "# Code\n\n```\n" + "x" * 100 + "\n```\n"
    with pytest.raises(MinimumChunkSizeError):
        MarkdownContentSplitter(50).split(text)


# --------------------------------------------------------------------------- #
#                                 Selection                                   #
# --------------------------------------------------------------------------- #


@pytest.mark.parametrize(
    "content,kind,expected",
    [
        ('[1, 2, 3]', "auto", JsonContentSplitter),
        (make_table(2), "auto", MarkdownContentSplitter),
        ("# Title\n\nBody text", "auto", MarkdownContentSplitter),
        ("intro\n```py\nx = 1\n```", "auto", MarkdownContentSplitter),
        (make_table(2), "table", TableContentSplitter),
        ("plain words", "auto", TextContentSplitter),
        ("[not json", "auto", TextContentSplitter),
        ("print(1)", "code", CodeContentSplitter),
        ("[1]", "text", TextContentSplitter),
    ],
)
def test_select_splitter(content, kind, expected):
    assert isinstance(select_splitter(content, 100, kind), expected)


def test_select_splitter_rejects_unknown_kind():
    with pytest.raises(ValueError):
        select_splitter("x", 100, "yaml")


def test_split_content_convenience():
    chunks = split_content(make_table(30), 120)
    assert all(c.content.startswith(HEADER) for c in chunks)
