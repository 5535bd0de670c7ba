"""Tests for SRT parser."""

import pytest
from pathlib import Path
import tempfile

from srt_batch_translator.exceptions import (
    MalformedDocument,
    ReconstructionOverflow,
    ReconstructionUnderflow,
)
from srt_batch_translator.parser import (
    CueDocument,
    count_lines,
    read_srt,
    render_blocks,
    save_srt,
    validate_srt_file,
)


TWO_BLOCKS = (
    "1\n00:00:01,000 --> 00:00:02,000\nHello\n\n"
    "2\n00:00:03,000 --> 00:00:04,000\nWorld\n"
)


class TestParse:

    def test_parse_simple(self):
        doc = CueDocument.parse(TWO_BLOCKS)
        assert len(doc.blocks) == 2
        assert doc.blocks[0].index == 1
        assert doc.blocks[0].timecode == "00:00:01,000 --> 00:00:02,000"
        assert doc.blocks[0].lines == ["Hello"]
        assert doc.blocks[1].lines == ["World"]

    def test_parse_multiline(self):
        content = """1
00:00:01,000 --> 00:00:03,500
Line one
Line two

"""
        doc = CueDocument.parse(content)
        assert doc.blocks[0].lines == ["Line one", "Line two"]

    def test_parse_empty(self):
        with pytest.raises(MalformedDocument):
            CueDocument.parse("")
        with pytest.raises(MalformedDocument):
            CueDocument.parse("   \n\n  ")

    def test_parse_no_blocks(self):
        with pytest.raises(MalformedDocument):
            CueDocument.parse("just some text\nwithout cues\n")

    def test_parse_no_trailing_newline(self):
        """Test that last entry is captured even without trailing newlines."""
        content = """1
00:00:01,000 --> 00:00:03,500
First

2
00:00:04,000 --> 00:00:06,500
Last entry"""
        doc = CueDocument.parse(content)
        assert len(doc.blocks) == 2
        assert doc.blocks[1].lines == ["Last entry"]

    def test_parse_windows_line_endings(self):
        content = "1\r\n00:00:01,000 --> 00:00:03,500\r\nHello\r\n\r\n"
        doc = CueDocument.parse(content)
        assert len(doc.blocks) == 1
        assert doc.blocks[0].lines == ["Hello"]
        assert doc.newline == "\r\n"

    def test_non_contiguous_indices(self):
        content = "5\n00:00:01,000 --> 00:00:02,000\nA\n\n9\n00:00:03,000 --> 00:00:04,000\nB\n"
        doc = CueDocument.parse(content)
        assert [b.index for b in doc.blocks] == [5, 9]

    def test_digit_text_line_inside_block(self):
        content = "1\n00:00:01,000 --> 00:00:02,000\n42\n\n"
        doc = CueDocument.parse(content)
        assert doc.blocks[0].lines == ["42"]

    def test_line_before_timing_kept_verbatim(self):
        content = "1\nnot a timecode\n00:00:01,000 --> 00:00:02,000\nHello\n\n"
        doc = CueDocument.parse(content)
        assert doc.blocks[0].extra == ["not a timecode"]
        assert doc.blocks[0].lines == ["Hello"]
        assert [t.text for t in doc.extract_translatable_text()] == ["Hello"]
        assert doc.serialize() == content

    def test_stray_text_outside_blocks(self):
        content = "WEBVTT-ish header\n\n1\n00:00:01,000 --> 00:00:02,000\nHello\n"
        doc = CueDocument.parse(content)
        assert len(doc.blocks) == 1
        assert doc.reconstruct(["Bonjour"]) == content.replace("Hello", "Bonjour")

    def test_timestamps_in_seconds(self):
        doc = CueDocument.parse("1\n01:30:45,500 --> 01:30:50,000\nTest\n")
        assert doc.blocks[0].start_seconds == 5445.5
        assert doc.blocks[0].end_seconds == 5450.0


class TestExtract:

    def test_flattened_positions(self):
        content = (
            "1\n00:00:01,000 --> 00:00:02,000\nA\nB\n\n"
            "2\n00:00:03,000 --> 00:00:04,000\nC\n"
        )
        lines = CueDocument.parse(content).extract_translatable_text()
        assert [(l.position, l.block_index, l.text) for l in lines] == [
            (0, 1, "A"), (1, 1, "B"), (2, 2, "C"),
        ]

    def test_extract_does_not_mutate(self):
        doc = CueDocument.parse(TWO_BLOCKS)
        doc.extract_translatable_text()
        assert doc.serialize() == TWO_BLOCKS


class TestReconstruct:

    @pytest.mark.parametrize("content", [
        TWO_BLOCKS,
        TWO_BLOCKS + "\n",
        TWO_BLOCKS.rstrip("\n"),
        TWO_BLOCKS.replace("\n", "\r\n"),
        "\n\n" + TWO_BLOCKS + "\n\n\n",
    ])
    def test_round_trip_identity(self, content):
        doc = CueDocument.parse(content)
        identity = [l.text for l in doc.extract_translatable_text()]
        assert doc.reconstruct(identity) == content
        assert doc.reconstruct(identity, strict=True) == content

    def test_two_block_scenario(self):
        doc = CueDocument.parse(TWO_BLOCKS)
        result = doc.reconstruct(["Hello", "World"])
        assert count_lines(result) == count_lines(TWO_BLOCKS) == 7
        reparsed = CueDocument.parse(result)
        assert [b.index for b in reparsed.blocks] == [1, 2]
        assert [b.timecode for b in reparsed.blocks] == [b.timecode for b in doc.blocks]
        assert [b.lines for b in reparsed.blocks] == [["Hello"], ["World"]]

    def test_substitutes_in_order(self):
        doc = CueDocument.parse(TWO_BLOCKS)
        result = doc.reconstruct(["Bonjour", "Monde"])
        assert result == TWO_BLOCKS.replace("Hello", "Bonjour").replace("World", "Monde")

    def test_lenient_underflow_leaves_slots_unfilled(self):
        doc = CueDocument.parse(TWO_BLOCKS)
        result = doc.reconstruct(["Bonjour"])
        assert "Bonjour" in result
        assert "World" not in result
        assert count_lines(result) == count_lines(TWO_BLOCKS) - 1

    def test_strict_underflow_raises(self):
        doc = CueDocument.parse(TWO_BLOCKS)
        with pytest.raises(ReconstructionUnderflow):
            doc.reconstruct(["Bonjour"], strict=True)

    def test_strict_overflow_raises(self):
        doc = CueDocument.parse(TWO_BLOCKS)
        with pytest.raises(ReconstructionOverflow):
            doc.reconstruct(["a", "b", "c"], strict=True)

    def test_lenient_overflow_ignores_surplus(self):
        doc = CueDocument.parse(TWO_BLOCKS)
        assert doc.reconstruct(["a", "b", "c"]) == TWO_BLOCKS.replace("Hello", "a").replace("World", "b")


class TestCountLines:

    def test_count(self):
        assert count_lines("") == 0
        assert count_lines("a") == 1
        assert count_lines("a\n") == 1
        assert count_lines("a\n\n") == 2
        assert count_lines("a\r\nb\r\n") == 2


class TestRenderBlocks:

    def test_render(self):
        doc = CueDocument.parse(TWO_BLOCKS)
        assert render_blocks(doc.blocks) == TWO_BLOCKS.rstrip("\n")


class TestValidateSrtFile:

    def test_nonexistent(self):
        error = validate_srt_file(Path("/nonexistent/file.srt"))
        assert "not found" in error

    def test_wrong_extension(self):
        with tempfile.NamedTemporaryFile(suffix=".txt") as f:
            error = validate_srt_file(Path(f.name))
            assert "Invalid file extension" in error

    def test_valid_file(self):
        with tempfile.NamedTemporaryFile(suffix=".srt", delete=False) as f:
            f.write(b"test content")
            path = Path(f.name)

        try:
            error = validate_srt_file(path)
            assert error is None
        finally:
            path.unlink()


class TestSaveSrt:

    def test_save_and_reload(self, tmp_path):
        path = tmp_path / "out" / "movie.fr.srt"
        save_srt(TWO_BLOCKS, path)
        assert read_srt(path) == TWO_BLOCKS

    def test_keeps_crlf(self, tmp_path):
        path = tmp_path / "movie.fr.srt"
        content = TWO_BLOCKS.replace("\n", "\r\n")
        save_srt(content, path)
        assert path.read_bytes() == content.encode("utf-8")

    def test_refuses_to_overwrite(self, tmp_path):
        path = tmp_path / "movie.fr.srt"
        path.write_text("existing", encoding="utf-8")
        with pytest.raises(FileExistsError):
            save_srt(TWO_BLOCKS, path)
        assert path.read_text(encoding="utf-8") == "existing"

    def test_read_strips_bom(self, tmp_path):
        path = tmp_path / "movie.en.srt"
        path.write_bytes(b"\xef\xbb\xbf" + TWO_BLOCKS.encode("utf-8"))
        assert read_srt(path) == TWO_BLOCKS
