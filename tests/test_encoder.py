"""Tests for the fragment encoder."""

from pathlib import Path

import pytest

from embedgen.errors import SpliceIOError
from embedgen.fragment.encoder import (
    encode_file,
    render_fragment,
    sanitize_identifier,
    write_fragment,
)

FIXTURES = Path(__file__).parent / "fixtures"


class TestSanitizeIdentifier:
    def test_dots_become_underscores(self):
        assert sanitize_identifier("logo.png") == "logo_png"

    def test_uses_base_name_only(self):
        assert sanitize_identifier("assets/my-file.bin") == "my_file_bin"

    def test_leading_digit_prefixed(self):
        assert sanitize_identifier("3d.obj") == "_3d_obj"


class TestRenderFragment:
    def test_go_declaration(self):
        text = render_fragment(b"\x00\x01\xff", "blob")
        assert text == "var blob = []byte{\n\t0x00, 0x01, 0xff,\n}\n"

    def test_c_declaration(self):
        text = render_fragment(b"A", "blob", language="c")
        assert text == "static const unsigned char blob[] = {\n    0x41,\n};\n"

    def test_wraps_at_twelve_values(self):
        text = render_fragment(bytes(range(13)), "blob")
        lines = text.splitlines()
        assert len(lines) == 4
        assert lines[1].count("0x") == 12
        assert lines[2] == "\t0x0c,"

    def test_custom_width(self):
        lines = render_fragment(bytes(range(10)), "blob", values_per_line=4).splitlines()
        assert [line.count("0x") for line in lines[1:-1]] == [4, 4, 2]

    def test_empty_input(self):
        assert render_fragment(b"", "blob") == "var blob = []byte{\n}\n"

    def test_unknown_language(self):
        with pytest.raises(ValueError, match="Unknown language"):
            render_fragment(b"A", "blob", language="rust")

    def test_zero_width_rejected(self):
        with pytest.raises(ValueError):
            render_fragment(b"A", "blob", values_per_line=0)


class TestEncodeFile:
    def test_named_after_file(self):
        text = encode_file(FIXTURES / "hello.txt")
        assert text.startswith("var hello_txt = []byte{\n")
        assert "0x48, 0x65, 0x6c, 0x6c, 0x6f," in text

    def test_idempotent(self):
        assert encode_file(FIXTURES / "hello.txt") == encode_file(FIXTURES / "hello.txt")

    def test_missing_input(self, tmp_path):
        with pytest.raises(SpliceIOError) as exc_info:
            encode_file(tmp_path / "absent.bin")
        assert exc_info.value.path == tmp_path / "absent.bin"
        assert isinstance(exc_info.value, OSError)

    def test_write_fragment_byte_identical(self, tmp_path):
        first = write_fragment(FIXTURES / "hello.txt", tmp_path / "a.code").read_bytes()
        second = write_fragment(FIXTURES / "hello.txt", tmp_path / "b.code").read_bytes()
        assert first == second
