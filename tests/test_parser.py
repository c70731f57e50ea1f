"""Unit tests for cbmconf.parser: line reading, parsing and rewriting."""

import os
from io import StringIO

import pytest

from cbmconf.consts import ASSUMED_MAX_LINE_LENGTH
from cbmconf.parser import ConfigParser, ConfigWriteError


def _parse(text: str):
    return ConfigParser.readstream(StringIO(text, newline="\n"))


def _dump(doc) -> str:
    out = StringIO(newline="\n")
    ConfigParser.writestream(doc, out)
    return out.getvalue()


def _entries(section):
    return [(e.name, e.value, e.comment) for e in section.entries]


# --- read_complete_line ---

class TestReadCompleteLine:
    def test_lines_then_eof(self):
        buf = StringIO("abc\ndef\n")
        assert ConfigParser.read_complete_line(buf) == "abc"
        assert ConfigParser.read_complete_line(buf) == "def"
        assert ConfigParser.read_complete_line(buf) is None

    def test_last_line_without_newline(self):
        buf = StringIO("abc\ndef")
        assert ConfigParser.read_complete_line(buf) == "abc"
        assert ConfigParser.read_complete_line(buf) == "def"
        assert ConfigParser.read_complete_line(buf) is None

    def test_blank_line_is_not_eof(self):
        buf = StringIO("\nx\n")
        assert ConfigParser.read_complete_line(buf) == ""
        assert ConfigParser.read_complete_line(buf) == "x"

    def test_empty_stream(self):
        assert ConfigParser.read_complete_line(StringIO("")) is None

    def test_line_longer_than_one_read(self):
        long = "k=" + "x" * (ASSUMED_MAX_LINE_LENGTH * 3 + 7)
        buf = StringIO(long + "\nnext\n")
        assert ConfigParser.read_complete_line(buf) == long
        assert ConfigParser.read_complete_line(buf) == "next"


# --- split_comment ---

class TestSplitComment:
    def test_comment_line(self):
        assert ConfigParser.split_comment("# just a comment") == (
            None, "# just a comment")

    def test_trailing_comment_keeps_whitespace(self):
        assert ConfigParser.split_comment("Key=Val  # c") == (
            "Key=Val", "  # c")

    def test_no_comment(self):
        assert ConfigParser.split_comment("Key=Val") == ("Key=Val", "")

    def test_trailing_whitespace_goes_to_comment(self):
        assert ConfigParser.split_comment("Key=Val \t\r") == (
            "Key=Val", " \t\r")

    def test_comment_right_after_content(self):
        assert ConfigParser.split_comment("Key=a#b") == ("Key=a", "#b")

    def test_escaped_mark_is_content(self):
        assert ConfigParser.split_comment("Key=a\\#b # c") == (
            "Key=a\\#b", " # c")

    def test_escaped_mark_only(self):
        assert ConfigParser.split_comment("Key=a\\#b") == ("Key=a\\#b", "")

    def test_indented_comment_is_kept(self):
        assert ConfigParser.split_comment("   # c") == ("", "   # c")

    def test_whitespace_only(self):
        assert ConfigParser.split_comment(" \t ") == ("", " \t ")

    def test_empty(self):
        assert ConfigParser.split_comment("") == ("", "")


# --- readstream ---

class TestReadStream:
    def test_section_and_entry(self):
        doc = _parse("[SectTest]\nEntryTest=VALUE\n")
        assert doc.names() == ["SectTest"]
        assert doc.header.entries == []
        assert doc.find("SectTest", "EntryTest").value == "VALUE"

    def test_reading_order_preserved(self):
        doc = _parse("a=1\n# c\nb=2\n[S]\nx=1\ny=2\n")
        assert _entries(doc.header) == [
            ("a", "1", ""), (None, "", "# c"), ("b", "2", "")]
        assert [e.name for e in doc.find_section("S").entries] == ["x", "y"]

    def test_global_section_is_first(self):
        doc = _parse("[A]\n[B]\n")
        sections = list(doc)
        assert sections[0] is doc.header
        assert sections[0].name is None
        assert [s.name for s in sections[1:]] == ["A", "B"]

    def test_header_comment(self):
        doc = _parse("[S]  # header\n")
        assert doc.find_section("S").comment == "  # header"

    def test_header_without_closing_bracket(self):
        doc = _parse("[Broken\nk=v\n")
        assert doc.names() == ["Broken"]
        assert doc.find("Broken", "k").value == "v"

    def test_header_cut_at_last_bracket(self):
        doc = _parse("[a]b]\n")
        assert doc.names() == ["a]b"]

    def test_text_after_header_is_dropped(self):
        doc = _parse("[S]junk # c\n")
        section = doc.find_section("S")
        assert section.name == "S"
        assert section.comment == " # c"

    def test_split_on_first_equal_sign(self):
        doc = _parse("k=a=b\n")
        assert _entries(doc.header) == [("k", "a=b", "")]

    def test_no_trimming_around_equal_sign(self):
        doc = _parse("Key = Val\n")
        assert _entries(doc.header) == [("Key ", " Val", "")]
        assert doc.find(None, "Key") is None

    def test_free_text_line(self):
        doc = _parse("justtext\n")
        assert _entries(doc.header) == [(None, "justtext", "")]

    def test_escaped_mark_is_unescaped_in_value(self):
        doc = _parse("color=\\#ff0000 # red\n")
        assert _entries(doc.header) == [("color", "#ff0000", " # red")]

    def test_whitespace_line_kept_in_comment(self):
        doc = _parse("a=1\n   \t\n")
        assert _entries(doc.header) == [("a", "1", ""), (None, "", "   \t")]

    def test_blank_line_is_nameless_entry(self):
        doc = _parse("a=1\n\nb=2\n")
        assert _entries(doc.header) == [
            ("a", "1", ""), (None, "", ""), ("b", "2", "")]

    def test_duplicate_sections_kept(self):
        doc = _parse("[S]\nk=1\n[S]\nk=2\n")
        assert doc.names() == ["S", "S"]
        assert doc.find("S", "k").value == "1"

    def test_empty_stream(self):
        doc = _parse("")
        assert len(doc) == 1
        assert doc.header.entries == []


# --- round trip ---

ROUND_TRIP_SAMPLES = [
    "",
    "[SectTest]\nEntryTest=VALUE\n",
    "# just a comment\n",
    "justtext\n",
    "Global=1  # top\n\n[S]  # header\nk=v # note\nfree text\n   # indented\n",
    "crlf=1\r\n[S]\r\nk=v # c\r\n",
    "Key = Val\nesc=a\\#b # real\n",
    "a=1\n   \t\n[S]\nk=v\n",
    "blank crlf\r\n \r\n",
    "color=\\#ff0000 # red\n\\#free text\n",
]


class TestRoundTrip:
    @pytest.mark.parametrize("text", ROUND_TRIP_SAMPLES)
    def test_write_reproduces_input(self, text):
        assert _dump(_parse(text)) == text

    def test_idempotent(self):
        text = "a=1\n[S\nx = 2 # c\n#c\n   \t\n"
        once = _dump(_parse(text))
        assert _dump(_parse(once)) == once

    def test_missing_final_newline_is_added(self):
        assert _dump(_parse("a=1")) == "a=1\n"

    def test_empty_name_drops_equal_sign(self):
        assert _dump(_parse("=value\n")) == "value\n"

    def test_mark_in_value_is_escaped(self):
        doc = _parse("[S]\n")
        doc.find("S", "color", create=True).value = "#ff0000"
        text = _dump(doc)
        assert text == "[S]\ncolor=\\#ff0000\n"
        assert _parse(text).find("S", "color").value == "#ff0000"


# --- read / write on disk ---

class TestFileIO:
    def test_read_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigParser(str(tmp_path / "missing.conf")).read()

    def test_write_replaces_file(self, conf_file):
        path = conf_file("a=1 # c\n")
        parser = ConfigParser(path)
        doc = parser.read()
        doc.find(None, "a").value = "2"
        parser.write(doc)
        with open(path, "rb") as fp:
            assert fp.read() == b"a=2 # c\n"
        assert not os.path.exists(parser.tmpfilename)

    def test_tmp_name(self, conf_file):
        path = conf_file()
        assert ConfigParser(path).tmpfilename == path + ".tmp"

    def test_rename_failure(self, conf_file, monkeypatch):
        path = conf_file("a=1\n")
        parser = ConfigParser(path)
        doc = parser.read()

        def boom(*args):
            raise OSError("rename refused")

        monkeypatch.setattr("cbmconf.parser.os.rename", boom)
        with pytest.raises(ConfigWriteError):
            parser.write(doc)
        # partial work is left behind, not cleaned up.
        assert os.path.exists(parser.tmpfilename)

    def test_original_missing_on_write(self, conf_file):
        path = conf_file("a=1\n")
        parser = ConfigParser(path)
        doc = parser.read()
        os.remove(path)
        with pytest.raises(ConfigWriteError):
            parser.write(doc)
        assert os.path.exists(parser.tmpfilename)

    def test_tmp_not_writable(self, conf_file):
        path = conf_file("a=1\n")
        parser = ConfigParser(path)
        doc = parser.read()
        os.mkdir(parser.tmpfilename)
        with pytest.raises(ConfigWriteError):
            parser.write(doc)
        with open(path, "rb") as fp:
            assert fp.read() == b"a=1\n"

    def test_undecodable_file_falls_back(self, tmp_path):
        path = tmp_path / "latin.conf"
        raw = "name=café crème brûlée, déjà vu à la carte\n" * 8
        path.write_bytes(raw.encode("latin-1"))
        parser = ConfigParser(str(path), "utf-8")
        doc = parser.read()
        assert parser.encoding != "utf-8"
        assert doc.find(None, "name").value == (
            "café crème brûlée, déjà vu à la carte")
        parser.write(doc)
        assert path.read_bytes() == raw.encode("latin-1")
