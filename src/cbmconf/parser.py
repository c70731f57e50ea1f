# -*- encoding: utf-8 -*-
# @File   : parser.py
# @Time   : 2026/10/17 21:04:45

"""Reads and rewrites line preserving INI files.

    ```ini
    [SectionName]  # comment
    EntryName=Value  # comment
    FreeText  # no `=`, kept as a name-less entry
    # whole line comment
    ```

Rules worth knowing:
1. Nothing is trimmed but the whitespace in front of a comment
(or at the end of a line), and even that one is kept in the comment
slot, thus a file ending with a newline is rewritten byte by byte.
2. `Key = Value` is NOT `Key=Value`: the name is `'Key '`.
3. A `#` right after a backslash does not start a comment. The backslash
is dropped from the value when reading, and put back when writing.
4. A header without `]` is taken up to the end of its content.

Files are rewritten to `<name>.tmp` first, then the original is removed
and the temporary file renamed in its place.
"""

import logging
import os
from io import StringIO, TextIOBase

import chardet

from .abstract import FileHandler
from .consts import (
    ASSUMED_MAX_LINE_LENGTH,
    CHARDET_MIN_CONFIDENCE,
    COMMENT_MARK,
    DEFAULT_ENCODING,
    ESCAPE_MARK,
    FALLBACK_ENCODING,
    PAIRING,
    SECTION_CLOSE,
    SECTION_OPEN,
    TMP_SUFFIX,
    TRIM_CHARS,
)
from .model import ConfigDocument, ConfigEntry, unescape


class ConfigError(Exception):
    """Base class of errors raised by `cbmconf`."""
    pass


class ConfigWriteError(ConfigError):
    """To record failures when flushing a config file."""
    pass


class ConfigClosedError(ConfigError):
    pass


class ConfigParser(FileHandler[ConfigDocument]):
    """Note `encoding` may differ from what was asked for
    if the file turned out to be encoded otherwise, see `read()`."""

    @property
    def tmpfilename(self) -> str:
        return self._fn + TMP_SUFFIX

    @staticmethod
    def read_complete_line(fp: TextIOBase) -> str | None:
        """Read up to (and drop) the next newline, in pieces of
        `ASSUMED_MAX_LINE_LENGTH` at most.

        Returns `None` on EOF, while an empty line gives `''`.
        """
        buffer = None
        while chunk := fp.readline(ASSUMED_MAX_LINE_LENGTH):
            buffer = chunk if buffer is None else buffer + chunk
            if buffer.endswith('\n'):
                return buffer[:-1]
        return buffer

    @staticmethod
    def find_comment(line: str) -> int:
        """Index of the first unescaped `#`, or `len(line)` if there's none."""
        pos = line.find(COMMENT_MARK)
        while pos > 0 and line[pos - 1] == ESCAPE_MARK:
            pos = line.find(COMMENT_MARK, pos + 1)
        return len(line) if pos < 0 else pos

    @staticmethod
    def split_comment(line: str) -> tuple[str | None, str]:
        """Split a line into its content and its (verbatim) comment.

        - `'# text'` -> `(None, '# text')`, a comment line has no content.
        - `'Key=Val  # c'` -> `('Key=Val', '  # c')`
        - `'Key=Val \\r'` -> `('Key=Val', ' \\r')`
        - `'   # c'` -> `('', '   # c')`
        - `' \\t'` -> `('', ' \\t')`
        """
        if line.startswith(COMMENT_MARK):
            return None, line
        end = ConfigParser.find_comment(line)
        while end > 0 and line[end - 1] in TRIM_CHARS:
            end -= 1
        return line[:end], line[end:]

    @staticmethod
    def readline(fp: TextIOBase) -> tuple[str | None, str] | None:
        """`(content, comment)` of the next line, `None` on EOF."""
        line = ConfigParser.read_complete_line(fp)
        if line is None:
            return None
        return ConfigParser.split_comment(line)

    @staticmethod
    def readstream(buf: TextIOBase) -> ConfigDocument:
        """Parse an already decoded stream, from its very beginning.

        If there is no special need, just call `self.read()`.
        """
        ret = ConfigDocument()
        buf.seek(0)
        section = ret.header
        previous: ConfigEntry | None = None
        while (parsed := ConfigParser.readline(buf)) is not None:
            content, comment = parsed
            if content is not None and content.startswith(SECTION_OPEN):
                name = content[1:]
                end = name.rfind(SECTION_CLOSE)
                if end < 0:
                    logging.debug(f'header without "{SECTION_CLOSE}": '
                                  f'{content}')
                else:
                    name = name[:end]
                section = ret.add_section(name, comment, section)
                # entries of the new section start on its head,
                # not behind the last entry of the previous one.
                previous = None
                continue

            if content is None:
                name, value = None, ''
            elif PAIRING in content:
                name, value = content.split(PAIRING, 1)
            else:
                name, value = None, content
            previous = section.insert_entry(
                ConfigEntry(name=name, value=unescape(value),
                            comment=comment),
                previous)
        return ret

    def _decode_file(self) -> StringIO:
        with open(self._fn, 'rb') as fp:
            raw = fp.read()

        codec = chardet.detect(raw)
        if (codec['encoding'] is None
                or codec['confidence'] < CHARDET_MIN_CONFIDENCE):
            codec = {'encoding': DEFAULT_ENCODING}

        # fallbacks
        try:
            buf = raw.decode(codec['encoding'])
        except (UnicodeDecodeError, LookupError):
            codec = {'encoding': FALLBACK_ENCODING}
            buf = raw.decode(codec['encoding'])
        logging.warning(f'{self._fn} is not {self._codec} encoded, '
                        f'read as {codec["encoding"]} instead.')
        self._codec = codec['encoding']
        return StringIO(buf, newline='\n')

    def read(self) -> ConfigDocument:
        """Read the file this parser is bound to.

        Raises `OSError` if it is missing or unreadable.
        """
        try:
            # `newline='\n'`: keep CRs, they end up in the comment slot.
            with open(self._fn, 'r', encoding=self._codec,
                      newline='\n') as fp:
                return self.readstream(fp)
        except UnicodeDecodeError:
            return self.readstream(self._decode_file())

    @staticmethod
    def writestream(instance: ConfigDocument, fp: TextIOBase) -> None:
        for section in instance:
            # the global section has no header line.
            if section is not instance.header:
                fp.write(f'{section}\n')
            for entry in section.entries:
                fp.write(f'{entry}\n')

    def write(self, instance: ConfigDocument) -> None:
        """Write to `<filename>.tmp`, then replace the original with it.

        CAUTIONS:
            - the original file has to exist, as it gets removed first.
            - on failure the temporary file is left as it is.

        Raises `ConfigWriteError`.
        """
        tmpfile = self.tmpfilename
        try:
            with open(tmpfile, 'w', encoding=self._codec,
                      newline='\n') as fp:
                self.writestream(instance, fp)
        except (OSError, UnicodeEncodeError) as e:
            raise ConfigWriteError(f'failed writing {tmpfile}: {e}') from e

        try:
            os.remove(self._fn)
            os.rename(tmpfile, self._fn)
        except OSError as e:
            raise ConfigWriteError(
                f'failed replacing {self._fn} with {tmpfile}: {e}') from e
        logging.debug(f'{self._fn} rewritten.')

    def __str__(self) -> str:
        return 'config file: ' + super().__str__()
