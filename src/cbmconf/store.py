# -*- encoding: utf-8 -*-
# @File   : store.py
# @Time   : 2026/10/17 21:37:18

"""Handle to a config file: open, look up, change, then close.

    ```python
    with ConfigStore.create('/etc/opencbm.conf') as conf:
        conf.set('plugins', 'default', 'xu1541')
        print(conf.get('plugins', 'default'))
    ```

Changes are only written back when the handle is closed (or flushed),
and only if something was actually set. No lock is taken on the file,
so two handles on the same path simply overwrite each other.
"""

import logging
from typing import Iterator

from .consts import (
    COMMENT_MARK,
    DEFAULT_ENCODING,
    PAIRING,
    SECTION_CLOSE,
    SECTION_OPEN,
    TRIM_CHARS
)
from .model import ConfigDocument, ConfigEntry
from .parser import ConfigClosedError, ConfigParser, ConfigWriteError


def _check_pair(section: str | None, entry: str, value: str) -> None:
    """Refuse what would not read back the same after a rewrite."""
    if section is not None and any(
            i in section for i in ('\n', SECTION_CLOSE, COMMENT_MARK)):
        raise ValueError(f'invalid section name: {section!r}')
    if (not entry or entry.startswith((SECTION_OPEN, COMMENT_MARK))
            or any(i in entry for i in ('\n', PAIRING, COMMENT_MARK))):
        raise ValueError(f'invalid entry name: {entry!r}')
    # trailing whitespace would end up in the comment slot.
    if '\n' in value or value[-1:] in tuple(TRIM_CHARS):
        raise ValueError(f'invalid value for "{entry}": {value!r}')


class ConfigStore:
    def __init__(self, filename: str, encoding: str | None = None) -> None:
        """Bind to `filename` without reading it.

        Usually you'd like `ConfigStore.open()` or `ConfigStore.create()`.
        """
        self._parser = ConfigParser(filename, encoding)
        self._doc: ConfigDocument | None = None
        self.changed = False

    @classmethod
    def open(
        cls, filename: str, encoding: str | None = None
    ) -> 'ConfigStore':
        """Open an existing config file.

        Raises `OSError` if it does not exist or cannot be read.
        """
        ins = cls(filename, encoding)
        ins._doc = ins._parser.read()
        return ins

    @classmethod
    def create(
        cls, filename: str, encoding: str | None = None
    ) -> 'ConfigStore':
        """Like `open()`, but an empty file is made first if there's none."""
        try:
            return cls.open(filename, encoding)
        except FileNotFoundError:
            with open(filename, 'w', encoding=encoding or DEFAULT_ENCODING):
                pass
            logging.info(f'created empty config file {filename}.')
        return cls.open(filename, encoding)

    @property
    def filename(self) -> str:
        return self._parser.filename

    @property
    def tmpfilename(self) -> str:
        """Where the file is written to before replacing the original."""
        return self._parser.tmpfilename

    @property
    def encoding(self) -> str:
        return self._parser.encoding

    @property
    def closed(self) -> bool:
        return self._doc is None

    @property
    def document(self) -> ConfigDocument:
        if self._doc is None:
            raise ConfigClosedError(f'{self.filename} is already closed.')
        return self._doc

    def find(
        self, section: str | None, entry: str, create: bool = False
    ) -> ConfigEntry | None:
        """See `ConfigDocument.find()`.

        Entries created here are empty, use `set()` to give them a value.
        """
        return self.document.find(section, entry, create)

    def get(self, section: str | None, entry: str | None) -> str | None:
        """Value of `entry` in `section` (None for the global one),
        or `None` if there's no such entry."""
        if entry is None:
            return None
        found = self.find(section, entry)
        return None if found is None else found.value

    def has(self, section: str | None, entry: str | None) -> bool:
        return entry is not None and self.find(section, entry) is not None

    def __contains__(self, key: object) -> bool:
        """`('section', 'entry') in conf`."""
        if not isinstance(key, tuple) or len(key) != 2:
            return False
        return self.has(*key)

    def set(self, section: str | None, entry: str, value: str) -> None:
        """Change the value of `entry` in `section`,
        creating either of them if needed.

        Raises `ValueError` for names or values which can't be written
        back as they are: line breaks anywhere, `]` or `#` in a section,
        `=` or `#` in an entry (or an empty one), trailing whitespace in
        a value. A `#` in a value is fine, it gets escaped.
        """
        _check_pair(section, entry, value)
        found = self.find(section, entry, create=True)
        self.changed = True
        found.value = value

    def update(self, another: ConfigDocument) -> None:
        """To merge every named entry of `another` into self."""
        for section in another:
            for name, value in section.items():
                self.set(section.name, name, value)

    def sections(self) -> list[str]:
        return self.document.names()

    def items(self, section: str | None) -> Iterator[tuple[str, str]]:
        """`(name, value)` of every entry in `section`, in file order.

        Yields nothing if the section does not exist.
        """
        target = self.document.find_section(section)
        if target is not None:
            yield from target.items()

    def flush(self) -> None:
        """Write changes back, if there are any.

        Raises `ConfigWriteError`. The in-memory state is kept either way,
        but nothing is retried: after a failure the handle stays dirty.
        """
        if not self.changed:
            return
        self._parser.write(self.document)
        self.changed = False

    def discard(self) -> None:
        """Close without writing anything back."""
        if self.changed:
            logging.info(f'dropped unsaved changes of {self.filename}.')
        self._doc = None
        self.changed = False

    def close(self) -> bool:
        """Flush (if changed) and release the handle.

        The handle is released even if flushing failed.

        Returns:
            `True` if succeed, otherwise `False`.
        """
        if self.closed:
            return True
        ok = True
        try:
            self.flush()
        except ConfigWriteError as e:
            logging.warning(f'{e}')
            ok = False
        finally:
            self._doc = None
            self.changed = False
        return ok

    def __enter__(self) -> 'ConfigStore':
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        # half done changes are not written when the block raised.
        if exc_type is not None:
            self.discard()
        else:
            self.close()

    def __str__(self) -> str:
        return self.filename

    def __repr__(self) -> str:
        state = ('closed' if self.closed
                 else 'changed' if self.changed else 'clean')
        return f'<ConfigStore {self.filename!r} ({state})>'


def open_config(
    filename: str, encoding: str | None = None
) -> ConfigStore | None:
    """Open an existing config file.

    Hint:
        If the file is NOT FOUND, or NOT READABLE, a warning is logged
        and `None` will be returned.
        Call `ConfigStore.open()` to handle the `OSError` yourself.
    """
    try:
        return ConfigStore.open(filename, encoding)
    except OSError as e:
        logging.warning(f'unable to open config file: {e}')
        return None


def create_config(
    filename: str, encoding: str | None = None
) -> ConfigStore | None:
    """Open a config file, creating an empty one if it is missing.

    Returns `None` (and logs a warning) if that fails.
    """
    try:
        return ConfigStore.create(filename, encoding)
    except OSError as e:
        logging.warning(f'unable to create config file: {e}')
        return None
