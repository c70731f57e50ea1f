# -*- encoding: utf-8 -*-
# @File   : model.py
# @Time   : 2026/10/17 20:40:12

"""
Line preserving INI structure.

Unlike a plain `dict` of dicts, every line of the file is kept,
in order, including the ones which are not `key=value` pairs:

    ```ini
    # comment lines, blank lines and free text
    GlobalKey=Value       # belongs to the unnamed global section

    [Section]  # comment on the header line
    Key=Value  # comment kept verbatim on rewrite
    some free text
    ```

so that writing the document back changes nothing but
the values that got modified.
"""

from dataclasses import dataclass, field
from typing import Iterator

from .consts import (
    COMMENT_MARK,
    ESCAPE_MARK,
    PAIRING,
    SECTION_CLOSE,
    SECTION_OPEN
)

_ESCAPED_MARK = ESCAPE_MARK + COMMENT_MARK


def escape(value: str) -> str:
    """`#` -> `\\#`, so the mark is not taken as a comment on reading."""
    return value.replace(COMMENT_MARK, _ESCAPED_MARK)


def unescape(value: str) -> str:
    return value.replace(_ESCAPED_MARK, COMMENT_MARK)


# identity comparison (eq=False), two identical lines are still two entries.
@dataclass(kw_only=True, eq=False)
class ConfigEntry:
    """One line of a section.

    `name` is None if the line is no `name=value` pair at all:
    free text, a blank line, or a comment-only line.
    """
    name: str | None = None
    value: str = ''
    # everything after the content, including the delimiter
    # and the whitespace in front of it.
    comment: str = ''

    def __str__(self) -> str:
        value = escape(self.value)
        if self.name:
            return f'{self.name}{PAIRING}{value}{self.comment}'
        return f'{value}{self.comment}'


@dataclass(kw_only=True, eq=False)
class ConfigSection:
    """A `[name]` header line with the lines that follow it.

    Only the global section, which holds whatever precedes the first
    header, has `name` None.
    """
    name: str | None = None
    comment: str = ''
    entries: list[ConfigEntry] = field(default_factory=list)

    def insert_entry(
        self, entry: ConfigEntry, after: ConfigEntry | None = None
    ) -> ConfigEntry:
        """Link `entry` right after `after`, or at the head of the section
        if `after` is None."""
        if after is None:
            self.entries.insert(0, entry)
        elif self.entries and self.entries[-1] is after:
            self.entries.append(entry)
        else:
            self.entries.insert(self.entries.index(after) + 1, entry)
        return entry

    def items(self) -> Iterator[tuple[str, str]]:
        """Iterate `(name, value)` of real pairs, in file order."""
        for i in self.entries:
            if i.name is not None:
                yield i.name, i.value

    def __str__(self) -> str:
        return f'{SECTION_OPEN}{self.name}{SECTION_CLOSE}{self.comment}'


class ConfigDocument:
    """An ordered sequence of sections. The first one is always
    the unnamed global section, which is never written as a header.

    Duplicated section or entry names are kept as they are;
    lookups just return the first match.
    """
    def __init__(self) -> None:
        self.__sections: list[ConfigSection] = [ConfigSection()]

    @property
    def header(self) -> ConfigSection:
        """Lines on top of the file, not belonging to any section."""
        return self.__sections[0]

    def __iter__(self) -> Iterator[ConfigSection]:
        return iter(self.__sections)

    def __len__(self) -> int:
        return len(self.__sections)

    def __repr__(self) -> str:
        return '<ConfigDocument { .sections = %d }>' % len(self)

    def names(self) -> list[str]:
        """Names of the real sections, in file order."""
        return [i.name for i in self.__sections if i.name is not None]

    def find_section(self, name: str | None) -> ConfigSection | None:
        for i in self.__sections:
            if i.name == name:
                return i
        return None

    def add_section(
        self, name: str, comment: str = '',
        after: ConfigSection | None = None
    ) -> ConfigSection:
        """Link a new section right after `after`, or behind the last one.

        Note the global section stays first whatever `after` is.
        """
        section = ConfigSection(name=name, comment=comment)
        if after is None or after is self.__sections[-1]:
            self.__sections.append(section)
        else:
            self.__sections.insert(self.__sections.index(after) + 1, section)
        return section

    def find(
        self, section: str | None, name: str, create: bool = False
    ) -> ConfigEntry | None:
        """Look up `name` in the first section called `section`
        (None for the global one).

        With `create`, a missing section is appended behind all others,
        and a missing entry is linked after the last *named* entry of
        the section, so it won't land behind comments that most probably
        introduce the next section. A section without named entries gets
        the new one on its head.

        Returns:
            - the entry found or created.
            - `None` if not found and not asked to create it.
        """
        target = self.find_section(section)
        last_named = None
        if target is not None:
            for i in target.entries:
                if i.name is None:
                    continue
                if i.name == name:
                    return i
                last_named = i
        if not create:
            return None
        if target is None:
            target = self.add_section(section)
        return target.insert_entry(ConfigEntry(name=name), last_named)
