# -*- encoding: utf-8 -*-
# @File   : consts.py
# @Time   : 2026/10/17 20:31:06

# appended to the config path while rewriting it.
TMP_SUFFIX = '.tmp'

COMMENT_MARK = '#'
ESCAPE_MARK = '\\'
SECTION_OPEN = '['
SECTION_CLOSE = ']'
PAIRING = '='

# stripped from the right of a line's content, kept in its comment.
TRIM_CHARS = ' \t\r\n'

# size of a single read; longer lines are put together from several.
ASSUMED_MAX_LINE_LENGTH = 256

DEFAULT_ENCODING = 'utf-8'
# byte transparent, so it never fails to decode.
FALLBACK_ENCODING = 'latin-1'
CHARDET_MIN_CONFIDENCE = 0.8
