"""
Line and Token Utilities.

Editors address text in zero-based lines and UTF-16 code-unit columns, while
Python strings index code points. Everything here works on a single line in
Python indices, and the helpers `utf16_to_index` / `index_to_utf16` convert
at the protocol boundary.

Assembly lines are split into tokens on whitespace and commas. Comments start
at ``;`` or ``//`` and run to the end of the line.
"""

import re
from typing import List, NamedTuple, Optional

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")
_TOKEN_RE = re.compile(r"[^\s,]+")
_LABEL_NAME_RE = re.compile(r"[A-Za-z_.$][A-Za-z0-9_.$]*")
_WORD_CHARS = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_")


class Token(NamedTuple):
  """A token of one line; ``start`` / ``end`` are Python string indices."""

  text: str
  start: int
  end: int


def split_lines(text: str) -> List[str]:
  """
  Splits text on LSP line terminators (``\\n``, ``\\r\\n``, ``\\r``).

  Unlike `str.splitlines`, form feeds and other Unicode separators do not
  start a new line, and a trailing newline yields a final empty line.
  """
  return _LINE_BREAK_RE.split(text)


def line_at(text: str, line: int) -> Optional[str]:
  """
  Returns:
      Optional[str]: The requested line, or None when out of range.
  """
  if line < 0:
    return None
  lines = split_lines(text)
  if line >= len(lines):
    return None
  return lines[line]


def _utf16_width(char: str) -> int:
  return 2 if ord(char) > 0xFFFF else 1


def utf16_to_index(line: str, character: int) -> int:
  """
  Converts a UTF-16 column into a Python index of ``line``.

  Columns past the end of the line clamp to ``len(line)``. A column in the
  middle of a surrogate pair resolves to the following code point.
  """
  units = 0
  for index, char in enumerate(line):
    if units >= character:
      return index
    units += _utf16_width(char)
  return len(line)


def index_to_utf16(line: str, index: int) -> int:
  """Converts a Python index of ``line`` into a UTF-16 column."""
  return sum(_utf16_width(char) for char in line[:index])


def comment_start(line: str) -> int:
  """
  Returns:
      int: Index where the comment of ``line`` begins, or ``len(line)``.
  """
  candidates = [pos for pos in (line.find(";"), line.find("//")) if pos >= 0]
  return min(candidates) if candidates else len(line)


def tokenize(line: str) -> List[Token]:
  """
  Splits the code part of a line into whitespace/comma-delimited tokens.

  Args:
      line (str): A single line of assembly.

  Returns:
      List[Token]: Tokens left of any comment, in order.
  """
  code = line[: comment_start(line)]
  return [Token(m.group(0), m.start(), m.end()) for m in _TOKEN_RE.finditer(code)]


def token_at(line: str, index: int) -> Optional[Token]:
  """
  Finds the token under a cursor.

  A cursor directly after the last character of a token still selects it.

  Args:
      line (str): The line text.
      index (int): Cursor position as a Python index.

  Returns:
      Optional[Token]: The token, or None on whitespace, commas or comments.
  """
  for token in tokenize(line):
    if token.start <= index <= token.end:
      return token
  return None


def word_prefix_at(line: str, index: int) -> Optional[Token]:
  """
  Extracts the identifier characters immediately left of the cursor.

  Args:
      line (str): The line text.
      index (int): Cursor position as a Python index.

  Returns:
      Optional[Token]: The prefix (``end == index``), or None when the
      cursor follows no identifier or sits inside a comment.
  """
  if index > comment_start(line):
    return None
  start = index
  while start > 0 and line[start - 1] in _WORD_CHARS:
    start -= 1
  if start == index:
    return None
  return Token(line[start:index], start, index)


def is_label_name(text: str) -> bool:
  """True when ``text`` is a valid assembly label (``loop``, ``.LBB0_1``, ``$tmp``)."""
  return bool(_LABEL_NAME_RE.fullmatch(text))


def label_definition_name(token: Token) -> Optional[str]:
  """
  Returns:
      Optional[str]: The label defined by a ``name:`` token, if it is one.
  """
  if not token.text.endswith(":"):
    return None
  name = token.text[:-1]
  return name if is_label_name(name) else None
