"""
Open Document Tracking.

Each open editor buffer is a frozen `Document`. Every lifecycle event builds a
new `Document` from the full text (labels and branch references included) and
swaps it into the store, so a reader holding a `Document` never observes a
half-applied edit.

Lifecycle per URI: ``Unopened -> Open -> Closed``. A change for a URI that was
never opened opens it; a change carrying an older version than the stored one
is dropped.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, NamedTuple, Optional, Sequence, Tuple

from amdgpu_lsp.server.text import index_to_utf16, is_label_name, label_definition_name, line_at, split_lines, tokenize
from amdgpu_lsp.utils.console import log_warning

logger = logging.getLogger(__name__)

LabelPositions = Callable[[str], Sequence[int]]


class LabelDefinition(NamedTuple):
  """Where a ``name:`` label is defined (UTF-16 columns)."""

  name: str
  line: int
  start: int
  end: int


class LabelReference(NamedTuple):
  """A branch operand naming a label (UTF-16 columns)."""

  label: str
  line: int
  start: int
  end: int

  def contains(self, line: int, character: int) -> bool:
    """True when a cursor at ``(line, character)`` touches this span."""
    return line == self.line and self.start <= character <= self.end


def _no_label_operands(mnemonic: str) -> Sequence[int]:
  return ()


def scan_labels(
  text: str, branch_label_positions: LabelPositions = _no_label_operands
) -> Tuple[Dict[str, LabelDefinition], List[LabelReference]]:
  """
  Extracts label definitions and branch references in one pass over the text.

  Per line, after dropping the comment:

  - a leading ``name:`` token defines ``name`` (the first definition wins);
  - the next token is the mnemonic; for every operand position that
    ``branch_label_positions`` reports as label-typed, the operand token at
    that position is recorded as a reference.

  Args:
      text (str): Full document text.
      branch_label_positions (LabelPositions): Maps a mnemonic to the indices
          of its label-typed operands.

  Returns:
      Tuple[Dict[str, LabelDefinition], List[LabelReference]]: Definitions by
      name, and references in document order.
  """
  labels: Dict[str, LabelDefinition] = {}
  references: List[LabelReference] = []

  for line_no, line in enumerate(split_lines(text)):
    tokens = tokenize(line)
    if not tokens:
      continue

    name = label_definition_name(tokens[0])
    if name is not None:
      first = tokens.pop(0)
      if name not in labels:
        start = index_to_utf16(line, first.start)
        end = index_to_utf16(line, first.start + len(name))
        labels[name] = LabelDefinition(name, line_no, start, end)
      if not tokens:
        continue

    mnemonic, operands = tokens[0], tokens[1:]
    for position in branch_label_positions(mnemonic.text):
      if position >= len(operands):
        continue
      operand = operands[position]
      if is_label_name(operand.text):
        references.append(
          LabelReference(
            operand.text,
            line_no,
            index_to_utf16(line, operand.start),
            index_to_utf16(line, operand.end),
          )
        )

  return labels, references


@dataclass(frozen=True)
class Document:
  """
  Immutable state of one open buffer.

  Attributes:
      uri (str): Document URI.
      text (str): Full current text.
      version (Optional[int]): Editor version counter.
      language_id (str): Editor language id (e.g. ``rdna3``).
      labels (Mapping[str, LabelDefinition]): Label definitions by name.
      references (Tuple[LabelReference, ...]): Branch operands naming labels.
  """

  uri: str
  text: str
  version: Optional[int] = None
  language_id: str = ""
  labels: Mapping[str, LabelDefinition] = field(default_factory=dict)
  references: Tuple[LabelReference, ...] = ()

  def line(self, number: int) -> Optional[str]:
    """
    Returns:
        Optional[str]: Text of a zero-based line, or None when out of range.
    """
    return line_at(self.text, number)

  def reference_at(self, line: int, character: int) -> Optional[LabelReference]:
    """
    Returns:
        Optional[LabelReference]: The branch reference under a cursor, if any.
    """
    for reference in self.references:
      if reference.contains(line, character):
        return reference
    return None


class DocumentStore:
  """
  Thread-safe registry of open documents keyed by URI.
  """

  def __init__(self, branch_label_positions: LabelPositions = _no_label_operands) -> None:
    """
    Args:
        branch_label_positions (LabelPositions): Resolver for label-typed
            operand positions, usually `InstructionIndex.label_operand_positions`.
    """
    self._docs: Dict[str, Document] = {}
    self._lock = threading.RLock()
    self._label_positions = branch_label_positions

  def __len__(self) -> int:
    with self._lock:
      return len(self._docs)

  def __contains__(self, uri: object) -> bool:
    with self._lock:
      return uri in self._docs

  def _build(self, uri: str, text: str, version: Optional[int], language_id: str) -> Document:
    labels, references = scan_labels(text, self._label_positions)
    return Document(
      uri=uri,
      text=text,
      version=version,
      language_id=language_id,
      labels=labels,
      references=tuple(references),
    )

  def open(self, uri: str, text: str, version: Optional[int] = None, language_id: str = "") -> Document:
    """
    Registers (or re-registers) a document.

    Args:
        uri (str): Document URI.
        text (str): Full text.
        version (Optional[int]): Editor version counter.
        language_id (str): Editor language id.

    Returns:
        Document: The stored document.
    """
    with self._lock:
      doc = self._build(uri, text, version, language_id)
      self._docs[uri] = doc
      logger.debug("open %s (language: %s, %d labels)", uri, language_id, len(doc.labels))
      return doc

  def change(self, uri: str, text: str, version: Optional[int] = None) -> Document:
    """
    Replaces a document's full text.

    Args:
        uri (str): Document URI.
        text (str): New full text.
        version (Optional[int]): Editor version counter.

    Returns:
        Document: The stored document; unchanged when ``version`` is stale.
    """
    with self._lock:
      current = self._docs.get(uri)
      if current is None:
        return self.open(uri, text, version)

      if version is not None and current.version is not None and version < current.version:
        log_warning(f"Ignoring stale change for {uri} (version {version} < {current.version})")
        return current

      doc = self._build(uri, text, version, current.language_id)
      self._docs[uri] = doc
      return doc

  def close(self, uri: str) -> None:
    """Discards a document; unknown URIs are ignored."""
    with self._lock:
      self._docs.pop(uri, None)

  def get(self, uri: str) -> Optional[Document]:
    """
    Returns:
        Optional[Document]: The current document, or None when not open.
    """
    with self._lock:
      return self._docs.get(uri)
