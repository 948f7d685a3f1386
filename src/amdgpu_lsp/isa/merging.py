"""
Merging Logic for the ISA Database.

Combines the raw instructions of many vendor files into one canonical list.
The merge key is the mnemonic, compared byte-exactly.

Resolution policy:
- The first file that declares a mnemonic fixes its operand columns and its
  encoding set, on the assumption that operand layout is stable across
  architectures.
- Later files only add their architecture tag and their encodings (set union).
- The description is the first non-empty one encountered.

Which file is "first" is decided by the caller's scan order, which
`collect_spec_files` makes lexicographic by filename.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from amdgpu_lsp.importers.isa_xml_reader import RawInstruction, SpecFile
from amdgpu_lsp.isa.architecture import normalize_architecture
from amdgpu_lsp.isa.schema import Instruction

logger = logging.getLogger(__name__)


@dataclass
class _MergedEntry:
  name: str
  description: Optional[str]
  args: List[str]
  arg_types: List[str]
  arg_data_types: List[str]
  architectures: Set[str] = field(default_factory=set)
  encodings: Set[str] = field(default_factory=set)
  origin: str = ""


class InstructionMerger:
  """
  Accumulates per-file instructions into canonical `Instruction` records.
  """

  def __init__(self) -> None:
    self._entries: Dict[str, _MergedEntry] = {}

  def __len__(self) -> int:
    return len(self._entries)

  def add_file(self, spec: SpecFile) -> None:
    """
    Merges every instruction of a parsed file.

    Args:
        spec (SpecFile): A parsed vendor file; its label is normalized here.
    """
    tag = normalize_architecture(spec.architecture)
    for raw in spec.instructions:
      self.add(raw, tag, origin=spec.path.name)

  def add(self, raw: RawInstruction, architecture: str, origin: str = "") -> None:
    """
    Merges a single raw instruction tagged with a normalized architecture.

    Args:
        raw (RawInstruction): The instruction as declared in one file.
        architecture (str): The file's normalized architecture tag.
        origin (str): Source filename, kept for debug traces.
    """
    existing = self._entries.get(raw.name)
    if existing is None:
      self._entries[raw.name] = _MergedEntry(
        name=raw.name,
        description=raw.description or None,
        args=list(raw.args),
        arg_types=list(raw.arg_types),
        arg_data_types=list(raw.arg_data_types),
        architectures={architecture},
        encodings=set(raw.encoding_names),
        origin=origin,
      )
      return

    existing.architectures.add(architecture)
    existing.encodings.update(raw.encoding_names)
    if not existing.description and raw.description:
      existing.description = raw.description

    if raw.args != existing.args:
      logger.debug(
        "%s: operands from %s differ from %s; keeping the first",
        raw.name,
        origin,
        existing.origin,
      )

  def instructions(self) -> List[Instruction]:
    """
    Materializes the merged records in first-seen order.

    Returns:
        List[Instruction]: Validated records with sorted architecture and encoding lists.
    """
    return [
      Instruction(
        name=entry.name,
        architectures=sorted(entry.architectures),
        description=entry.description,
        args=entry.args,
        arg_types=entry.arg_types,
        arg_data_types=entry.arg_data_types,
        available_encodings=sorted(entry.encodings),
      )
      for entry in self._entries.values()
    ]
