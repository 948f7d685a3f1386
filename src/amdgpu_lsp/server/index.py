"""
In-Memory Instruction Index.

Built once from a loaded `Snapshot` and read-only afterwards.

Mnemonics are keyed lowercase in a sorted list, so a prefix query is one
binary search (`bisect`) for the first candidate followed by a walk over the
matching slice.
Special registers are resolved from the compressed singles and ranges without
expanding them.
"""

from bisect import bisect_left
from typing import Dict, Iterator, List, Optional

from amdgpu_lsp.enums import ArgType
from amdgpu_lsp.isa.architecture import matches_architecture
from amdgpu_lsp.isa.registers import expand_range, split_indexed_name
from amdgpu_lsp.isa.schema import Instruction, Snapshot, SpecialRegisterRange
from amdgpu_lsp.server.encodings import split_encoding_variant


class PrefixMatches:
  """
  Lazy view of the instructions whose mnemonic starts with a prefix.

  Iterating walks the index afresh, so the view can be iterated any number of
  times. Results are ordered by lowercase mnemonic.
  """

  def __init__(self, index: "InstructionIndex", prefix: str, architecture: Optional[str] = None) -> None:
    self._index = index
    self.prefix = prefix.lower()
    self.architecture = architecture

  def __iter__(self) -> Iterator[Instruction]:
    keys = self._index._keys
    position = bisect_left(keys, self.prefix)
    while position < len(keys) and keys[position].startswith(self.prefix):
      for instruction in self._index._by_key[keys[position]]:
        if matches_architecture(instruction.architectures, self.architecture):
          yield instruction
      position += 1

  def __repr__(self) -> str:
    return f"PrefixMatches(prefix={self.prefix!r}, architecture={self.architecture!r})"


class InstructionIndex:
  """
  Lookup structures over an immutable snapshot.
  """

  def __init__(self, snapshot: Snapshot) -> None:
    """
    Args:
        snapshot (Snapshot): The validated ISA database.
    """
    self.snapshot = snapshot
    self._by_key: Dict[str, List[Instruction]] = {}
    for instruction in snapshot.instructions:
      self._by_key.setdefault(instruction.name.lower(), []).append(instruction)
    self._keys: List[str] = sorted(self._by_key)

    registers = snapshot.special_registers
    self._singles: Dict[str, str] = {single.name.lower(): single.description for single in registers.singles}
    self._ranges: Dict[str, List[SpecialRegisterRange]] = {}
    for reg_range in registers.ranges:
      self._ranges.setdefault(reg_range.prefix, []).append(reg_range)

  def __len__(self) -> int:
    return len(self.snapshot.instructions)

  def __contains__(self, name: object) -> bool:
    return isinstance(name, str) and name.lower() in self._by_key

  def by_prefix(self, text: str, architecture: Optional[str] = None) -> PrefixMatches:
    """
    Returns the instructions whose mnemonic starts with ``text``.

    Args:
        text (str): Case-insensitive prefix.
        architecture (Optional[str]): Normalized architecture filter.

    Returns:
        PrefixMatches: A lazy, restartable view ordered by mnemonic.
    """
    return PrefixMatches(self, text, architecture)

  def by_exact_name(self, name: str, architecture: Optional[str] = None) -> Optional[Instruction]:
    """
    Looks up an instruction by mnemonic, ignoring case.

    Args:
        name (str): The mnemonic.
        architecture (Optional[str]): When given, only an instruction available
            for this architecture is returned.

    Returns:
        Optional[Instruction]: The record, or None.
    """
    for instruction in self._by_key.get(name.lower(), []):
      if matches_architecture(instruction.architectures, architecture):
        return instruction
    return None

  def label_operand_positions(self, mnemonic: str) -> List[int]:
    """
    Operand positions that hold a branch target for a mnemonic.

    Encoding suffixes are ignored (``s_cbranch_scc0_e32`` resolves like
    ``s_cbranch_scc0``).

    Returns:
        List[int]: Indices into the operand list; empty for unknown mnemonics.
    """
    instruction = self.by_exact_name(mnemonic)
    if instruction is None:
      instruction = self.by_exact_name(split_encoding_variant(mnemonic).base)
    if instruction is None:
      return []
    return [position for position, arg_type in enumerate(instruction.arg_types) if arg_type == ArgType.LABEL]

  def special_register_by_name(self, name: str) -> Optional[str]:
    """
    Resolves the documentation of a special register.

    Singles are consulted first, then range membership (override text when
    present, else the range default).

    Args:
        name (str): Register name, any case (e.g. ``"ATTR7"``).

    Returns:
        Optional[str]: The description, or None if unknown.
    """
    key = name.lower()
    if key in self._singles:
      return self._singles[key]

    split = split_indexed_name(key)
    if split is None:
      return None
    prefix, index = split
    for reg_range in self._ranges.get(prefix, []):
      if index in reg_range:
        return reg_range.description_for(index)
    return None

  def special_register_names(self) -> List[str]:
    """
    Returns:
        List[str]: Every resolvable register name, ranges expanded, sorted.
    """
    names = set(self._singles)
    for ranges in self._ranges.values():
      names.update(single.name for reg_range in ranges for single in expand_range(reg_range))
    return sorted(names)

  def architectures(self) -> List[str]:
    """
    Returns:
        List[str]: Every architecture tag present in the database, sorted.
    """
    return sorted({tag for instruction in self.snapshot.instructions for tag in instruction.architectures})
