"""
Special-Register Compiler.

Turns the raw ``<PredefinedValue>`` rows of RDNA specification files into
the compact `SpecialRegisters` representation of the snapshot.

Pipeline:
1.  **Filter**: numeric literals and plain ``sN`` / ``vN`` registers are not
    special and are dropped.
2.  **Normalize**: names are lowercased; placeholder text ("See above.") is
    discarded; a fixed table of core register descriptions (EXEC, VCC, SCC,
    PC, FLAT_SCRATCH) replaces whatever the vendor wrote.
3.  **Deduplicate**: the same name seen in several rows keeps its longest
    description.
4.  **Compress**: for the indexable prefixes (``attr``, ``param``, ``mrt``,
    ``pos``, ``ttmp``) every contiguous run of 3 or more indices becomes a
    range with a majority description and sparse overrides.

Compression never changes what a register resolves to: `expand_range` gives
back exactly the singles that were folded into a range.
"""

import re
from collections import Counter
from typing import Dict, Iterable, List, Optional, Tuple

from amdgpu_lsp.importers.isa_xml_reader import RawRegister
from amdgpu_lsp.isa.schema import (
  MIN_RANGE_COUNT,
  RangeOverride,
  SpecialRegisterRange,
  SpecialRegisters,
  SpecialRegisterSingle,
)

COMPRESSIBLE_PREFIXES = ("attr", "param", "mrt", "pos", "ttmp")

CORE_REGISTER_DESCRIPTIONS: Dict[str, str] = {
  "exec": "Wavefront execution mask (64-bit). Each bit enables a lane.",
  "exec_lo": "Lower 32 bits of EXEC (lane execution mask).",
  "exec_hi": "Upper 32 bits of EXEC (lane execution mask).",
  "scc": "Scalar condition code (single-bit compare result).",
  "src_scc": "Scalar condition code (single-bit compare result).",
  "vcc": "Vector condition code register (64-bit). Per-lane compare results.",
  "vcc_lo": "Lower 32 bits of VCC (vector condition codes).",
  "vcc_hi": "Upper 32 bits of VCC (vector condition codes).",
  "pc": "Program counter (64-bit).",
  "flat_scratch": "Flat scratch base/size pair (64-bit).",
  "flat_scratch_lo": "Lower 32 bits of FLAT_SCRATCH (base/size).",
  "flat_scratch_hi": "Upper 32 bits of FLAT_SCRATCH (base/size).",
}

_PLAIN_GPR_RE = re.compile(r"[sv]\d+")
_INDEXED_NAME_RE = re.compile(r"([a-z_]+?)(0|[1-9]\d*)")
_PLACEHOLDERS = {"see above", "see above."}
_TAG_RE = re.compile(r"<[^>]+>")


def is_numeric_literal(name: str) -> bool:
  """True for names such as ``0``, ``-1`` or ``0.5``."""
  try:
    float(name)
  except ValueError:
    return False
  return True


def is_ignored_register(name: str) -> bool:
  """
  Checks whether a predefined value is not a special register.

  Args:
      name (str): The raw register name.

  Returns:
      bool: True for numeric literals and plain ``sN`` / ``vN`` registers.
  """
  lowered = name.strip().lower()
  return bool(_PLAIN_GPR_RE.fullmatch(lowered)) or is_numeric_literal(lowered)


def is_placeholder(description: Optional[str]) -> bool:
  """
  Detects vendor placeholder text that carries no documentation.

  Args:
      description (Optional[str]): Raw description, possibly HTML (``<p>See above.</p>``).

  Returns:
      bool: True for "See above" markers.
  """
  if description is None:
    return False
  text = _TAG_RE.sub("", description).strip().lower()
  return text in _PLACEHOLDERS


def split_indexed_name(name: str) -> Optional[Tuple[str, int]]:
  """
  Splits ``attr12`` into ``("attr", 12)``.

  Returns:
      Optional[Tuple[str, int]]: Prefix and index, or None when the name does
      not end in a number preceded by a letter prefix. Zero-padded indices
      (``attr01``) are not split, so they stay singles.
  """
  match = _INDEXED_NAME_RE.fullmatch(name)
  if not match:
    return None
  return match.group(1), int(match.group(2))


def expand_range(reg_range: SpecialRegisterRange) -> List[SpecialRegisterSingle]:
  """
  Reverses compression for one range.

  Args:
      reg_range (SpecialRegisterRange): A compressed run.

  Returns:
      List[SpecialRegisterSingle]: One single per index, in index order.
  """
  overrides = reg_range.override_map()
  return [
    SpecialRegisterSingle(name=f"{reg_range.prefix}{index}", description=overrides.get(index, reg_range.description))
    for index in range(reg_range.start, reg_range.end)
  ]


def _contiguous_runs(items: List[Tuple[int, str]]) -> List[List[Tuple[int, str]]]:
  runs: List[List[Tuple[int, str]]] = []
  for index, description in items:
    if runs and runs[-1][-1][0] + 1 == index:
      runs[-1].append((index, description))
    else:
      runs.append([(index, description)])
  return runs


def _majority_description(run: List[Tuple[int, str]]) -> str:
  counts = Counter(description for _, description in run)
  top = max(counts.values())
  # Ties resolve to the text of the lowest index.
  return next(description for _, description in run if counts[description] == top)


class SpecialRegisterCompiler:
  """
  Collects RDNA register rows and compiles them into singles and ranges.
  """

  def __init__(self) -> None:
    self._by_name: Dict[str, str] = {}

  def __len__(self) -> int:
    return len(self._by_name)

  def add(self, registers: Iterable[RawRegister]) -> None:
    """
    Filters, normalizes and deduplicates raw register rows.

    Args:
        registers (Iterable[RawRegister]): Rows from one or more RDNA files.
    """
    for reg in registers:
      name = reg.name.strip().lower()
      if not name or is_ignored_register(name):
        continue

      description = CORE_REGISTER_DESCRIPTIONS.get(name)
      if description is None:
        raw = (reg.description or "").strip()
        if not raw or is_placeholder(raw):
          continue
        description = raw

      current = self._by_name.get(name)
      if current is None or len(description) > len(current):
        self._by_name[name] = description

  def singles(self) -> List[SpecialRegisterSingle]:
    """
    Returns:
        List[SpecialRegisterSingle]: Every collected register, uncompressed, sorted by name.
    """
    return [SpecialRegisterSingle(name=n, description=d) for n, d in sorted(self._by_name.items())]

  def compile(self) -> SpecialRegisters:
    """
    Compresses the collected registers.

    Returns:
        SpecialRegisters: Singles sorted by name, ranges sorted by prefix and start.
    """
    groups: Dict[str, List[Tuple[int, str]]] = {}
    singles: List[SpecialRegisterSingle] = []

    for name, description in self._by_name.items():
      split = split_indexed_name(name)
      if split is not None and split[0] in COMPRESSIBLE_PREFIXES:
        groups.setdefault(split[0], []).append((split[1], description))
      else:
        singles.append(SpecialRegisterSingle(name=name, description=description))

    ranges: List[SpecialRegisterRange] = []
    for prefix, items in groups.items():
      items.sort()
      for run in _contiguous_runs(items):
        if len(run) < MIN_RANGE_COUNT:
          singles.extend(SpecialRegisterSingle(name=f"{prefix}{i}", description=d) for i, d in run)
          continue

        default = _majority_description(run)
        ranges.append(
          SpecialRegisterRange(
            prefix=prefix,
            start=run[0][0],
            count=len(run),
            description=default,
            overrides=[RangeOverride(index=i, description=d) for i, d in run if d != default],
          )
        )

    singles.sort(key=lambda s: s.name)
    ranges.sort(key=lambda r: (r.prefix, r.start))
    return SpecialRegisters(singles=singles, ranges=ranges)
