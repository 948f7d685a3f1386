"""
Pydantic Schemas for the ISA Database Snapshot.

This module defines the shape of ``isa.json``, the artifact written by the
offline build and loaded read-only by the language server:

.. code-block:: text

    {
      "instructions": [Instruction, ...],
      "special_registers": {"singles": [...], "ranges": [...]}
    }

Every invariant the feature engine relies on is checked here, at the
(de)serialization boundary:

- The ``args`` / ``arg_types`` / ``arg_data_types`` columns are index-aligned.
- Instruction names are unique.
- Register ranges span at least 3 indices, their overrides lie inside the
  range, and ranges sharing a prefix do not overlap.

All models are frozen: a loaded snapshot cannot be mutated at serve time.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from amdgpu_lsp.enums import ArgType

MIN_RANGE_COUNT = 3


class Instruction(BaseModel):
  """
  Canonical, merged record of one mnemonic.
  """

  model_config = ConfigDict(frozen=True, extra="forbid")

  name: str = Field(..., min_length=1, description="Mnemonic as first seen in the vendor files (merge key).")
  architectures: List[str] = Field(default_factory=list, description="Sorted normalized architecture tags.")
  description: Optional[str] = Field(None, description="Free text; first non-empty variant wins.")
  args: List[str] = Field(default_factory=list, description="Operand names of the first encoding.")
  arg_types: List[ArgType] = Field(default_factory=list, description="Display class per operand.")
  arg_data_types: List[str] = Field(default_factory=list, description="Raw data format per operand.")
  available_encodings: List[str] = Field(default_factory=list, description="Sorted encoding names.")

  @field_validator("architectures", "available_encodings")
  @classmethod
  def sorted_unique(cls, v: List[str]) -> List[str]:
    """
    Canonicalizes set-valued fields to sorted, duplicate-free lists.

    Args:
        v (List[str]): The raw list.

    Returns:
        List[str]: Sorted unique values.
    """
    return sorted(set(v))

  @model_validator(mode="after")
  def check_alignment(self) -> "Instruction":
    """
    Ensures the three operand columns have equal length.

    Raises:
        ValueError: If the columns are misaligned.
    """
    lengths = {len(self.args), len(self.arg_types), len(self.arg_data_types)}
    if len(lengths) != 1:
      raise ValueError(
        f"Instruction '{self.name}' has misaligned operand columns "
        f"(args={len(self.args)}, arg_types={len(self.arg_types)}, arg_data_types={len(self.arg_data_types)})"
      )
    return self


class SpecialRegisterSingle(BaseModel):
  """A named special register with its documentation."""

  model_config = ConfigDict(frozen=True, extra="forbid")

  name: str = Field(..., min_length=1)
  description: str = Field(..., min_length=1)


class RangeOverride(BaseModel):
  """Description of one range index that differs from the range default."""

  model_config = ConfigDict(frozen=True, extra="forbid")

  index: int = Field(..., ge=0)
  description: str = Field(..., min_length=1)


class SpecialRegisterRange(BaseModel):
  """
  A compressed run of numbered registers, e.g. ``attr0`` .. ``attr31``.
  """

  model_config = ConfigDict(frozen=True, extra="forbid")

  prefix: str = Field(..., min_length=1, description="Register name prefix (e.g. 'attr').")
  start: int = Field(..., ge=0, description="First index of the run.")
  count: int = Field(..., ge=MIN_RANGE_COUNT, description="Number of contiguous indices.")
  description: str = Field(..., min_length=1, description="Default text for indices without an override.")
  overrides: List[RangeOverride] = Field(default_factory=list, description="Sparse per-index descriptions.")

  @property
  def end(self) -> int:
    """Exclusive upper bound of the run."""
    return self.start + self.count

  def __contains__(self, index: int) -> bool:
    return self.start <= index < self.end

  def override_map(self) -> Dict[int, str]:
    """
    Returns:
        Dict[int, str]: Override descriptions keyed by index.
    """
    return {item.index: item.description for item in self.overrides}

  def description_for(self, index: int) -> Optional[str]:
    """
    Resolves the description of a member index.

    Args:
        index (int): Register index (e.g. 7 for ``attr7``).

    Returns:
        Optional[str]: The override, the range default, or None outside the range.
    """
    if index not in self:
      return None
    return self.override_map().get(index, self.description)

  @model_validator(mode="after")
  def check_overrides(self) -> "SpecialRegisterRange":
    """
    Ensures overrides are unique and inside ``[start, start + count)``.

    Raises:
        ValueError: On an out-of-range or duplicated override index.
    """
    seen = set()
    for item in self.overrides:
      if item.index not in self:
        raise ValueError(
          f"Range '{self.prefix}' override index {item.index} outside [{self.start}, {self.end})"
        )
      if item.index in seen:
        raise ValueError(f"Range '{self.prefix}' has duplicate override for index {item.index}")
      seen.add(item.index)
    return self


class SpecialRegisters(BaseModel):
  """Special-register documentation in compressed form."""

  model_config = ConfigDict(frozen=True, extra="forbid")

  singles: List[SpecialRegisterSingle] = Field(default_factory=list)
  ranges: List[SpecialRegisterRange] = Field(default_factory=list)

  @model_validator(mode="after")
  def check_ranges_disjoint(self) -> "SpecialRegisters":
    """
    Ensures ranges sharing a prefix do not overlap.

    Raises:
        ValueError: If two runs of the same prefix intersect.
    """
    by_prefix: Dict[str, List[SpecialRegisterRange]] = {}
    for item in self.ranges:
      by_prefix.setdefault(item.prefix, []).append(item)
    for prefix, runs in by_prefix.items():
      runs = sorted(runs, key=lambda r: r.start)
      for previous, current in zip(runs, runs[1:]):
        if current.start < previous.end:
          raise ValueError(f"Overlapping ranges for prefix '{prefix}' at index {current.start}")
    return self


class Snapshot(BaseModel):
  """
  The complete, immutable ISA database.
  """

  model_config = ConfigDict(frozen=True, extra="forbid")

  instructions: List[Instruction] = Field(default_factory=list)
  special_registers: SpecialRegisters = Field(default_factory=SpecialRegisters)

  @model_validator(mode="after")
  def check_unique_names(self) -> "Snapshot":
    """
    Ensures every mnemonic appears once.

    Raises:
        ValueError: On a duplicated instruction name.
    """
    seen = set()
    for inst in self.instructions:
      if inst.name in seen:
        raise ValueError(f"Duplicate instruction name '{inst.name}'")
      seen.add(inst.name)
    return self
