"""
Snapshot Build Orchestration.

Runs the offline pipeline end to end:

1.  **Collect**: expand inputs into XML files in lexicographic filename order.
2.  **Ingest**: parse each file; malformed files are skipped and reported.
3.  **Merge**: fold per-file instructions into canonical records.
4.  **Compile**: compress the special registers of RDNA files.
5.  **Validate**: assemble the `Snapshot`; any invariant violation is fatal.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

from pydantic import ValidationError

from amdgpu_lsp.errors import MergeInvariantError, SpecParseError
from amdgpu_lsp.importers.isa_xml_reader import IngestionWarning, SpecReader, collect_spec_files
from amdgpu_lsp.isa.merging import InstructionMerger
from amdgpu_lsp.isa.registers import SpecialRegisterCompiler
from amdgpu_lsp.isa.schema import Snapshot
from amdgpu_lsp.utils.console import log_info


@dataclass
class BuildResult:
  """
  Outcome of a snapshot build.

  Attributes:
      snapshot (Snapshot): The validated database.
      files_read (List[Path]): Files that parsed successfully, in scan order.
      failures (List[SpecParseError]): Files that were skipped.
      warnings (List[IngestionWarning]): Lenient-parsing events of all files.
  """

  snapshot: Snapshot
  files_read: List[Path] = field(default_factory=list)
  failures: List[SpecParseError] = field(default_factory=list)
  warnings: List[IngestionWarning] = field(default_factory=list)


class SnapshotBuilder:
  """
  Builds a `Snapshot` from vendor specification files.
  """

  def __init__(self, reader: Optional[SpecReader] = None) -> None:
    """
    Args:
        reader (Optional[SpecReader]): Parser to use; a default one otherwise.
    """
    self.reader = reader or SpecReader()

  def build(self, inputs: Iterable[Path]) -> BuildResult:
    """
    Runs ingestion, merging and register compression.

    Args:
        inputs (Iterable[Path]): XML files and/or directories containing them.

    Returns:
        BuildResult: The snapshot plus per-file diagnostics.

    Raises:
        MergeInvariantError: If the assembled database violates a schema invariant.
    """
    paths = collect_spec_files(inputs)
    spec_files, failures = self.reader.read_all(paths)

    merger = InstructionMerger()
    registers = SpecialRegisterCompiler()
    warnings: List[IngestionWarning] = []

    for spec in spec_files:
      merger.add_file(spec)
      registers.add(spec.registers)
      warnings.extend(spec.warnings)

    try:
      snapshot = Snapshot(instructions=merger.instructions(), special_registers=registers.compile())
    except ValidationError as e:
      raise MergeInvariantError(f"Merged ISA database is invalid: {e}") from e

    log_info(
      f"Merged {len(snapshot.instructions)} instructions and "
      f"{len(registers)} special registers from {len(spec_files)} file(s)"
    )
    return BuildResult(
      snapshot=snapshot,
      files_read=[spec.path for spec in spec_files],
      failures=failures,
      warnings=warnings,
    )
