"""
amdgpu-lsp Package.

Language tooling for AMD GPU assembly (RDNA/CDNA), driven by AMD's
machine-readable ISA specifications.

The package has two halves:

1.  An offline build that distils the vendor XML files into one canonical
    JSON database (``amdgpu-lsp build``).
2.  A Language Server Protocol server that answers hover, completion,
    go-to-definition and signature-help requests from that database
    (``amdgpu-lsp serve``).

Usage
-----

.. code-block:: python

    from pathlib import Path
    import amdgpu_lsp

    snapshot = amdgpu_lsp.build_database([Path("specs/")], output=Path("isa.json"))
    index = amdgpu_lsp.InstructionIndex(snapshot)
    print([inst.name for inst in index.by_prefix("v_add")])
"""

from pathlib import Path
from typing import Iterable, Optional

__version__ = "0.1.0"

from amdgpu_lsp.config import BuildConfig, ServerConfig
from amdgpu_lsp.isa.builder import BuildResult, SnapshotBuilder
from amdgpu_lsp.isa.schema import Snapshot
from amdgpu_lsp.isa.snapshot import load_snapshot, write_snapshot
from amdgpu_lsp.server.index import InstructionIndex


def build_database(inputs: Iterable[Path], output: Optional[Path] = None, minify: bool = False) -> Snapshot:
  """
  Builds the ISA database from vendor XML files.

  Args:
      inputs (Iterable[Path]): XML files or directories containing them.
      output (Optional[Path]): When given, the snapshot is also written there.
      minify (bool): Write compact JSON.

  Returns:
      Snapshot: The validated database.

  Raises:
      MergeInvariantError: If the merged data violates a snapshot invariant.
  """
  result = SnapshotBuilder().build(inputs)
  if output is not None:
    write_snapshot(result.snapshot, output, minify=minify)
  return result.snapshot


__all__ = [
  "BuildConfig",
  "BuildResult",
  "InstructionIndex",
  "ServerConfig",
  "Snapshot",
  "SnapshotBuilder",
  "build_database",
  "load_snapshot",
  "write_snapshot",
  "__version__",
]
