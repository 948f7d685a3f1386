"""
Path Resolution Utilities for the ISA Database.

Handles locating the bundled ``data/isa.json`` within the package or source tree.
"""

from importlib.resources import files
from pathlib import Path

DATA_ENV_VAR = "AMDGPU_LSP_DATA"
SNAPSHOT_FILENAME = "isa.json"


def resolve_data_dir() -> Path:
  """
  Locates the directory holding the bundled ISA database.

  Prioritizes the source tree (relative to this file) so tests and editable
  installs find it, then falls back to package resources.

  Returns:
      Path: The absolute path to the ``data`` directory.
  """
  local_path = Path(__file__).resolve().parent.parent / "data"
  if local_path.exists():
    return local_path

  try:
    return Path(str(files("amdgpu_lsp") / "data"))
  except (ModuleNotFoundError, TypeError):
    return local_path


def default_snapshot_path() -> Path:
  """
  Returns:
      Path: The bundled snapshot location (it may not exist yet).
  """
  return resolve_data_dir() / SNAPSHOT_FILENAME
