"""
Snapshot Serialization.

Writes the ISA database as canonical JSON and loads it back for the server.

Writing is deterministic: field order follows the schema, set-valued fields
are already sorted, and ``minify`` only changes whitespace. Loading validates
the whole document against `amdgpu_lsp.isa.schema.Snapshot`; any failure
(missing file, unreadable file, invalid JSON, schema violation) raises
`DataLoadError`, because the server cannot do anything useful without it.
"""

import json
from pathlib import Path
from typing import Union

from pydantic import ValidationError

from amdgpu_lsp.errors import DataLoadError
from amdgpu_lsp.isa.schema import Snapshot


def dump_snapshot(snapshot: Snapshot, minify: bool = False) -> str:
  """
  Serializes a snapshot to canonical JSON text.

  Args:
      snapshot (Snapshot): The database to serialize.
      minify (bool): Drop all optional whitespace.

  Returns:
      str: JSON text terminated by a newline.
  """
  payload = snapshot.model_dump(mode="json")
  if minify:
    text = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
  else:
    text = json.dumps(payload, ensure_ascii=False, indent=2)
  return text + "\n"


def write_snapshot(snapshot: Snapshot, path: Union[str, Path], minify: bool = False) -> Path:
  """
  Writes a snapshot to disk, creating parent directories.

  Args:
      snapshot (Snapshot): The database to write.
      path (Union[str, Path]): Destination file.
      minify (bool): Write compact JSON.

  Returns:
      Path: The written path.
  """
  out = Path(path)
  if out.parent and not out.parent.exists():
    out.parent.mkdir(parents=True, exist_ok=True)
  out.write_text(dump_snapshot(snapshot, minify=minify), encoding="utf-8")
  return out


def parse_snapshot(text: str, source: Union[str, Path, None] = None) -> Snapshot:
  """
  Parses and validates snapshot JSON text.

  Args:
      text (str): The JSON document.
      source (Union[str, Path, None]): Origin, used in error messages.

  Returns:
      Snapshot: The validated, frozen database.

  Raises:
      DataLoadError: If the text is not valid JSON or violates the schema.
  """
  try:
    payload = json.loads(text)
  except json.JSONDecodeError as e:
    raise DataLoadError(source, f"Failed to parse ISA database: {e}") from e

  try:
    return Snapshot.model_validate(payload)
  except ValidationError as e:
    raise DataLoadError(source, f"ISA database failed schema validation: {e}") from e


def load_snapshot(path: Union[str, Path]) -> Snapshot:
  """
  Loads the ISA database from disk.

  Args:
      path (Union[str, Path]): Location of ``isa.json``.

  Returns:
      Snapshot: The validated database.

  Raises:
      DataLoadError: If the file is missing, unreadable or invalid.
  """
  src = Path(path)
  if not src.is_file():
    raise DataLoadError(src, "ISA database not found")
  try:
    text = src.read_text(encoding="utf-8")
  except (OSError, UnicodeDecodeError) as e:
    raise DataLoadError(src, f"Failed to read ISA database: {e}") from e
  return parse_snapshot(text, src)
