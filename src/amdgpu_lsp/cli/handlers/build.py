"""
Build Command Handler.

Distils vendor ISA XML files into the JSON database served by the language
server.

Exit codes:
- 0: snapshot written.
- 1: nothing could be ingested, or the merged data is invalid.
- 2: no XML input was found (or the settings are invalid).
"""

import logging
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from amdgpu_lsp.config import BuildConfig
from amdgpu_lsp.errors import MergeInvariantError
from amdgpu_lsp.importers.isa_xml_reader import collect_spec_files
from amdgpu_lsp.isa.builder import SnapshotBuilder
from amdgpu_lsp.isa.snapshot import write_snapshot
from amdgpu_lsp.utils.console import console, log_error, log_info, log_success, log_warning

logger = logging.getLogger(__name__)


def handle_build(
  inputs: List[Path],
  output: Optional[Path] = None,
  minify: Optional[bool] = None,
  log_level: Optional[str] = None,
) -> int:
  """
  Handles the 'build' command.

  Args:
      inputs (List[Path]): XML files or directories.
      output (Optional[Path]): Destination of ``isa.json``.
      minify (Optional[bool]): Write compact JSON.
      log_level (Optional[str]): Logging level override.

  Returns:
      int: Exit code.
  """
  try:
    config = BuildConfig.load(inputs, output=output, minify=minify, log_level=log_level)
  except ValidationError as e:
    log_error(f"Invalid build settings: {e}")
    return 2
  console.set_level(config.log_level)

  paths = []
  for path in collect_spec_files(config.inputs):
    if path.is_file():
      paths.append(path)
    else:
      log_warning(f"Input not found: [path]{path}[/path]")

  if not paths:
    log_error("No ISA XML files found in the given inputs.")
    return 2

  log_info(f"Building ISA database from {len(paths)} file(s)")
  try:
    result = SnapshotBuilder().build(paths)
  except MergeInvariantError as e:
    log_error(str(e))
    return 1

  for failure in result.failures:
    log_warning(str(failure))

  if not result.files_read:
    log_error("None of the specification files could be parsed.")
    return 1

  if result.warnings:
    log_warning(f"{len(result.warnings)} lenient-parsing warning(s); missing fields were set to 'unknown'.")
    for warning in result.warnings:
      logger.debug("%s", warning)

  written = write_snapshot(result.snapshot, config.output, minify=config.minify)
  log_success(
    f"Wrote {len(result.snapshot.instructions)} instructions from {len(result.files_read)} file(s) "
    f"to [path]{written}[/path]"
  )
  return 0
