"""
Serve Command Handler.

Starts the language server on stdio. Output is re-bound to stderr first,
because stdout carries protocol frames. A missing or invalid database is
fatal: the process exits before the transport starts.
"""

from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from amdgpu_lsp.config import ServerConfig
from amdgpu_lsp.errors import DataLoadError
from amdgpu_lsp.server.protocol import create_server
from amdgpu_lsp.server.session import IsaSession
from amdgpu_lsp.utils.console import log_error, log_info, use_stderr


def handle_serve(
  data_path: Optional[Path] = None,
  architecture: Optional[str] = None,
  log_level: Optional[str] = None,
) -> int:
  """
  Handles the 'serve' command (also the default without a sub-command).

  Args:
      data_path (Optional[Path]): Snapshot location override.
      architecture (Optional[str]): Architecture override.
      log_level (Optional[str]): Logging level override.

  Returns:
      int: Exit code (1 when the database cannot be loaded).
  """
  use_stderr()

  try:
    config = ServerConfig.load(data_path=data_path, architecture=architecture, log_level=log_level)
  except ValidationError as e:
    log_error(f"Invalid server settings: {e}")
    return 2
  use_stderr(config.log_level)

  try:
    session = IsaSession.from_config(config)
  except DataLoadError as e:
    log_error(f"Cannot start language server: {e}")
    return 1

  server = create_server(session)
  log_info("Language server listening on stdio")
  server.start_io()
  return 0
