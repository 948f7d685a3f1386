"""
Error Taxonomy for amdgpu-lsp.

Defines the exceptions raised across the ISA build pipeline and the language
server. Lookups that find nothing (hover, completion, definition) are not
errors and return ``None`` instead.

Propagation:
- `SpecParseError` is isolated per vendor file; the build skips the file.
- `MergeInvariantError` aborts a snapshot build.
- `DataLoadError` aborts server startup before the transport is opened.
- `ProtocolFramingError` is logged and the server keeps serving.
"""

from pathlib import Path
from typing import Optional, Union


class IsaLspError(Exception):
  """Base class for all amdgpu-lsp errors."""


class SpecParseError(IsaLspError):
  """
  Raised when a single vendor specification file cannot be parsed.

  Attributes:
      path (Path): The offending file.
      reason (str): Human readable cause.
  """

  def __init__(self, path: Union[str, Path], reason: str):
    self.path = Path(path)
    self.reason = reason
    super().__init__(f"Failed to parse {self.path.name}: {reason}")


class MergeInvariantError(IsaLspError):
  """Raised when the merged database violates a snapshot invariant."""


class DataLoadError(IsaLspError):
  """
  Raised when the ISA snapshot cannot be loaded at server startup.

  Attributes:
      path (Optional[Path]): The snapshot location that was tried.
      reason (str): Human readable cause.
  """

  def __init__(self, path: Optional[Union[str, Path]], reason: str):
    self.path = Path(path) if path is not None else None
    self.reason = reason
    location = f" (path: {self.path})" if self.path is not None else ""
    super().__init__(f"{reason}{location}")


class ProtocolFramingError(IsaLspError):
  """
  Raised for malformed incoming protocol messages.

  pygls answers a correlatable request itself, so only the message is kept.
  """
