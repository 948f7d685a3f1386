"""
Language Server Session.

An `IsaSession` owns everything one editor connection needs: the index, the
document store and the feature engine. The protocol layer holds exactly one
session and forwards decoded messages to it; nothing is stored in module
globals.
"""

from pathlib import Path
from typing import Any, Mapping, Optional

from lsprotocol import types as lsp

from amdgpu_lsp.config import ServerConfig
from amdgpu_lsp.isa.architecture import normalize_architecture
from amdgpu_lsp.isa.snapshot import load_snapshot
from amdgpu_lsp.server.documents import Document, DocumentStore
from amdgpu_lsp.server.features import FeatureEngine
from amdgpu_lsp.server.index import InstructionIndex
from amdgpu_lsp.utils.console import log_info

ARCHITECTURE_OVERRIDE_OPTION = "architectureOverride"


class IsaSession:
  """
  State and request dispatch for one editor connection.

  Attributes:
      index (InstructionIndex): The loaded ISA database.
      documents (DocumentStore): Open buffers.
      engine (FeatureEngine): Request handlers.
      data_path (Optional[Path]): Where the snapshot was loaded from.
  """

  def __init__(
    self,
    index: InstructionIndex,
    architecture_override: Optional[str] = None,
    data_path: Optional[Path] = None,
  ) -> None:
    self.index = index
    self.data_path = data_path
    self.documents = DocumentStore(index.label_operand_positions)
    self.engine = FeatureEngine(index, architecture_override)

  @classmethod
  def from_config(cls, config: ServerConfig) -> "IsaSession":
    """
    Loads the snapshot named by the configuration.

    Args:
        config (ServerConfig): Resolved server settings.

    Returns:
        IsaSession: A session ready to serve.

    Raises:
        DataLoadError: If the snapshot is missing or invalid.
    """
    snapshot = load_snapshot(config.data_path)
    session = cls(InstructionIndex(snapshot), config.architecture, config.data_path)
    log_info(session.load_summary())
    return session

  @property
  def architecture_override(self) -> Optional[str]:
    """The normalized fallback architecture."""
    return self.engine.architecture_override

  def load_summary(self) -> str:
    """
    Returns:
        str: One-line description of the loaded database.
    """
    location = f" from {self.data_path}" if self.data_path else ""
    return (
      f"Loaded {len(self.index)} ISA instructions and "
      f"{len(self.index.snapshot.special_registers.singles)} special registers{location}"
    )

  def initialize(self, options: Optional[Any]) -> None:
    """
    Applies ``initializationOptions``.

    A non-empty ``architectureOverride`` string replaces the configured
    override; anything else leaves it unchanged.

    Args:
        options (Optional[Any]): The client payload (usually a dict).
    """
    if isinstance(options, Mapping):
      raw = options.get(ARCHITECTURE_OVERRIDE_OPTION)
    else:
      raw = getattr(options, ARCHITECTURE_OVERRIDE_OPTION, None)

    if isinstance(raw, str) and raw.strip():
      self.engine.architecture_override = normalize_architecture(raw)
      log_info(f"Architecture override: {self.engine.architecture_override}")

  def did_open(self, uri: str, text: str, version: Optional[int] = None, language_id: str = "") -> Document:
    """Handles ``textDocument/didOpen``."""
    return self.documents.open(uri, text, version, language_id)

  def did_change(self, uri: str, text: str, version: Optional[int] = None) -> Document:
    """Handles ``textDocument/didChange`` (full text)."""
    return self.documents.change(uri, text, version)

  def did_close(self, uri: str) -> None:
    """Handles ``textDocument/didClose``."""
    self.documents.close(uri)

  def hover(self, uri: str, position: lsp.Position) -> Optional[lsp.Hover]:
    """Handles ``textDocument/hover``."""
    doc = self.documents.get(uri)
    return self.engine.hover(doc, position) if doc else None

  def completion(self, uri: str, position: lsp.Position) -> Optional[lsp.CompletionList]:
    """Handles ``textDocument/completion``."""
    doc = self.documents.get(uri)
    return self.engine.completion(doc, position) if doc else None

  def definition(self, uri: str, position: lsp.Position) -> Optional[lsp.Location]:
    """Handles ``textDocument/definition``."""
    doc = self.documents.get(uri)
    return self.engine.definition(doc, position) if doc else None

  def signature_help(self, uri: str, position: lsp.Position) -> Optional[lsp.SignatureHelp]:
    """Handles ``textDocument/signatureHelp``."""
    doc = self.documents.get(uri)
    return self.engine.signature_help(doc, position) if doc else None
