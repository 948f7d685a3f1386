"""
Protocol Transport (pygls).

Binds an `IsaSession` to a pygls `LanguageServer`. pygls owns the
Content-Length framing on stdio, request/response correlation and the
shutdown/exit sequence. All handlers are synchronous, so messages are applied
one at a time in arrival order: a hover sent after a change always sees the
changed text.
"""

import logging
from typing import Any, Optional

from lsprotocol import types as lsp
from pygls.lsp.server import LanguageServer

from amdgpu_lsp import __version__
from amdgpu_lsp.errors import ProtocolFramingError
from amdgpu_lsp.server.session import IsaSession
from amdgpu_lsp.utils.console import log_error

logger = logging.getLogger(__name__)

SERVER_NAME = "amdgpu-lsp"


class IsaLanguageServer(LanguageServer):
  """
  pygls server that owns one `IsaSession`.

  Attributes:
      session (IsaSession): Index, documents and feature engine.
  """

  def __init__(self, session: IsaSession, *args: Any, **kwargs: Any) -> None:
    kwargs.setdefault("text_document_sync_kind", lsp.TextDocumentSyncKind.Full)
    super().__init__(SERVER_NAME, __version__, *args, **kwargs)
    self.session = session

  def report_server_error(self, error: Exception, source: Any) -> None:
    """
    Logs transport-level failures and keeps serving.

    pygls already answered a correlatable request with an error response; this
    hook only records the event.
    """
    framing = error if isinstance(error, ProtocolFramingError) else ProtocolFramingError(str(error))
    origin = getattr(source, "__name__", source)
    log_error(f"Protocol error ({type(error).__name__} from {origin}): {framing}")
    super().report_server_error(error, source)

  def log_to_client(self, message: str, level: lsp.MessageType = lsp.MessageType.Info) -> None:
    """Sends a ``window/logMessage`` notification."""
    self.window_log_message(lsp.LogMessageParams(type=level, message=message))


def create_server(session: IsaSession) -> IsaLanguageServer:
  """
  Builds a language server wired to a session.

  Args:
      session (IsaSession): The loaded session.

  Returns:
      IsaLanguageServer: A server ready for ``start_io()``.
  """
  server = IsaLanguageServer(session)

  @server.feature(lsp.INITIALIZE)
  def on_initialize(params: lsp.InitializeParams) -> None:
    session.initialize(params.initialization_options)

  @server.feature(lsp.INITIALIZED)
  def on_initialized(params: lsp.InitializedParams) -> None:
    server.log_to_client(session.load_summary())

  @server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
  def did_open(params: lsp.DidOpenTextDocumentParams) -> None:
    doc = params.text_document
    session.did_open(doc.uri, doc.text, doc.version, doc.language_id)

  @server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
  def did_change(params: lsp.DidChangeTextDocumentParams) -> None:
    if not params.content_changes:
      return
    # Full sync: the last change carries the whole text.
    session.did_change(params.text_document.uri, params.content_changes[-1].text, params.text_document.version)

  @server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
  def did_close(params: lsp.DidCloseTextDocumentParams) -> None:
    session.did_close(params.text_document.uri)

  @server.feature(lsp.TEXT_DOCUMENT_HOVER)
  def hover(params: lsp.HoverParams) -> Optional[lsp.Hover]:
    return session.hover(params.text_document.uri, params.position)

  @server.feature(lsp.TEXT_DOCUMENT_COMPLETION, lsp.CompletionOptions(resolve_provider=False))
  def completion(params: lsp.CompletionParams) -> Optional[lsp.CompletionList]:
    return session.completion(params.text_document.uri, params.position)

  @server.feature(lsp.TEXT_DOCUMENT_DEFINITION)
  def definition(params: lsp.DefinitionParams) -> Optional[lsp.Location]:
    return session.definition(params.text_document.uri, params.position)

  @server.feature(lsp.TEXT_DOCUMENT_SIGNATURE_HELP, lsp.SignatureHelpOptions(trigger_characters=[" ", ","]))
  def signature_help(params: lsp.SignatureHelpParams) -> Optional[lsp.SignatureHelp]:
    return session.signature_help(params.text_document.uri, params.position)

  logger.debug("Registered LSP features for %s", SERVER_NAME)
  return server
