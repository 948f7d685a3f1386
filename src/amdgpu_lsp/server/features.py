"""
Language Feature Engine.

Answers hover, completion, definition and signature-help requests from the
`InstructionIndex` and a `Document`. Every answer is computed from the
document passed in; nothing is cached between requests.

"Nothing found" is always ``None``, never an exception.
"""

import logging
import re
from typing import List, Optional, Set

from lsprotocol import types as lsp

from amdgpu_lsp.enums import EncodingVariant
from amdgpu_lsp.isa.architecture import architecture_for_language
from amdgpu_lsp.isa.schema import Instruction
from amdgpu_lsp.server.documents import Document
from amdgpu_lsp.server.encodings import split_encoding_variant
from amdgpu_lsp.server.formatting import (
  format_instruction_hover,
  format_mnemonic,
  format_register_hover,
  format_signature,
  format_type_label,
)
from amdgpu_lsp.server.index import InstructionIndex
from amdgpu_lsp.server.text import (
  comment_start,
  index_to_utf16,
  label_definition_name,
  token_at,
  tokenize,
  utf16_to_index,
  word_prefix_at,
)

logger = logging.getLogger(__name__)

_MNEMONIC_THEN_ARGS_RE = re.compile(r"\s*[^\s,]+\s(.*)", re.DOTALL)


def _markdown(value: str) -> lsp.MarkupContent:
  return lsp.MarkupContent(kind=lsp.MarkupKind.Markdown, value=value)


def _range(line: int, start: int, end: int) -> lsp.Range:
  return lsp.Range(
    start=lsp.Position(line=line, character=start),
    end=lsp.Position(line=line, character=end),
  )


class FeatureEngine:
  """
  Stateless request handlers over an immutable index.

  Attributes:
      index (InstructionIndex): The loaded ISA database.
      architecture_override (Optional[str]): Normalized fallback architecture
          for documents whose language id names none.
  """

  def __init__(self, index: InstructionIndex, architecture_override: Optional[str] = None) -> None:
    self.index = index
    self.architecture_override = architecture_override

  def architecture_for(self, document: Document) -> Optional[str]:
    """
    Returns:
        Optional[str]: The architecture filter applied to a document.
    """
    return architecture_for_language(document.language_id, self.architecture_override)

  def resolve_instruction(self, mnemonic: str, architecture: Optional[str]) -> Optional[Instruction]:
    """
    Finds the instruction a written mnemonic refers to.

    An exact database name wins; otherwise a trailing encoding suffix
    (``_e32``, ``_e64``, ``_dpp``, ``_sdwa``, ``_e64_dpp``) is stripped.

    Returns:
        Optional[Instruction]: The record, or None.
    """
    inst = self.index.by_exact_name(mnemonic, architecture)
    if inst is not None:
      return inst
    split = split_encoding_variant(mnemonic)
    if split.variant == EncodingVariant.NATIVE:
      return None
    return self.index.by_exact_name(split.base, architecture)

  def hover(self, document: Document, position: lsp.Position) -> Optional[lsp.Hover]:
    """
    Describes the instruction or special register under the cursor.

    Args:
        document (Document): Current document state.
        position (lsp.Position): Cursor (UTF-16 column).

    Returns:
        Optional[lsp.Hover]: Markdown hover, or None.
    """
    line = document.line(position.line)
    if line is None:
      return None
    token = token_at(line, utf16_to_index(line, position.character))
    if token is None:
      return None

    token_range = _range(position.line, index_to_utf16(line, token.start), index_to_utf16(line, token.end))
    architecture = self.architecture_for(document)

    inst = self.resolve_instruction(token.text, architecture)
    if inst is not None:
      variant = EncodingVariant.NATIVE
      if inst.name.lower() != token.text.lower():
        variant = split_encoding_variant(token.text).variant
      return lsp.Hover(contents=_markdown(format_instruction_hover(inst, variant)), range=token_range)

    description = self.index.special_register_by_name(token.text)
    if description is not None:
      return lsp.Hover(contents=_markdown(format_register_hover(token.text, description)), range=token_range)

    logger.debug("hover: nothing for %r", token.text)
    return None

  def completion(self, document: Document, position: lsp.Position) -> Optional[lsp.CompletionList]:
    """
    Offers mnemonics starting with the word left of the cursor.

    Args:
        document (Document): Current document state.
        position (lsp.Position): Cursor (UTF-16 column).

    Returns:
        Optional[lsp.CompletionList]: Candidates ordered by mnemonic, or None
        when there is no prefix.
    """
    line = document.line(position.line)
    if line is None:
      return None
    prefix = word_prefix_at(line, utf16_to_index(line, position.character))
    if prefix is None:
      return None

    edit_range = _range(position.line, index_to_utf16(line, prefix.start), position.character)
    seen: Set[str] = set()
    items: List[lsp.CompletionItem] = []
    for inst in self.index.by_prefix(prefix.text, self.architecture_for(document)):
      label = format_mnemonic(inst.name)
      if label in seen:
        continue
      seen.add(label)
      items.append(
        lsp.CompletionItem(
          label=label,
          kind=lsp.CompletionItemKind.Keyword,
          detail=format_signature(inst),
          documentation=_markdown(inst.description) if inst.description else None,
          text_edit=lsp.TextEdit(range=edit_range, new_text=label),
        )
      )

    return lsp.CompletionList(is_incomplete=False, items=items)

  def definition(self, document: Document, position: lsp.Position) -> Optional[lsp.Location]:
    """
    Jumps from a branch operand to its label definition.

    Args:
        document (Document): Current document state.
        position (lsp.Position): Cursor (UTF-16 column).

    Returns:
        Optional[lsp.Location]: The ``name:`` span, or None when the cursor is
        not on a branch reference or the label is undefined.
    """
    reference = document.reference_at(position.line, position.character)
    if reference is None:
      return None
    target = document.labels.get(reference.label)
    if target is None:
      return None
    return lsp.Location(uri=document.uri, range=_range(target.line, target.start, target.end))

  def signature_help(self, document: Document, position: lsp.Position) -> Optional[lsp.SignatureHelp]:
    """
    Shows the operand list of the instruction on the cursor's line.

    The active parameter is the number of commas between the mnemonic and
    the cursor, clamped to the last operand.

    Args:
        document (Document): Current document state.
        position (lsp.Position): Cursor (UTF-16 column).

    Returns:
        Optional[lsp.SignatureHelp]: A single signature, or None.
    """
    line = document.line(position.line)
    if line is None:
      return None
    cursor = utf16_to_index(line, position.character)
    if cursor > comment_start(line):
      return None

    tokens = tokenize(line)
    start = 0
    if tokens and label_definition_name(tokens[0]) is not None:
      start = tokens[0].end
      tokens = tokens[1:]
    if not tokens or cursor <= tokens[0].end:
      return None

    inst = self.resolve_instruction(tokens[0].text, self.architecture_for(document))
    if inst is None:
      return None

    match = _MNEMONIC_THEN_ARGS_RE.match(line[start:cursor])
    if match is None:
      return None
    active: Optional[int] = None
    if inst.args:
      active = min(match.group(1).count(","), len(inst.args) - 1)

    name = format_mnemonic(inst.name)
    label = f"{name} {', '.join(inst.args)}" if inst.args else name
    parameters: List[lsp.ParameterInformation] = []
    offset = len(name) + 1
    for position_no, arg in enumerate(inst.args):
      type_label = format_type_label(inst, position_no)
      parameters.append(
        lsp.ParameterInformation(
          label=(offset, offset + len(arg)),
          documentation=type_label or None,
        )
      )
      offset += len(arg) + 2

    signature = lsp.SignatureInformation(
      label=label,
      documentation=_markdown(inst.description) if inst.description else None,
      parameters=parameters,
      active_parameter=active,
    )
    return lsp.SignatureHelp(signatures=[signature], active_signature=0, active_parameter=active)
