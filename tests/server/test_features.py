"""
Tests for the Language Feature Engine.

Verifies hover, completion, go-to-definition and signature help against the
shared sample database.
"""

import pytest
from lsprotocol import types as lsp

from amdgpu_lsp.server.documents import DocumentStore
from amdgpu_lsp.server.encodings import encoding_description
from amdgpu_lsp.server.features import FeatureEngine


@pytest.fixture
def engine(index):
  return FeatureEngine(index)


@pytest.fixture
def open_doc(index):
  """Opens a document in a fresh store and returns it."""
  store = DocumentStore(index.label_operand_positions)

  def _open(text, language_id="rdna3"):
    return store.open("file:///kernel.s", text, 1, language_id)

  return _open


def pos(line, character):
  return lsp.Position(line=line, character=character)


# --- Hover ---


def test_hover_instruction(engine, open_doc):
  doc = open_doc("  v_add_f32 v0, v1, v2")
  hover = engine.hover(doc, pos(0, 4))

  assert hover.contents.kind == lsp.MarkupKind.Markdown
  assert hover.contents.value.startswith("**v_add_f32**")
  assert "Encoding:" not in hover.contents.value
  assert (hover.range.start.character, hover.range.end.character) == (2, 11)


def test_hover_with_encoding_suffix(engine, open_doc):
  doc = open_doc("v_add_f32_e64 v0, v1, v2")
  hover = engine.hover(doc, pos(0, 3))

  assert hover.contents.value.startswith("**v_add_f32**")
  assert hover.contents.value.endswith("Encoding: " + encoding_description("ENC_VOP3"))


def test_hover_respects_architecture(index, open_doc):
  doc = open_doc("v_add_f32 v0, v1, v2", language_id="amdgpu")

  assert FeatureEngine(index, "cdna3").hover(doc, pos(0, 2)) is None
  assert FeatureEngine(index, "rdna35").hover(doc, pos(0, 2)) is not None
  assert FeatureEngine(index).hover(doc, pos(0, 2)) is not None


def test_hover_special_register(engine, open_doc):
  doc = open_doc("s_mov_b32 M0, attr7")

  assert engine.hover(doc, pos(0, 11)).contents.value == "**m0**\n\nMemory descriptor register."
  assert engine.hover(doc, pos(0, 16)).contents.value == "**attr7**\n\nAttribute seven."


def test_hover_nothing(engine, open_doc):
  doc = open_doc("s_nop 0 ; v_add_f32")
  assert engine.hover(doc, pos(0, 12)) is None
  assert engine.hover(doc, pos(0, 6)) is None
  assert engine.hover(doc, pos(3, 0)) is None


# --- Completion ---


def test_completion_prefix(engine, open_doc):
  doc = open_doc("  v_ad")
  result = engine.completion(doc, pos(0, 6))

  assert [item.label for item in result.items] == ["v_add_f32", "v_add_u32"]
  first = result.items[0]
  assert first.kind == lsp.CompletionItemKind.Keyword
  assert first.detail.startswith("v_add_f32 VDST: reg f32")
  assert first.documentation.value == "Add two single-precision floats."
  assert first.text_edit.new_text == "v_add_f32"
  assert (first.text_edit.range.start.character, first.text_edit.range.end.character) == (2, 6)


def test_completion_filters_by_language(engine, open_doc):
  doc = open_doc("V_", language_id="cdna3")
  result = engine.completion(doc, pos(0, 2))
  assert [item.label for item in result.items] == ["v_mfma_f32_32x32x8_f16", "v_sub_f32"]


def test_completion_without_prefix(engine, open_doc):
  doc = open_doc("v_add_f32 v0, ")
  assert engine.completion(doc, pos(0, 14)) is None
  assert engine.completion(open_doc("  "), pos(0, 2)) is None


def test_completion_no_match_is_empty(engine, open_doc):
  result = engine.completion(open_doc("zz"), pos(0, 2))
  assert result.items == []


# --- Definition ---


def test_scenario_branch_to_label(engine, open_doc):
  """
  Scenario: 'loop:' on line 2 and 's_branch loop' on line 10.
  Expectation: definition on the operand jumps to the label.
  """
  lines = ["; kernel", "", "loop:", "  v_add_f32 v0, v1, v2"] + [""] * 6 + ["  s_branch loop"]
  doc = open_doc("\n".join(lines))

  location = engine.definition(doc, pos(10, 13))

  assert location.uri == "file:///kernel.s"
  assert location.range.start == pos(2, 0)
  assert location.range.end == pos(2, 4)


def test_forward_reference(engine, open_doc):
  doc = open_doc("s_cbranch_scc0 done\ns_nop 0\ndone: s_nop 0")
  assert engine.definition(doc, pos(0, 16)).range.start.line == 2


def test_definition_nothing(engine, open_doc):
  doc = open_doc("s_branch nowhere\nhere:")
  assert engine.definition(doc, pos(0, 10)) is None
  assert engine.definition(doc, pos(0, 2)) is None


# --- Signature help ---


def test_signature_help_active_parameter(engine, open_doc):
  doc = open_doc("v_add_f32 v0, v1, ")
  help_ = engine.signature_help(doc, pos(0, 18))

  [signature] = help_.signatures
  assert signature.label == "v_add_f32 VDST, SRC0, VSRC1"
  assert help_.active_signature == 0
  assert help_.active_parameter == 2
  assert [p.label for p in signature.parameters] == [(10, 14), (16, 20), (22, 27)]
  assert signature.parameters[1].documentation == "reg/inline f32"


def test_signature_help_first_operand(engine, open_doc):
  doc = open_doc("v_add_f32 ")
  assert engine.signature_help(doc, pos(0, 10)).active_parameter == 0


def test_signature_help_clamps(engine, open_doc):
  doc = open_doc("v_add_f32 v0, v1, v2, v3, v4")
  assert engine.signature_help(doc, pos(0, 28)).active_parameter == 2


def test_signature_help_after_label(engine, open_doc):
  doc = open_doc("loop: s_branch ")
  help_ = engine.signature_help(doc, pos(0, 15))
  assert help_.signatures[0].label == "s_branch SIMM16"
  assert help_.active_parameter == 0


def test_signature_help_no_args(engine, open_doc):
  doc = open_doc("v_sub_f32 ")
  help_ = engine.signature_help(doc, pos(0, 10))
  assert help_.signatures[0].label == "v_sub_f32"
  assert help_.active_parameter is None


def test_signature_help_nothing(engine, open_doc):
  assert engine.signature_help(open_doc("v_add_f32"), pos(0, 5)) is None
  assert engine.signature_help(open_doc("v_add_f32"), pos(0, 9)) is None
  assert engine.signature_help(open_doc("v_bogus v0, "), pos(0, 12)) is None
  assert engine.signature_help(open_doc("s_nop 0 ; v_add_f32 v0, "), pos(0, 24)) is None
