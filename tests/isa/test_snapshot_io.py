"""
Tests for snapshot serialization, loading and schema invariants.
"""

import json

import pytest
from hypothesis import HealthCheck, given, settings, strategies as st
from pydantic import ValidationError

from amdgpu_lsp.enums import ArgType
from amdgpu_lsp.errors import DataLoadError
from amdgpu_lsp.isa.schema import (
  Instruction,
  RangeOverride,
  SpecialRegisterRange,
  SpecialRegisters,
  SpecialRegisterSingle,
  Snapshot,
)
from amdgpu_lsp.isa.snapshot import dump_snapshot, load_snapshot, parse_snapshot, write_snapshot


def test_write_then_load(tmp_path, sample_snapshot):
  path = write_snapshot(sample_snapshot, tmp_path / "out" / "isa.json")
  assert path.exists()
  assert load_snapshot(path) == sample_snapshot


def test_minify_only_changes_whitespace(sample_snapshot):
  pretty = dump_snapshot(sample_snapshot)
  compact = dump_snapshot(sample_snapshot, minify=True)

  assert len(compact) < len(pretty)
  assert "\n" not in compact.rstrip("\n")
  assert json.loads(compact) == json.loads(pretty)


def test_dump_is_deterministic(sample_snapshot):
  rebuilt = Snapshot.model_validate(json.loads(dump_snapshot(sample_snapshot)))
  assert dump_snapshot(rebuilt) == dump_snapshot(sample_snapshot)


def test_top_level_layout(sample_snapshot):
  payload = json.loads(dump_snapshot(sample_snapshot))
  assert list(payload) == ["instructions", "special_registers"]
  assert list(payload["special_registers"]) == ["singles", "ranges"]
  assert payload["instructions"][0]["arg_types"] == ["register", "register_or_inline", "register"]


def test_missing_file_raises(tmp_path):
  with pytest.raises(DataLoadError) as exc:
    load_snapshot(tmp_path / "nope.json")
  assert "not found" in str(exc.value)
  assert exc.value.path == tmp_path / "nope.json"


def test_invalid_json_raises(tmp_path):
  path = tmp_path / "isa.json"
  path.write_text("{not json", encoding="utf-8")
  with pytest.raises(DataLoadError):
    load_snapshot(path)


def test_schema_violation_raises():
  text = json.dumps({"instructions": [{"name": "S_NOP", "args": ["A"], "arg_types": [], "arg_data_types": []}]})
  with pytest.raises(DataLoadError) as exc:
    parse_snapshot(text, "inline.json")
  assert "schema" in str(exc.value)


def test_duplicate_names_rejected():
  inst = Instruction(name="S_NOP")
  with pytest.raises(ValidationError):
    Snapshot(instructions=[inst, inst])


def test_set_fields_are_canonicalized():
  inst = Instruction(name="V_X", architectures=["rdna4", "cdna3", "rdna4"], available_encodings=["B", "A"])
  assert inst.architectures == ["cdna3", "rdna4"]
  assert inst.available_encodings == ["A", "B"]


def test_range_invariants():
  with pytest.raises(ValidationError):
    SpecialRegisterRange(prefix="attr", start=0, count=2, description="x")

  with pytest.raises(ValidationError):
    SpecialRegisterRange(prefix="attr", start=0, count=4, description="x", overrides=[{"index": 4, "description": "y"}])

  with pytest.raises(ValidationError):
    SpecialRegisters(
      ranges=[
        SpecialRegisterRange(prefix="attr", start=0, count=4, description="x"),
        SpecialRegisterRange(prefix="attr", start=3, count=4, description="x"),
      ]
    )


def test_range_lookup(sample_snapshot):
  [reg_range] = sample_snapshot.special_registers.ranges
  assert reg_range.override_map() == {7: "Attribute seven."}
  assert reg_range.description_for(7) == "Attribute seven."
  assert reg_range.description_for(31) == "Attribute register."
  assert reg_range.description_for(32) is None


# Free text mixes ASCII with accented, CJK and symbol characters.
_text = st.text(alphabet=st.characters(blacklist_categories=("Cs",)), min_size=1, max_size=40)
_mnemonics = st.from_regex(r"[A-Z][A-Z0-9_]{0,15}", fullmatch=True)
_operand = st.tuples(
  st.sampled_from(["VDST", "SDST", "SRC0", "SRC1", "VSRC1", "SIMM16", "OFFSET", "ADDR"]),
  st.sampled_from(list(ArgType)),
  st.sampled_from(["FMT_NUM_F32", "FMT_NUM_B32", "FMT_NUM_U16", "FMT_ANY"]),
)


@st.composite
def _instructions(draw):
  operands = draw(st.lists(_operand, max_size=5))
  return Instruction(
    name=draw(_mnemonics),
    architectures=draw(st.lists(st.sampled_from(["rdna3", "rdna35", "rdna4", "cdna3", "cdna4"]), max_size=4)),
    description=draw(st.none() | _text),
    args=[name for name, _, _ in operands],
    arg_types=[arg_type for _, arg_type, _ in operands],
    arg_data_types=[data_type for _, _, data_type in operands],
    available_encodings=draw(st.lists(st.sampled_from(["ENC_VOP1", "ENC_VOP2", "ENC_VOP3", "ENC_SOPP"]), max_size=4)),
  )


@st.composite
def _ranges(draw, prefix):
  start = draw(st.integers(min_value=0, max_value=64))
  count = draw(st.integers(min_value=3, max_value=40))
  indices = draw(st.lists(st.integers(min_value=start, max_value=start + count - 1), unique=True, max_size=4))
  return SpecialRegisterRange(
    prefix=prefix,
    start=start,
    count=count,
    description=draw(_text),
    overrides=[RangeOverride(index=index, description=draw(_text)) for index in indices],
  )


@st.composite
def _snapshots(draw):
  prefixes = draw(st.lists(st.sampled_from(["attr", "param", "mrt", "pos", "ttmp"]), unique=True, max_size=3))
  singles = draw(
    st.lists(
      st.builds(SpecialRegisterSingle, name=st.sampled_from(["m0", "vcc", "exec", "scc", "sgpr_null"]), description=_text),
      unique_by=lambda s: s.name,
      max_size=5,
    )
  )
  return Snapshot(
    instructions=draw(st.lists(_instructions(), unique_by=lambda inst: inst.name, max_size=6)),
    special_registers=SpecialRegisters(singles=singles, ranges=[draw(_ranges(prefix)) for prefix in prefixes]),
  )


@given(snapshot=_snapshots(), minify=st.booleans())
@settings(max_examples=75, suppress_health_check=[HealthCheck.function_scoped_fixture])
def test_generated_snapshots_survive_disk(tmp_path, snapshot, minify):
  path = write_snapshot(snapshot, tmp_path / "isa.json", minify=minify)
  assert load_snapshot(path) == snapshot
