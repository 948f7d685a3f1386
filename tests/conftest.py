"""
Pytest Configuration and Fixtures.

Includes:
- Syspath patching for local imports.
- Factories for vendor ISA XML documents written to ``tmp_path``.
- A small in-memory snapshot and index shared by the server tests.
- Console isolation so output bindings (stdout/stderr) do not leak.
"""

import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Iterable, Optional, Sequence, Tuple

import pytest

# Add src to path so we can import 'amdgpu_lsp' without installing it
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from amdgpu_lsp.enums import ArgType
from amdgpu_lsp.isa.schema import (
  Instruction,
  RangeOverride,
  Snapshot,
  SpecialRegisterRange,
  SpecialRegisters,
  SpecialRegisterSingle,
)
from amdgpu_lsp.server.index import InstructionIndex
from amdgpu_lsp.utils.console import console, reset_console

# --- XML Builders ---


def operand_xml(
  field: Optional[str],
  op_type: Optional[str],
  fmt: Optional[str] = "FMT_NUM_B32",
  order: Optional[int] = None,
  implicit: bool = False,
) -> str:
  """Renders one <Operand> element; None omits the child element."""
  attrs = f'Input="true" Output="false" IsImplicit="{"true" if implicit else "false"}"'
  if order is not None:
    attrs += f' Order="{order}"'
  parts = []
  if field is not None:
    parts.append(f"<FieldName>{field}</FieldName>")
  if op_type is not None:
    parts.append(f"<OperandType>{op_type}</OperandType>")
  if fmt is not None:
    parts.append(f"<DataFormatName>{fmt}</DataFormatName>")
  parts.append("<OperandSize>32</OperandSize>")
  return f"<Operand {attrs}>{''.join(parts)}</Operand>"


def encoding_xml(name: Optional[str], operands: Sequence[str] = ()) -> str:
  """Renders one <InstructionEncoding>."""
  name_el = f"<EncodingName>{name}</EncodingName>" if name is not None else ""
  return f"<InstructionEncoding>{name_el}<Operands>{''.join(operands)}</Operands></InstructionEncoding>"


def instruction_xml(
  name: str,
  description: Optional[str] = "An instruction.",
  encodings: Sequence[str] = (),
  aliases: Iterable[str] = (),
) -> str:
  """Renders one <Instruction>, optionally with an alias list."""
  alias_el = ""
  alias_names = "".join(f"<InstructionName>{alias}</InstructionName>" for alias in aliases)
  if alias_names:
    alias_el = f"<AliasedInstructionNames>{alias_names}</AliasedInstructionNames>"
  desc_el = f"<Description>{description}</Description>" if description is not None else ""
  return (
    f"<Instruction><InstructionName>{name}</InstructionName>{alias_el}{desc_el}"
    f"<InstructionEncodings>{''.join(encodings)}</InstructionEncodings></Instruction>"
  )


def spec_xml(
  architecture: Optional[str],
  instructions: Sequence[str] = (),
  registers: Sequence[Tuple[str, Optional[str]]] = (),
) -> str:
  """Renders a complete vendor specification document."""
  arch_el = f"<ArchitectureName>{architecture}</ArchitectureName>" if architecture is not None else ""
  values = []
  for name, description in registers:
    desc_el = f"<Description>{description}</Description>" if description is not None else ""
    values.append(f"<PredefinedValue><Name>{name}</Name>{desc_el}<Value>0</Value></PredefinedValue>")
  predefined = ""
  if values:
    predefined = (
      "<OperandTypes><OperandType><OperandTypeName>OPR_SREG</OperandTypeName>"
      f"<OperandPredefinedValues>{''.join(values)}</OperandPredefinedValues>"
      "</OperandType></OperandTypes>"
    )
  return (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    f"<Spec><Document>{arch_el}</Document><ISA><Instructions>{''.join(instructions)}</Instructions>"
    f"{predefined}</ISA></Spec>"
  )


def v_add_f32_xml(description: str = "Add two single-precision floats.") -> str:
  """V_ADD_F32 with an alias list, an implicit operand and out-of-order operands."""
  return instruction_xml(
    "V_ADD_F32",
    description,
    encodings=[
      encoding_xml(
        "ENC_VOP2",
        [
          operand_xml("SRC0", "OPR_SRC", "FMT_NUM_F32", order=2),
          operand_xml("EXEC", "OPR_EXEC", "FMT_NUM_B64", order=0, implicit=True),
          operand_xml("VDST", "OPR_VGPR", "FMT_NUM_F32", order=1),
          operand_xml("VSRC1", "OPR_VGPR", "FMT_NUM_F32", order=3),
        ],
      ),
      encoding_xml("ENC_VOP3", [operand_xml("VDST", "OPR_VGPR", "FMT_NUM_F32", order=1)]),
    ],
    aliases=["V_ADD_LEGACY_F32"],
  )


# --- Fixtures ---


@pytest.fixture(autouse=True)
def cleanup_console():
  """Ensures console is reset to stdout at INFO level after every test."""
  reset_console()
  yield
  console.set_level("INFO")
  reset_console()


@pytest.fixture
def xml():
  """Namespace of the XML builders above."""
  return SimpleNamespace(
    operand=operand_xml,
    encoding=encoding_xml,
    instruction=instruction_xml,
    spec=spec_xml,
    v_add_f32=v_add_f32_xml,
  )


@pytest.fixture
def write_spec(tmp_path):
  """Writes an XML document under ``tmp_path/specs`` and returns its path."""
  spec_dir = tmp_path / "specs"
  spec_dir.mkdir(exist_ok=True)

  def _write(filename: str, text: str) -> Path:
    path = spec_dir / filename
    path.write_text(text, encoding="utf-8")
    return path

  return _write


def _inst(name, architectures, args=(), types=(), fmts=None, encodings=(), description="Does a thing."):
  return Instruction(
    name=name,
    architectures=list(architectures),
    description=description,
    args=list(args),
    arg_types=list(types),
    arg_data_types=list(fmts) if fmts is not None else ["unknown"] * len(args),
    available_encodings=list(encodings),
  )


@pytest.fixture
def sample_snapshot() -> Snapshot:
  """A hand-written database covering both families, labels and registers."""
  return Snapshot(
    instructions=[
      _inst(
        "V_ADD_F32",
        ["rdna3", "rdna35"],
        args=["VDST", "SRC0", "VSRC1"],
        types=[ArgType.REGISTER, ArgType.REGISTER_OR_INLINE, ArgType.REGISTER],
        fmts=["FMT_NUM_F32"] * 3,
        encodings=["ENC_VOP2", "ENC_VOP3", "VOP2_VOP_DPP16", "VOP3_VOP_DPP16"],
        description="Add two single-precision floats.",
      ),
      _inst(
        "V_ADD_U32",
        ["rdna3"],
        args=["VDST", "SRC0", "VSRC1"],
        types=[ArgType.REGISTER, ArgType.REGISTER, ArgType.REGISTER],
        fmts=["FMT_NUM_U32"] * 3,
        encodings=["ENC_VOP2"],
      ),
      _inst("V_SUB_F32", ["cdna3", "rdna3"], encodings=["ENC_VOP2"]),
      _inst("V_MFMA_F32_32X32X8_F16", ["cdna3"], encodings=["ENC_VOP3P"]),
      _inst(
        "S_BRANCH",
        ["cdna3", "rdna3"],
        args=["SIMM16"],
        types=[ArgType.LABEL],
        encodings=["ENC_SOPP"],
        description="Jump to a label.",
      ),
      _inst(
        "S_CBRANCH_SCC0",
        ["rdna3"],
        args=["SIMM16"],
        types=[ArgType.LABEL],
        encodings=["ENC_SOPP"],
      ),
      _inst("S_NOP", ["rdna3"], args=["SIMM16"], types=[ArgType.IMMEDIATE], fmts=["FMT_NUM_U16"]),
    ],
    special_registers=SpecialRegisters(
      singles=[
        SpecialRegisterSingle(name="exec", description="Wavefront execution mask (64-bit). Each bit enables a lane."),
        SpecialRegisterSingle(name="m0", description="Memory descriptor register."),
      ],
      ranges=[
        SpecialRegisterRange(
          prefix="attr",
          start=0,
          count=32,
          description="Attribute register.",
          overrides=[RangeOverride(index=7, description="Attribute seven.")],
        )
      ],
    ),
  )


@pytest.fixture
def index(sample_snapshot) -> InstructionIndex:
  """Index over `sample_snapshot`."""
  return InstructionIndex(sample_snapshot)
