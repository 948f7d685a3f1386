"""
Operand Classification for Vendor ISA Files.

Maps vendor operand type identifiers (``OPR_VGPR``, ``OPR_SIMM16`` ...) onto the
small closed set of `ArgType` values shown in hover and completion, and
projects an encoding's operand list into the three index-aligned sequences
stored on every instruction.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from amdgpu_lsp.enums import ArgType

UNKNOWN = "unknown"

_IMMEDIATE_TYPES = {"OPR_SMEM_OFFSET", "OPR_DELAY"}
_MEMORY_TYPES = {"OPR_DSMEM", "OPR_FLAT_SCRATCH"}
_REGISTER_TYPES = {
  "OPR_VGPR",
  "OPR_SREG",
  "OPR_SDST",
  "OPR_SSRC",
  "OPR_SSRC_LANESEL",
  "OPR_SSRC_SPECIAL_SCC",
  "OPR_SRC",
  "OPR_SRC_VGPR",
  "OPR_VCC",
  "OPR_EXEC",
  "OPR_SDST_EXEC",
  "OPR_SDST_M0",
  "OPR_SDST_NULL",
  "OPR_PC",
  "OPR_TGT",
}
_SPECIAL_TYPES = {
  "OPR_SENDMSG",
  "OPR_SENDMSG_RTN",
  "OPR_WAITCNT",
  "OPR_WAITCNT_DEPCTR",
  "OPR_WAIT_EVENT",
  "OPR_HWREG",
  "OPR_ATTR",
  "OPR_VERSION",
  "OPR_CLAUSE",
}


@dataclass
class RawOperand:
  """
  One ``<Operand>`` element of an instruction encoding.

  Attributes:
      field_name (Optional[str]): Encoding field the operand occupies (e.g. "VDST").
      operand_type (Optional[str]): Vendor type identifier (e.g. "OPR_VGPR").
      data_format (Optional[str]): Vendor data format (e.g. "FMT_NUM_F32").
      size (Optional[int]): Operand size in bits.
      is_input (Optional[bool]): Operand is read.
      is_output (Optional[bool]): Operand is written.
      is_implicit (bool): Implicit operands are not written in assembly.
      order (Optional[int]): Declared position in the assembly syntax.
  """

  field_name: Optional[str] = None
  operand_type: Optional[str] = None
  data_format: Optional[str] = None
  size: Optional[int] = None
  is_input: Optional[bool] = None
  is_output: Optional[bool] = None
  is_implicit: bool = False
  order: Optional[int] = None


@dataclass
class RawEncoding:
  """An ``<InstructionEncoding>`` element: its name and operand list."""

  name: Optional[str] = None
  operands: List[RawOperand] = field(default_factory=list)


def classify_operand(operand_type: Optional[str]) -> ArgType:
  """
  Classifies a vendor operand type for display.

  Args:
      operand_type (Optional[str]): The raw ``OperandType`` text.

  Returns:
      ArgType: The display class; UNKNOWN for missing or unrecognised types.
  """
  if not operand_type:
    return ArgType.UNKNOWN
  if operand_type.startswith("OPR_SIMM") or operand_type in _IMMEDIATE_TYPES:
    return ArgType.IMMEDIATE
  if operand_type == "OPR_LABEL":
    return ArgType.LABEL
  if operand_type in _MEMORY_TYPES:
    return ArgType.MEMORY
  if operand_type == "OPR_SRC_VGPR_OR_INLINE":
    return ArgType.REGISTER_OR_INLINE
  if operand_type in _REGISTER_TYPES:
    return ArgType.REGISTER
  if operand_type in _SPECIAL_TYPES:
    return ArgType.SPECIAL
  return ArgType.UNKNOWN


def operand_label(operand: RawOperand) -> str:
  """Display name of an operand: field name, then type, then "operand"."""
  return operand.field_name or operand.operand_type or "operand"


def build_args(encodings: List[RawEncoding]) -> Tuple[List[str], List[str], List[str]]:
  """
  Projects the first encoding's explicit operands into aligned sequences.

  Implicit operands are dropped. The rest are sorted by their declared order;
  operands without an order keep their document position after all ordered
  ones.

  Args:
      encodings (List[RawEncoding]): Encodings in declaration order.

  Returns:
      Tuple[List[str], List[str], List[str]]: ``(args, arg_types, arg_data_types)``,
      always of equal length.
  """
  if not encodings:
    return [], [], []

  explicit = [op for op in encodings[0].operands if not op.is_implicit]
  explicit.sort(key=lambda op: (op.order is None, op.order if op.order is not None else 0))

  args: List[str] = []
  arg_types: List[str] = []
  arg_data_types: List[str] = []
  for operand in explicit:
    args.append(operand_label(operand))
    arg_types.append(classify_operand(operand.operand_type).value)
    arg_data_types.append(operand.data_format or UNKNOWN)
  return args, arg_types, arg_data_types
