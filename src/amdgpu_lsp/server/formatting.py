"""
Markdown Rendering for Editor Popups.

Hover layout for an instruction (paragraphs separated by blank lines)::

    **v_add_f32**

    vdst: reg f32, src0: reg/inline f32, src1: reg f32

    Adds two single-precision floats.

    Encodings: `ENC_VOP2`, `ENC_VOP3`

    Encoding: VOP3 (64-bit): Extended vector ALU ...   (only with a suffix)
"""

from typing import List, Optional

from amdgpu_lsp.enums import ArgType, EncodingVariant
from amdgpu_lsp.isa.schema import Instruction
from amdgpu_lsp.server.encodings import encoding_description, find_matching_encoding

_ARG_TYPE_LABELS = {
  ArgType.REGISTER: "reg",
  ArgType.REGISTER_OR_INLINE: "reg/inline",
  ArgType.IMMEDIATE: "imm",
  ArgType.UNKNOWN: None,
}

_DATA_TYPE_LABELS = {
  "FMT_NUM_B32": "b32",
  "FMT_NUM_B64": "b64",
  "FMT_NUM_F16": "f16",
  "FMT_NUM_F32": "f32",
  "FMT_NUM_F64": "f64",
  "FMT_NUM_BF16": "bf16",
  "FMT_NUM_I8": "i8",
  "FMT_NUM_I16": "i16",
  "FMT_NUM_I32": "i32",
  "FMT_NUM_I64": "i64",
  "FMT_NUM_U16": "u16",
  "FMT_NUM_U32": "u32",
  "FMT_NUM_U64": "u64",
  "FMT_ANY": "any",
}


def format_mnemonic(name: str) -> str:
  """Mnemonics are displayed lowercase, as assemblers write them."""
  return name.lower()


def format_arg_type(arg_type: ArgType) -> Optional[str]:
  """Short display form of an operand class; None for ``unknown``."""
  if arg_type in _ARG_TYPE_LABELS:
    return _ARG_TYPE_LABELS[arg_type]
  return arg_type.value


def format_data_type(data_type: str) -> Optional[str]:
  """Short display form of a vendor data format (``FMT_NUM_F32`` -> ``f32``)."""
  return _DATA_TYPE_LABELS.get(data_type)


def format_type_label(instruction: Instruction, index: int) -> str:
  """
  Renders the type of one operand, e.g. ``"reg f32"``.

  Returns:
      str: Combined class and data type; empty when both are unknown.
  """
  parts = [
    format_arg_type(instruction.arg_types[index]),
    format_data_type(instruction.arg_data_types[index]),
  ]
  return " ".join(part for part in parts if part)


def format_args(instruction: Instruction) -> str:
  """
  Renders the operand list, e.g. ``"vdst: reg f32, src0: reg/inline f32"``.
  """
  rendered: List[str] = []
  for index, arg in enumerate(instruction.args):
    type_label = format_type_label(instruction, index)
    rendered.append(f"{arg}: {type_label}" if type_label else arg)
  return ", ".join(rendered)


def format_signature(instruction: Instruction) -> str:
  """Single-line signature used as completion detail."""
  name = format_mnemonic(instruction.name)
  if not instruction.args:
    return name
  return f"{name} {format_args(instruction)}"


def format_instruction_hover(instruction: Instruction, variant: EncodingVariant = EncodingVariant.NATIVE) -> str:
  """
  Builds the hover markdown of an instruction.

  Args:
      instruction (Instruction): The database record.
      variant (EncodingVariant): The encoding suffix written in the source.

  Returns:
      str: Markdown text.
  """
  paragraphs = [f"**{format_mnemonic(instruction.name)}**"]

  if instruction.args:
    paragraphs.append(format_args(instruction))

  if instruction.description:
    paragraphs.append(instruction.description)

  if instruction.available_encodings:
    names = ", ".join(f"`{name}`" for name in instruction.available_encodings)
    paragraphs.append(f"Encodings: {names}")

  if variant != EncodingVariant.NATIVE:
    encoding = find_matching_encoding(instruction.available_encodings, variant)
    if encoding is not None:
      paragraphs.append(f"Encoding: {encoding_description(encoding) or encoding}")

  return "\n\n".join(paragraphs)


def format_register_hover(name: str, description: str) -> str:
  """
  Builds the hover markdown of a special register.

  Args:
      name (str): The register name as written.
      description (str): Resolved documentation.

  Returns:
      str: Markdown text.
  """
  return f"**{name.lower()}**\n\n{description}"
