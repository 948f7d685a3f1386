"""
Encoding Variant Resolution.

Assemblers accept a suffix on VALU mnemonics to force an encoding
(``v_add_f32_e64``). The database stores base mnemonics only, so the suffix
is split off before lookup and mapped back onto one of the instruction's
``available_encodings`` for display.
"""

from typing import Dict, NamedTuple, Optional, Sequence, Tuple

from amdgpu_lsp.enums import EncodingVariant

# Longest suffixes first so "_e64_dpp" is not read as "_dpp".
_SUFFIXES: Tuple[Tuple[str, EncodingVariant], ...] = (
  ("_e64_dpp", EncodingVariant.E64_DPP),
  ("_e32", EncodingVariant.E32),
  ("_e64", EncodingVariant.E64),
  ("_dpp", EncodingVariant.DPP),
  ("_sdwa", EncodingVariant.SDWA),
)

ENCODING_DESCRIPTIONS: Dict[str, str] = {
  # Vector ALU
  "ENC_VOP1": "VOP1 (32-bit): Vector ALU operation with one source",
  "ENC_VOP2": "VOP2 (32-bit): Vector ALU operation with two sources",
  "ENC_VOPC": "VOPC (32-bit): Vector ALU comparison operation",
  "ENC_VOP3": "VOP3 (64-bit): Extended vector ALU with modifiers and additional operand flexibility",
  "ENC_VOP3P": "VOP3P (64-bit): Packed vector ALU operation",
  "VOP3_SDST_ENC": "VOP3 SDST (64-bit): VOP3 with scalar destination",
  # DPP
  "VOP1_VOP_DPP": "VOP1 + DPP16: Data-parallel primitives with 16-lane swizzle",
  "VOP1_VOP_DPP16": "VOP1 + DPP16: Data-parallel primitives with 16-lane swizzle",
  "VOP1_VOP_DPP8": "VOP1 + DPP8: Data-parallel primitives with 8-lane swizzle",
  "VOP2_VOP_DPP": "VOP2 + DPP16: Data-parallel primitives with 16-lane swizzle",
  "VOP2_VOP_DPP16": "VOP2 + DPP16: Data-parallel primitives with 16-lane swizzle",
  "VOP2_VOP_DPP8": "VOP2 + DPP8: Data-parallel primitives with 8-lane swizzle",
  "VOPC_VOP_DPP": "VOPC + DPP16: Comparison with data-parallel primitives (16-lane)",
  "VOPC_VOP_DPP16": "VOPC + DPP16: Comparison with data-parallel primitives (16-lane)",
  "VOPC_VOP_DPP8": "VOPC + DPP8: Comparison with data-parallel primitives (8-lane)",
  "VOP3_VOP_DPP16": "VOP3 + DPP16: Extended VOP3 with data-parallel primitives (16-lane)",
  "VOP3_VOP_DPP8": "VOP3 + DPP8: Extended VOP3 with data-parallel primitives (8-lane)",
  "VOP3P_VOP_DPP16": "VOP3P + DPP16: Packed operation with data-parallel primitives (16-lane)",
  "VOP3P_VOP_DPP8": "VOP3P + DPP8: Packed operation with data-parallel primitives (8-lane)",
  "VOP3_SDST_ENC_VOP_DPP16": "VOP3 SDST + DPP16: VOP3 with scalar destination and DPP (16-lane)",
  "VOP3_SDST_ENC_VOP_DPP8": "VOP3 SDST + DPP8: VOP3 with scalar destination and DPP (8-lane)",
  # SDWA
  "VOP1_VOP_SDWA": "VOP1 + SDWA: Sub-DWORD addressing for byte/word operations",
  "VOP2_VOP_SDWA": "VOP2 + SDWA: Sub-DWORD addressing for byte/word operations",
  "VOPC_VOP_SDWA": "VOPC + SDWA: Comparison with sub-DWORD addressing",
  # Literal forms
  "VOP1_INST_LITERAL": "VOP1 + Literal (64-bit): Includes 32-bit inline constant",
  "VOP2_INST_LITERAL": "VOP2 + Literal (64-bit): Includes 32-bit inline constant",
  "VOPC_INST_LITERAL": "VOPC + Literal (64-bit): Includes 32-bit inline constant",
  "VOP3_INST_LITERAL": "VOP3 + Literal (96-bit): VOP3 with 32-bit inline constant",
  "VOP3P_INST_LITERAL": "VOP3P + Literal (96-bit): Packed operation with 32-bit inline constant",
  "VOP3_SDST_ENC_INST_LITERAL": "VOP3 SDST + Literal (96-bit): VOP3 with scalar destination and literal",
  # Scalar ALU
  "ENC_SOP1": "SOP1 (32-bit): Scalar ALU operation with one source",
  "ENC_SOP2": "SOP2 (32-bit): Scalar ALU operation with two sources",
  "ENC_SOPC": "SOPC (32-bit): Scalar ALU comparison operation",
  "ENC_SOPK": "SOPK (32-bit): Scalar operation with 16-bit inline constant",
  "ENC_SOPP": "SOPP (32-bit): Scalar operation for program control",
  "SOP1_INST_LITERAL": "SOP1 + Literal (64-bit): Scalar operation with 32-bit inline constant",
  "SOP2_INST_LITERAL": "SOP2 + Literal (64-bit): Scalar operation with 32-bit inline constant",
  "SOPC_INST_LITERAL": "SOPC + Literal (64-bit): Scalar comparison with 32-bit inline constant",
  "SOPK_INST_LITERAL": "SOPK + Literal (64-bit): Scalar operation with extended constant",
  # Memory
  "ENC_SMEM": "SMEM: Scalar memory operation",
  "ENC_DS": "DS: Data share (LDS/GDS) operation",
  "ENC_MUBUF": "MUBUF: Untyped buffer memory operation",
  "ENC_MTBUF": "MTBUF: Typed buffer memory operation",
  "ENC_MIMG": "MIMG: Image memory operation",
  "MIMG_NSA1": "MIMG NSA: Non-sequential address mode for images",
  "ENC_FLAT": "FLAT: Flat addressing (global/scratch/LDS)",
  "ENC_FLAT_SCRATCH": "FLAT Scratch: Flat addressing for scratch memory",
  "ENC_FLAT_GLOBAL": "FLAT Global: Flat addressing for global memory",
  # Other
  "ENC_VINTERP": "VINTERP: Vector interpolation operation",
  "ENC_LDSDIR": "LDSDIR: LDS direct read operation",
  "ENC_EXP": "EXP: Export operation for pixel/vertex data",
  "VOPDXY": "VOPDXY: Vector operation with partial derivatives",
  "VOPDXY_INST_LITERAL": "VOPDXY + Literal: Vector partial derivative with inline constant",
}


class SplitMnemonic(NamedTuple):
  """A mnemonic separated into its base name and encoding suffix."""

  base: str
  variant: EncodingVariant


def split_encoding_variant(mnemonic: str) -> SplitMnemonic:
  """
  Strips a known encoding suffix (case-insensitive) from a mnemonic.

  Args:
      mnemonic (str): The mnemonic as written (e.g. ``"V_ADD_F32_e64"``).

  Returns:
      SplitMnemonic: ``("V_ADD_F32", EncodingVariant.E64)``; the variant is
      ``NATIVE`` when no suffix matches.
  """
  lowered = mnemonic.lower()
  for suffix, variant in _SUFFIXES:
    if lowered.endswith(suffix) and len(mnemonic) > len(suffix):
      return SplitMnemonic(mnemonic[: -len(suffix)], variant)
  return SplitMnemonic(mnemonic, EncodingVariant.NATIVE)


def encoding_description(encoding_name: str) -> Optional[str]:
  """
  Returns:
      Optional[str]: Human readable summary of a vendor encoding name.
  """
  return ENCODING_DESCRIPTIONS.get(encoding_name)


def find_matching_encoding(available: Sequence[str], variant: EncodingVariant) -> Optional[str]:
  """
  Picks the encoding an assembler suffix selects.

  Args:
      available (Sequence[str]): The instruction's sorted encoding names.
      variant (EncodingVariant): The suffix that was written.

  Returns:
      Optional[str]: The first matching encoding name, or None.
  """
  if variant == EncodingVariant.NATIVE:
    candidates = (e for e in available if e.startswith("ENC_") and "LITERAL" not in e)
  elif variant == EncodingVariant.E32:
    candidates = (e for e in available if e in ("ENC_VOP1", "ENC_VOP2", "ENC_VOPC"))
  elif variant == EncodingVariant.E64:
    candidates = (e for e in available if e == "ENC_VOP3")
  elif variant == EncodingVariant.DPP:
    candidates = (e for e in available if "DPP" in e)
  elif variant == EncodingVariant.SDWA:
    candidates = (e for e in available if "SDWA" in e)
  else:
    candidates = (e for e in available if e.startswith("VOP3") and "DPP" in e)
  return next(candidates, None)
