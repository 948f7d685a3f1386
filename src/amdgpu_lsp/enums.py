"""
Enumerations for amdgpu-lsp.

This module defines the closed vocabularies shared by the ISA pipeline and
the language server.
"""

from enum import Enum


class ArgType(str, Enum):
  """
  Display classification of an instruction operand.

  Derived from the vendor operand type (e.g. ``OPR_VGPR``) at ingestion time.
  """

  IMMEDIATE = "immediate"
  LABEL = "label"
  MEMORY = "memory"
  REGISTER = "register"
  REGISTER_OR_INLINE = "register_or_inline"
  SPECIAL = "special"
  UNKNOWN = "unknown"


class ArchitectureFamily(str, Enum):
  """Instruction-set generations recognised by the architecture normalizer."""

  RDNA = "rdna"
  CDNA = "cdna"


class EncodingVariant(str, Enum):
  """
  Assembler mnemonic suffixes that select a specific encoding.

  ``NATIVE`` means no suffix was written (e.g. ``v_add_f32``).
  """

  NATIVE = "native"
  E32 = "e32"
  E64 = "e64"
  DPP = "dpp"
  SDWA = "sdwa"
  E64_DPP = "e64_dpp"
