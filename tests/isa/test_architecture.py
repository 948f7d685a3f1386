"""
Tests for architecture label normalization and filtering.
"""

import pytest
from hypothesis import given, settings, strategies as st

from amdgpu_lsp.isa.architecture import (
  architecture_for_language,
  family_of,
  matches_architecture,
  normalize_architecture,
)


@pytest.mark.parametrize(
  "raw, expected",
  [
    ("RDNA 3", "rdna3"),
    ("rdna3.5", "rdna35"),
    ("AMD RDNA 3.5", "rdna35"),
    ("AMD Instinct MI300 CDNA 3", "cdna3"),
    ("CDNA4", "cdna4"),
    ("RDNA", "rdna"),
    ("  RDNA   4  ", "rdna4"),
    ("GCN 5", "gcn5"),
    ("Vega 20 Instruction Set", "vega20instructionset"),
  ],
)
def test_normalize_known_labels(raw, expected):
  assert normalize_architecture(raw) == expected


def test_first_family_token_wins():
  assert normalize_architecture("CDNA 3 (based on RDNA 2)") == "cdna3"


def test_whitespace_split_family_is_stable():
  once = normalize_architecture("rd na 3")
  assert normalize_architecture(once) == once


@given(st.text(alphabet=st.characters(min_codepoint=32, max_codepoint=126), max_size=24))
@settings(max_examples=300)
def test_normalization_is_idempotent(raw):
  once = normalize_architecture(raw)
  assert normalize_architecture(once) == once


@given(
  family=st.sampled_from(["rdna", "cdna", "RDNA", "Cdna"]),
  version=st.integers(min_value=0, max_value=99),
  sep=st.sampled_from(["", " ", "  "]),
)
def test_family_and_version_are_extracted(family, version, sep):
  assert normalize_architecture(f"AMD {family}{sep}{version}") == f"{family.lower()}{version}"


def test_family_of():
  assert family_of("rdna35") == "rdna"
  assert family_of("cdna") == "cdna"
  assert family_of("gcn5") is None


def test_language_id_beats_override():
  assert architecture_for_language("rdna35", "CDNA 3") == "rdna35"


def test_override_used_for_generic_language():
  assert architecture_for_language("amdgpu-asm", "CDNA 3") == "cdna3"
  assert architecture_for_language("", "RDNA 4") == "rdna4"


def test_no_architecture_means_no_filter():
  assert architecture_for_language("asm", None) is None
  assert architecture_for_language(None, "  ") is None


def test_matches_architecture():
  tags = ["rdna3", "rdna35"]
  assert matches_architecture(tags, None)
  assert matches_architecture(tags, "rdna")
  assert matches_architecture(tags, "rdna35")
  assert not matches_architecture(tags, "rdna4")
  assert not matches_architecture(tags, "cdna")
