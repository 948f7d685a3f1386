"""
Architecture Label Normalization.

Vendor specification files name their architecture in free text
(``"AMD RDNA 3.5"``, ``"AMD Instinct MI300 CDNA 3"``). This module reduces
those labels to compact tags (``rdna35``, ``cdna3``) that the merger compares
for equality, and resolves which tag a document should be filtered by.

Rules:
1.  Lowercase, trim, and split into tokens made of ``[a-z0-9.]``.
2.  The first token containing ``rdna`` or ``cdna`` fixes the family.
3.  The version is taken from digits trailing the family inside that token,
    otherwise from the next purely numeric token. Dots are dropped.
4.  Without a family token, the label is lowercased with whitespace removed.

Normalization is pure and idempotent: ``normalize(normalize(x)) == normalize(x)``.
"""

import re
from typing import Iterable, Optional

from amdgpu_lsp.enums import ArchitectureFamily

_TOKEN_RE = re.compile(r"[a-z0-9.]+")
_LEADING_VERSION_RE = re.compile(r"\d[\d.]*")
_NUMERIC_TOKEN_RE = re.compile(r"\d+(?:\.\d+)*\.?")
_WHITESPACE_RE = re.compile(r"\s+")

_FAMILIES = tuple(family.value for family in ArchitectureFamily)


def _strip_version(raw: str) -> str:
  return raw.replace(".", "")


def normalize_architecture(raw: str) -> str:
  """
  Canonicalizes a free-text architecture label into a family+version tag.

  Args:
      raw (str): The label as found in a vendor file or editor setting.

  Returns:
      str: The normalized tag (e.g. ``"rdna3"``), or the lowercased,
      whitespace-free input when no family is recognised.
  """
  lower = raw.strip().lower()
  tokens = _TOKEN_RE.findall(lower)

  for position, token in enumerate(tokens):
    family = next((name for name in _FAMILIES if name in token), None)
    if family is None:
      continue

    remainder = token[token.index(family) + len(family) :]
    trailing = _LEADING_VERSION_RE.match(remainder)
    version = _strip_version(trailing.group(0)) if trailing else ""

    if not version:
      for follower in tokens[position + 1 :]:
        if _NUMERIC_TOKEN_RE.fullmatch(follower):
          version = _strip_version(follower)
          break

    return f"{family}{version}"

  fallback = _WHITESPACE_RE.sub("", lower)
  # Joining tokens can spell a family ("rd na3" -> "rdna3"); resolve it once
  # more so the result is a fixed point.
  if fallback != lower and any(name in fallback for name in _FAMILIES):
    return normalize_architecture(fallback)
  return fallback


def family_of(tag: str) -> Optional[str]:
  """
  Returns the architecture family of a normalized tag.

  Args:
      tag (str): A normalized architecture tag.

  Returns:
      Optional[str]: ``"rdna"``, ``"cdna"`` or None.
  """
  for family in _FAMILIES:
    if tag.startswith(family):
      return family
  return None


def architecture_for_language(language_id: Optional[str], override: Optional[str] = None) -> Optional[str]:
  """
  Resolves the architecture filter used for a document.

  The editor language id (e.g. ``rdna35``) wins when it names an architecture
  family. Otherwise the user-provided override is used.

  Args:
      language_id (Optional[str]): The document language id sent on open.
      override (Optional[str]): The session-wide architecture override.

  Returns:
      Optional[str]: A normalized tag, or None for "no filter".
  """
  if language_id:
    tag = normalize_architecture(language_id)
    if family_of(tag):
      return tag

  if override and override.strip():
    return normalize_architecture(override)

  return None


def matches_architecture(architectures: Iterable[str], arch_filter: Optional[str]) -> bool:
  """
  Checks whether an instruction's architectures satisfy a filter.

  A bare family filter (``rdna``) accepts every version of that family,
  a versioned filter must match exactly. No filter accepts everything.

  Args:
      architectures (Iterable[str]): Normalized tags the instruction is defined for.
      arch_filter (Optional[str]): The normalized filter tag.

  Returns:
      bool: True if the instruction is available.
  """
  if not arch_filter:
    return True
  if arch_filter in _FAMILIES:
    return any(tag.startswith(arch_filter) for tag in architectures)
  return arch_filter in architectures
