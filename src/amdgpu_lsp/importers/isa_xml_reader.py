"""
Importer for AMD Machine-Readable ISA Specifications (XML).

Parses the vendor XML files (one per architecture, e.g.
``amdgpu_isa_rdna3_5.xml``) into raw per-file records:

- The governing architecture label: the first ``<ArchitectureName>`` in the file.
- One `RawInstruction` per ``<Instruction>`` (alias name lists are ignored).
- Special registers from ``<OperandPredefinedValues>``, for RDNA files only.

Vendor files are inconsistent, so missing sub-fields do not fail ingestion.
They degrade to ``unknown`` and are recorded as `IngestionWarning` entries on
the returned `SpecFile`, next to the successfully parsed data. Only an
unreadable or malformed file raises `SpecParseError`.
"""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from amdgpu_lsp.errors import SpecParseError
from amdgpu_lsp.importers.operands import RawEncoding, RawOperand, build_args
from amdgpu_lsp.utils.console import log_info, log_warning

logger = logging.getLogger(__name__)


@dataclass
class IngestionWarning:
  """
  A lenient-parsing event: data was missing and a default was used.

  Attributes:
      path (Path): The vendor file.
      instruction (Optional[str]): Instruction being parsed, if any.
      message (str): What was missing and which default was applied.
  """

  path: Path
  instruction: Optional[str]
  message: str

  def __str__(self) -> str:
    where = f"{self.path.name}:{self.instruction}" if self.instruction else self.path.name
    return f"{where}: {self.message}"


@dataclass
class RawInstruction:
  """An instruction as declared in one vendor file, before merging."""

  name: str
  description: Optional[str]
  encodings: List[RawEncoding] = field(default_factory=list)
  args: List[str] = field(default_factory=list)
  arg_types: List[str] = field(default_factory=list)
  arg_data_types: List[str] = field(default_factory=list)

  @property
  def encoding_names(self) -> List[str]:
    """Sorted, de-duplicated names of every declared encoding."""
    return sorted({enc.name for enc in self.encodings if enc.name})


@dataclass
class RawRegister:
  """A ``<PredefinedValue>`` entry: a named register and its vendor text."""

  name: str
  description: Optional[str]


@dataclass
class SpecFile:
  """
  Everything extracted from one vendor file.

  Attributes:
      path (Path): Source file.
      architecture (str): Raw architecture label (not yet normalized).
      instructions (List[RawInstruction]): Instructions in document order.
      registers (List[RawRegister]): Special registers (empty for CDNA files).
      warnings (List[IngestionWarning]): Lenient-parsing events.
  """

  path: Path
  architecture: str
  instructions: List[RawInstruction] = field(default_factory=list)
  registers: List[RawRegister] = field(default_factory=list)
  warnings: List[IngestionWarning] = field(default_factory=list)


def is_rdna_source(path: Path) -> bool:
  """True when the filename identifies an RDNA specification."""
  return "rdna" in path.name.lower()


def collect_spec_files(inputs: Iterable[Path]) -> List[Path]:
  """
  Expands input paths into the list of XML files to ingest.

  Directories contribute their ``*.xml`` children; files are taken as given.
  The result is sorted by filename (then full path), which fixes the
  "first seen" file of the merger independently of filesystem order.

  Args:
      inputs (Iterable[Path]): Files and/or directories.

  Returns:
      List[Path]: XML files in deterministic scan order.
  """
  found: List[Path] = []
  for entry in inputs:
    entry = Path(entry)
    if entry.is_dir():
      found.extend(p for p in entry.iterdir() if p.is_file() and p.suffix.lower() == ".xml")
    else:
      found.append(entry)
  return sorted(set(found), key=lambda p: (p.name, str(p)))


def _text(element: Optional[ET.Element]) -> Optional[str]:
  if element is None or element.text is None:
    return None
  value = element.text.strip()
  return value or None


def _parse_bool(raw: Optional[str]) -> Optional[bool]:
  if raw is None:
    return None
  lowered = raw.strip().lower()
  if lowered == "true":
    return True
  if lowered == "false":
    return False
  return None


def _parse_int(raw: Optional[str]) -> Optional[int]:
  if raw is None:
    return None
  try:
    return int(raw.strip())
  except ValueError:
    return None


class SpecReader:
  """
  Parses vendor ISA XML files using `xml.etree.ElementTree`.
  """

  def read_file(self, path: Path) -> SpecFile:
    """
    Parses a single specification file.

    Args:
        path (Path): The ``.xml`` file.

    Returns:
        SpecFile: Raw instructions, registers and warnings of the file.

    Raises:
        SpecParseError: If the file is missing, unreadable, or not well-formed XML.
    """
    path = Path(path)
    try:
      root = ET.parse(path).getroot()
    except ET.ParseError as e:
      raise SpecParseError(path, f"malformed XML ({e})") from e
    except OSError as e:
      raise SpecParseError(path, f"unreadable ({e.strerror or e})") from e

    spec = SpecFile(path=path, architecture="")
    spec.architecture = self._architecture_label(root, spec)

    for element in root.iter("Instruction"):
      inst = self._parse_instruction(element, spec)
      if inst is not None:
        spec.instructions.append(inst)

    if is_rdna_source(path):
      spec.registers = self._parse_registers(root)

    logger.debug(
      "%s: %d instructions, %d registers, %d warnings",
      path.name,
      len(spec.instructions),
      len(spec.registers),
      len(spec.warnings),
    )
    return spec

  def read_all(self, paths: Sequence[Path]) -> Tuple[List[SpecFile], List[SpecParseError]]:
    """
    Parses many files; a failing file is logged and skipped.

    Args:
        paths (Sequence[Path]): Files in scan order.

    Returns:
        Tuple[List[SpecFile], List[SpecParseError]]: Parsed files (in the same
        order) and the errors of the files that were skipped.
    """
    parsed: List[SpecFile] = []
    failures: List[SpecParseError] = []
    for path in paths:
      log_info(f"Parsing ISA spec: [path]{Path(path).name}[/path]")
      try:
        parsed.append(self.read_file(path))
      except SpecParseError as e:
        log_warning(f"Skipping {e.path.name}: {e.reason}")
        failures.append(e)
    return parsed, failures

  def _architecture_label(self, root: ET.Element, spec: SpecFile) -> str:
    for element in root.iter("ArchitectureName"):
      label = _text(element)
      if label:
        return label
    spec.warnings.append(
      IngestionWarning(spec.path, None, "no ArchitectureName found; using the filename as architecture label")
    )
    return spec.path.stem

  def _parse_instruction(self, element: ET.Element, spec: SpecFile) -> Optional[RawInstruction]:
    # Direct child only: names under <AliasedInstructionNames> are alias lists.
    name = _text(element.find("InstructionName"))
    if not name:
      spec.warnings.append(IngestionWarning(spec.path, None, "instruction without InstructionName skipped"))
      return None

    description = _text(element.find("Description"))
    if description is None:
      spec.warnings.append(IngestionWarning(spec.path, name, "missing Description"))

    encodings = [
      self._parse_encoding(enc, spec, name, report_operands=(position == 0))
      for position, enc in enumerate(element.iter("InstructionEncoding"))
    ]
    if not encodings:
      spec.warnings.append(IngestionWarning(spec.path, name, "no InstructionEncoding; operands unknown"))

    inst = RawInstruction(name=name, description=description, encodings=encodings)
    inst.args, inst.arg_types, inst.arg_data_types = build_args(encodings)
    return inst

  def _parse_encoding(
    self, element: ET.Element, spec: SpecFile, inst_name: str, report_operands: bool
  ) -> RawEncoding:
    encoding = RawEncoding(name=_text(element.find("EncodingName")))
    if encoding.name is None:
      spec.warnings.append(IngestionWarning(spec.path, inst_name, "encoding without EncodingName"))

    for op_el in element.iter("Operand"):
      operand = RawOperand(
        field_name=_text(op_el.find("FieldName")),
        operand_type=_text(op_el.find("OperandType")),
        data_format=_text(op_el.find("DataFormatName")),
        size=_parse_int(_text(op_el.find("OperandSize"))),
        is_input=_parse_bool(op_el.get("Input")),
        is_output=_parse_bool(op_el.get("Output")),
        is_implicit=_parse_bool(op_el.get("IsImplicit")) is True,
        order=_parse_int(op_el.get("Order")),
      )
      # Only the first encoding feeds the operand columns.
      if report_operands and not operand.is_implicit:
        if operand.operand_type is None:
          spec.warnings.append(IngestionWarning(spec.path, inst_name, "operand without OperandType; type unknown"))
        if operand.data_format is None:
          spec.warnings.append(
            IngestionWarning(spec.path, inst_name, "operand without DataFormatName; data type unknown")
          )
      encoding.operands.append(operand)
    return encoding

  def _parse_registers(self, root: ET.Element) -> List[RawRegister]:
    registers: List[RawRegister] = []
    for group in root.iter("OperandPredefinedValues"):
      for value in group.iter("PredefinedValue"):
        name = _text(value.find("Name"))
        if not name:
          continue
        registers.append(RawRegister(name=name, description=_text(value.find("Description"))))
    return registers
