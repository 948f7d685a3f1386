"""
Runtime Configuration Store.

Resolves the settings of the ``serve`` and ``build`` commands from, in order
of precedence:

1.  Command line arguments.
2.  Environment variables (``AMDGPU_LSP_DATA``, ``AMDGPU_LSP_LOG_LEVEL``).
3.  The ``[tool.amdgpu_lsp]`` section of the nearest ``pyproject.toml``.
4.  Built-in defaults (the bundled ``data/isa.json``).
"""

import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from amdgpu_lsp.isa.architecture import normalize_architecture
from amdgpu_lsp.isa.paths import DATA_ENV_VAR, default_snapshot_path

if sys.version_info >= (3, 11):
  import tomllib
else:
  try:
    import tomli as tomllib
  except ImportError:
    tomllib = None  # type: ignore

LOG_LEVEL_ENV_VAR = "AMDGPU_LSP_LOG_LEVEL"
TOOL_SECTION = "amdgpu_lsp"

_LOG_LEVELS = ("DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")

logger = logging.getLogger(__name__)


def _validate_log_level(v: str) -> str:
  level = v.strip().upper()
  if level not in _LOG_LEVELS:
    raise ValueError(f"Unknown log level: '{v}'. Supported levels: {list(_LOG_LEVELS)}")
  return level


class ServerConfig(BaseModel):
  """
  Settings of the language server process.
  """

  data_path: Path = Field(default_factory=default_snapshot_path, description="Location of the ISA snapshot.")
  architecture: Optional[str] = Field(None, description="Normalized architecture override.")
  log_level: str = Field("INFO", description="Root logging level.")

  @field_validator("architecture")
  @classmethod
  def normalize_override(cls, v: Optional[str]) -> Optional[str]:
    """
    Normalizes the architecture override (``"RDNA 3"`` -> ``"rdna3"``).

    Args:
        v (Optional[str]): The raw override.

    Returns:
        Optional[str]: The normalized tag, or None when blank.
    """
    if v is None or not v.strip():
      return None
    return normalize_architecture(v)

  @field_validator("log_level")
  @classmethod
  def validate_log_level(cls, v: str) -> str:
    """
    Ensures the log level is a known level name.

    Raises:
        ValueError: If the level is unknown.
    """
    return _validate_log_level(v)

  @classmethod
  def load(
    cls,
    data_path: Optional[Path] = None,
    architecture: Optional[str] = None,
    log_level: Optional[str] = None,
    search_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
  ) -> "ServerConfig":
    """
    Loads configuration from the environment and pyproject.toml, then applies CLI overrides.

    Args:
        data_path (Optional[Path]): Override for the snapshot location.
        architecture (Optional[str]): Override for the architecture filter.
        log_level (Optional[str]): Override for the logging level.
        search_path (Optional[Path]): Directory to start searching for TOML config.
        environ (Optional[Mapping[str, str]]): Environment to read (defaults to ``os.environ``).

    Returns:
        ServerConfig: The fully resolved configuration object.
    """
    env = os.environ if environ is None else environ
    toml_config, toml_dir = _load_toml_settings(search_path or Path.cwd())

    # 1. Snapshot location
    final_data: Optional[Path] = data_path
    if final_data is None and env.get(DATA_ENV_VAR):
      final_data = Path(env[DATA_ENV_VAR])
    if final_data is None and "data_path" in toml_config:
      final_data = _resolve_relative(toml_config["data_path"], toml_dir)

    # 2. Architecture override
    final_arch = architecture or toml_config.get("architecture")

    # 3. Logging
    final_level = log_level or env.get(LOG_LEVEL_ENV_VAR) or toml_config.get("log_level", "INFO")

    values: Dict[str, Any] = {"architecture": final_arch, "log_level": final_level}
    if final_data is not None:
      values["data_path"] = final_data
    return cls(**values)


class BuildConfig(BaseModel):
  """
  Settings of an offline snapshot build.
  """

  inputs: List[Path] = Field(..., min_length=1, description="XML files or directories to ingest.")
  output: Path = Field(default_factory=default_snapshot_path, description="Destination of the snapshot.")
  minify: bool = Field(False, description="Write compact JSON.")
  log_level: str = Field("INFO", description="Root logging level.")

  @field_validator("log_level")
  @classmethod
  def validate_log_level(cls, v: str) -> str:
    """
    Ensures the log level is a known level name.

    Raises:
        ValueError: If the level is unknown.
    """
    return _validate_log_level(v)

  @classmethod
  def load(
    cls,
    inputs: List[Path],
    output: Optional[Path] = None,
    minify: Optional[bool] = None,
    log_level: Optional[str] = None,
    search_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
  ) -> "BuildConfig":
    """
    Loads build settings from pyproject.toml and overrides with CLI arguments.

    Args:
        inputs (List[Path]): Vendor files or directories.
        output (Optional[Path]): Override for the output path.
        minify (Optional[bool]): Override for compact output.
        log_level (Optional[str]): Override for the logging level.
        search_path (Optional[Path]): Directory to start searching for TOML config.
        environ (Optional[Mapping[str, str]]): Environment to read (defaults to ``os.environ``).

    Returns:
        BuildConfig: The fully resolved configuration object.
    """
    env = os.environ if environ is None else environ
    toml_config, toml_dir = _load_toml_settings(search_path or Path.cwd())

    values: Dict[str, Any] = {
      "inputs": inputs,
      "log_level": log_level or env.get(LOG_LEVEL_ENV_VAR) or toml_config.get("log_level", "INFO"),
    }

    if output is not None:
      values["output"] = output
    elif "output" in toml_config:
      values["output"] = _resolve_relative(toml_config["output"], toml_dir)

    if minify is not None:
      values["minify"] = minify
    else:
      values["minify"] = bool(toml_config.get("minify", False))

    return cls(**values)


def _resolve_relative(raw: str, base: Optional[Path]) -> Path:
  path = Path(raw)
  if base is not None and not path.is_absolute():
    return (base / path).resolve()
  return path


def _load_toml_settings(start_path: Path) -> Tuple[Dict[str, Any], Optional[Path]]:
  """
  Recursively searches parents for 'pyproject.toml' and extracts config.

  Args:
      start_path (Path): Directory to start search from.

  Returns:
      Tuple[Dict, Optional[Path]]: The config dict and the directory definition was found in.
  """
  if not tomllib:
    return {}, None

  current = start_path.resolve()

  for parent in [current, *current.parents]:
    toml_path = parent / "pyproject.toml"
    if toml_path.exists() and toml_path.is_file():
      try:
        with open(toml_path, "rb") as f:
          data = tomllib.load(f)
      except (OSError, tomllib.TOMLDecodeError) as e:
        logger.debug("Ignoring unreadable %s: %s", toml_path, e)
        return {}, None

      tool_section = data.get("tool", {})
      return tool_section.get(TOOL_SECTION, {}), parent

  return {}, None
