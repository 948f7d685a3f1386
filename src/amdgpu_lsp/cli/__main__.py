"""
Main Entry Point for amdgpu-lsp CLI.

This module handles argument parsing and dispatches to specific command
handlers defined in `amdgpu_lsp.cli.commands`. Without a sub-command the
language server is started, which is how editor clients launch it.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from amdgpu_lsp import __version__
from amdgpu_lsp.cli import commands


def main(argv: Optional[List[str]] = None) -> int:
  """
  Main CLI entry point.

  Parses arguments via argparse and calls the appropriate handler function.

  Args:
      argv: Optional list of command line arguments (defaults to sys.argv).

  Returns:
      int: Exit code (0 for success, non-zero for failure).
  """
  parser = argparse.ArgumentParser(description="amdgpu-lsp: AMD GPU assembly language server")
  parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

  subparsers = parser.add_subparsers(dest="command")

  # --- Command: BUILD ---
  cmd_build = subparsers.add_parser("build", help="Build the ISA database from vendor XML files")
  cmd_build.add_argument("inputs", nargs="+", type=Path, help="ISA XML files or directories")
  cmd_build.add_argument(
    "-o",
    "--output",
    type=Path,
    default=None,
    help="Output JSON file (default: the bundled data/isa.json)",
  )
  cmd_build.add_argument(
    "--minify",
    action="store_true",
    default=None,
    help="Write compact JSON without whitespace",
  )
  cmd_build.add_argument("--log-level", default=None, help="Logging level (DEBUG, INFO, WARNING, ...)")

  # --- Command: SERVE ---
  cmd_serve = subparsers.add_parser("serve", help="Run the language server on stdio (default)")
  cmd_serve.add_argument(
    "--data",
    type=Path,
    default=None,
    help="ISA database path (overrides AMDGPU_LSP_DATA and pyproject.toml)",
  )
  cmd_serve.add_argument(
    "--architecture",
    default=None,
    help="Fallback architecture for documents that do not name one (e.g. 'RDNA 3.5')",
  )
  cmd_serve.add_argument("--log-level", default=None, help="Logging level (DEBUG, INFO, WARNING, ...)")

  args = parser.parse_args(argv)

  if args.command == "build":
    return commands.handle_build(args.inputs, args.output, args.minify, args.log_level)

  elif args.command == "serve":
    return commands.handle_serve(args.data, args.architecture, args.log_level)

  return commands.handle_serve()


if __name__ == "__main__":
  sys.exit(main())
