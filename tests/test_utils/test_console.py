"""
Tests for Centralized Logging Utility and Injection Mechanics.

Verifies:
1. Singleton Proxy correctness.
2. Injection capabilities (`set_console`).
3. Re-binding to stderr for the language server.
4. Standard logging wrappers.
"""

import logging

from rich.console import Console

from amdgpu_lsp.utils.console import (
  console,
  get_console,
  log_error,
  log_info,
  log_success,
  log_warning,
  reset_console,
  set_console,
  use_stderr,
)


def test_console_singleton_proxy():
  """
  Verify `console` acts as a proxy to a real Rich console.
  """
  assert callable(console.print)
  assert hasattr(console, "export_text")
  assert isinstance(get_console(), Console)


def test_custom_console_injection():
  """
  Verify we can inject a capturing console and retrieve logs.
  """
  capture_console = Console(record=True, file=None)
  set_console(capture_console)

  log_info("Loaded 12 instructions")
  log_success("Wrote isa.json")

  output = capture_console.export_text()
  assert "Loaded 12 instructions" in output
  assert "Wrote isa.json" in output
  assert "ℹ️" in output
  assert "✅" in output


def test_reset_functionality():
  """
  Verify `reset_console` restores a fresh stdout console.
  """
  temp = Console()
  set_console(temp)
  assert get_console() is temp

  reset_console()
  current = get_console()
  assert current is not temp
  assert not console.is_stderr


def test_use_stderr_keeps_stdout_clean(capsys):
  """
  Verify that after `use_stderr` nothing is written to stdout, since the
  protocol owns it.
  """
  use_stderr("DEBUG")

  log_info("InfoText")
  log_warning("WarnText")

  captured = capsys.readouterr()
  assert console.is_stderr
  assert captured.out == ""
  assert "InfoText" in captured.err
  assert "WarnText" in captured.err
  assert logging.getLogger().level == logging.DEBUG


def test_stderr_mode_quiets_pygls():
  """
  The pygls logger echoes every JSON-RPC body at INFO; it stays capped at
  WARNING while serving and is released again on reset.
  """
  use_stderr("DEBUG")
  assert logging.getLogger("pygls").getEffectiveLevel() == logging.WARNING
  assert not logging.getLogger("pygls.protocol.json_rpc").isEnabledFor(logging.INFO)

  reset_console()
  assert logging.getLogger("pygls").level == logging.NOTSET


def test_logging_wrappers_format(capsys):
  """
  Verify semantic wrappers print their prefixes on stdout by default.
  """
  reset_console()

  log_info("InfoText")
  log_error("ErrorText")

  captured = capsys.readouterr()
  assert "InfoText" in captured.out
  assert "ErrorText" in captured.out
  assert "❌" in captured.out


def test_level_filters_messages():
  capture_console = Console(record=True, file=None)
  set_console(capture_console)
  console.set_level("WARNING")

  log_info("hidden")
  log_warning("shown")

  output = capture_console.export_text()
  assert "hidden" not in output
  assert "shown" in output


def test_proxy_getattr_delegation():
  """
  Attributes not defined on the proxy fall through to the backend.
  """
  width = console.width
  assert isinstance(width, int)
  assert width > 0
