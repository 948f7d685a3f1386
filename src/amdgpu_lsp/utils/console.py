"""
Central Logging and Console Utilities.

All diagnostic output of amdgpu-lsp goes through the standard `logging`
library, rendered by `rich`.

The language server speaks its protocol over stdout, so nothing else may ever
be written there while it runs. The console proxy below lets the entry point
re-bind the Rich console (and with it the logging handler) to stderr before
the transport starts, while modules keep importing the same `console` object.

Attributes:
    console (_ConsoleProxy): A global, stable reference to the active Rich Console.
"""

import logging
from typing import Any, Optional, Union

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

# Between INFO (20) and WARNING (30)
SUCCESS_LEVEL_NUM = 25
logging.addLevelName(SUCCESS_LEVEL_NUM, "SUCCESS")

# Third-party loggers that echo every protocol message at INFO
TRANSPORT_LOGGERS = ("pygls",)

_THEME = Theme(
  {
    "logging.level.success": "green",
    "info": "dim cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "green",
    "path": "bold blue",
    "code": "bold magenta",
  }
)


def _make_console(stderr: bool = False) -> Console:
  return Console(theme=_THEME, stderr=stderr)


class _ConsoleProxy:
  """
  A Proxy wrapper around `rich.console.Console`.

  Printing is forwarded to a swappable backend console. Swapping the backend
  also re-installs the `RichHandler` on the root logger so that
  `logging.info(...)` follows the console to its new destination.

  Attributes:
      _backend (Console): The active Rich Console instance.
      _level (int): Root logging level applied on every reconfiguration.
  """

  def __init__(self) -> None:
    self._level = logging.INFO
    self._backend: Console = _make_console()
    self._configure_logging()

  def set_backend(self, new_console: Console) -> None:
    """
    Injects a new Console backend and updates logging handlers.

    Args:
        new_console (Console): The new Rich Console instance to use.
    """
    self._backend = new_console
    self._configure_logging()

  def reset(self, stderr: bool = False) -> None:
    """
    Resets the proxy to a fresh console on stdout (or stderr).

    While bound to stderr the transport loggers are capped at WARNING.

    Args:
        stderr (bool): Bind the new console to standard error.
    """
    self._backend = _make_console(stderr=stderr)
    self._configure_logging()
    transport_level = logging.WARNING if stderr else logging.NOTSET
    for name in TRANSPORT_LOGGERS:
      logging.getLogger(name).setLevel(transport_level)

  def set_level(self, level: Union[int, str]) -> None:
    """
    Changes the root logging level.

    Args:
        level (Union[int, str]): A logging level number or name (e.g. "DEBUG").
    """
    self._level = logging.getLevelName(level.upper()) if isinstance(level, str) else level
    logging.getLogger().setLevel(self._level)

  @property
  def backend(self) -> Console:
    """The currently active Rich Console."""
    return self._backend

  @property
  def is_stderr(self) -> bool:
    """True when output is bound to standard error."""
    return bool(self._backend.stderr)

  def _configure_logging(self) -> None:
    """
    Re-installs the RichHandler on the root logger for the active backend.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
      if isinstance(handler, RichHandler):
        root_logger.removeHandler(handler)

    rich_handler = RichHandler(
      console=self._backend,
      show_time=False,
      omit_repeated_times=False,
      show_path=False,
      markup=True,
      rich_tracebacks=True,
    )
    root_logger.setLevel(self._level)
    root_logger.addHandler(rich_handler)

  def print(self, *args: Any, **kwargs: Any) -> None:
    """Forwards `print` calls to the active backend."""
    self._backend.print(*args, **kwargs)

  def export_text(self, **kwargs: Any) -> str:
    """
    Forwards `export_text` (useful for log capturing in tests).

    Returns:
        str: The captured text output.
    """
    return self._backend.export_text(**kwargs)

  def __getattr__(self, name: str) -> Any:
    return getattr(self._backend, name)


console = _ConsoleProxy()


def set_console(new_console: Console) -> None:
  """
  Injects a specific console instance for both printing and logging.

  Args:
      new_console (Console): The configured Rich console to use globally.
  """
  console.set_backend(new_console)


def use_stderr(level: Optional[Union[int, str]] = None) -> None:
  """
  Routes all console and log output to standard error.

  Must be called before the language server transport starts, since stdout
  carries protocol frames. The pygls loggers are capped at WARNING so that
  message bodies are not echoed even at DEBUG.

  Args:
      level (Optional[Union[int, str]]): Optional logging level to apply.
  """
  if level is not None:
    console.set_level(level)
  console.reset(stderr=True)


def reset_console() -> None:
  """Resets logging and console to standard output."""
  console.reset()


def get_console() -> Console:
  """
  Retrieves the currently active console backend.

  Returns:
      Console: The active Rich Console.
  """
  return console.backend


def log_info(msg: str) -> None:
  """
  Logs an informational message via standard logging.

  Args:
      msg (str): The message content. Can include rich markup like [bold].
  """
  logging.info(f"ℹ️  {msg}", extra={"markup": True})


def log_success(msg: str) -> None:
  """
  Logs a success message via standard logging.

  Args:
      msg (str): The message content.
  """
  logging.log(SUCCESS_LEVEL_NUM, f"✅ {msg}", extra={"markup": True})


def log_warning(msg: str) -> None:
  """
  Logs a warning message via standard logging.

  Args:
      msg (str): The message content.
  """
  logging.warning(f"⚠️  {msg}", extra={"markup": True})


def log_error(msg: str) -> None:
  """
  Logs an error message via standard logging.

  Args:
      msg (str): The message content.
  """
  logging.error(f"❌ {msg}", extra={"markup": True})
