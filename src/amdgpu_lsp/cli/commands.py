"""
CLI Command Handlers Facade.

Re-exports the handlers from `amdgpu_lsp.cli.handlers` so the dispatcher and
tests have one import location.
"""

from amdgpu_lsp.cli.handlers.build import handle_build
from amdgpu_lsp.cli.handlers.serve import handle_serve

__all__ = [
  "handle_build",
  "handle_serve",
]
