from .build import handle_build
from .serve import handle_serve

__all__ = [
  "handle_build",
  "handle_serve",
]
