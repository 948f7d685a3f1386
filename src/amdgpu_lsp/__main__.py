"""
Allows ``python -m amdgpu_lsp``, which editors can use to launch the server
without the ``amdgpu-lsp`` script on PATH.
"""

import sys

from amdgpu_lsp.cli.__main__ import main

if __name__ == "__main__":
  sys.exit(main())
