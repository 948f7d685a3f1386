"""
Command-line interface of amdgpu-lsp.

``amdgpu-lsp build`` produces the ISA database from vendor XML;
``amdgpu-lsp serve`` (or no sub-command) runs the language server on stdio.
Argument parsing lives in ``__main__``, the work in ``handlers``.
"""
