"""
Importers for vendor ISA specification files.
"""
