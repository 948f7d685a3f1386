"""
ISA database pipeline: normalization, merging, register compression and the
snapshot schema.
"""
