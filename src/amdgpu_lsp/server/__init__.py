"""
Language server: instruction index, document store, feature engine and the
pygls transport.
"""
