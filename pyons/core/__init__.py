"""Core components for the pyons configuration layer.

This package contains the property store, its key and enum vocabulary, the
client exception type, and the abstract ordered-consumer contract.
"""
