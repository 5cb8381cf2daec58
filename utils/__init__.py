"""
Shared helpers: item paths and value conversion.
"""
