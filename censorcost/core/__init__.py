"""
Core domain models, numerical primitives, contracts and the error taxonomy.

This package is independent of external systems (relays, databases, HTTP).
"""
