"""Infrastructure Layer — cache backend and REST gateway clients, logging setup.

Invariants:
    - Every library exception is mapped to a CatalogError subclass at this boundary
    - Clients are constructed explicitly and injected, never imported as singletons
"""
