"""covctl — settings and coordination layer for coverage tooling."""

__version__ = "0.1.0"
