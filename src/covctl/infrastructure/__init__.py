"""Infrastructure layer — SQLite persistence, local workspace host, output cleaner.

May import from domain and config. Must never import from services,
commands, or output.
"""
