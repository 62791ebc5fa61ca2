"""Built-in plugins shipped with covctl."""
