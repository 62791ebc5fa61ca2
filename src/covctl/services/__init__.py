"""Service layer — reactive state, strategy selection, and coordination.

Services may import from domain, config, and infrastructure.
They must never import from commands or output.
"""
