"""Schema registry client implementations."""

from schemagate.registry.memory import InMemorySchemaRegistry

__all__ = ["InMemorySchemaRegistry"]
