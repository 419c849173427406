"""
schemagate: schema validation and shaping for event-enrichment pipelines.

Validates self-describing JSON attached to events against a schema registry,
and turns tabular query rows into self-describing JSON contexts.
"""

__version__ = "0.1.0"
