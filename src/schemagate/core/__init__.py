# src/schemagate/core/__init__.py
"""Core infrastructure: Configuration, Logging, JSON parsing.

Import from the submodules directly (schemagate.core.config,
schemagate.core.logging); config pulls in the sqlquery output models.
"""
