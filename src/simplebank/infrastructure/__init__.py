"""Infrastructure layer: database engine, schema, queries, and the store.

This layer depends on stdlib, the domain layer, and SQLAlchemy.
It must never import from services, commands, or output.
"""
