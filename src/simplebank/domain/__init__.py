"""Domain layer: ledger models, error taxonomy, and ordering rules.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
