"""Domain layer — link model, path algebra, and rename planning.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
