"""Domain layer — commands, overlay names, and the request model.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
