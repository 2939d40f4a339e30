"""Service layer — business logic returning ServiceResult.

Services may import from domain, infrastructure and output renderers.
They must never import from commands.
"""
