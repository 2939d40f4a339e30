"""Infrastructure layer — remote call cache, provider client, provider session.

This layer depends on stdlib, pydantic and httpx.
It must never import from services, commands, or output.
The service layer bridges between domain records and infrastructure.
"""
