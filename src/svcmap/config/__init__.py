"""Configuration layer — models, unified settings, discovery, and logging."""
