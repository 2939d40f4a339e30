"""Output layer — dependency table markdown, Rich renderers, formatters."""
