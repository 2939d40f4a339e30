"""svcmap — resolve traced operation names to Datadog services and their dependencies."""

__version__ = "0.1.0"
