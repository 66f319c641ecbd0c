"""TaskHub: multi-tenant workspace manager."""

__version__ = "1.0.0"
