"""Multi-tenant task manager HTTP API."""

__version__ = "0.1.0"
