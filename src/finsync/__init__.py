"""finsync - Resilient sync-and-cache client for a personal-finance GraphQL API."""

__version__ = "0.1.0"
