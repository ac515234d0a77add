"""HTTP client for the hosted IndexTank-style search service."""

from searchtank.client.client import ApiClient, IndexClient

__all__ = ["ApiClient", "IndexClient"]
