"""Data models shared across SearchTank components."""

from searchtank.models.document import Document
from searchtank.models.query import RawMatch, RawSearchResponse, SearchRequest

__all__ = ["Document", "RawMatch", "RawSearchResponse", "SearchRequest"]
