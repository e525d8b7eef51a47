"""
Database models for TinyLink.

Only the SQLAlchemy link store uses these; the other stores keep the same
fields in their own layout.
"""

from .link import LinkRow

__all__ = ["LinkRow"]
