"""
Cachefront - Cache Table Models

SQLAlchemy model for the table-backed cache driver.
"""

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(AsyncAttrs, DeclarativeBase):
    """Base class for cache table models."""

    pass


class CacheEntry(Base):
    """
    One cached value.

    ``expiration`` is stored as naive UTC; NULL means the entry never expires.
    ``value`` holds the JSON payload as text so the table stays readable
    from any SQL client.
    """

    __tablename__ = "cache"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    expiration: Mapped[datetime | None] = mapped_column(DateTime, nullable=True, index=True)

    def __repr__(self) -> str:
        return f"CacheEntry(key={self.key!r}, expiration={self.expiration!r})"
