"""
SQLAlchemy ORM Models for EPG Channel Browser

This module defines the database models for channels, refresh metadata and reports.
"""
from datetime import datetime, timezone
from sqlalchemy import Integer, String, Text, DateTime, Index
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models"""
    pass


class Channel(Base):
    """Channel entry parsed from an upstream *.channels.xml file"""
    __tablename__ = "channels"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    site: Mapped[str] = mapped_column(String, nullable=False)
    lang: Mapped[str] = mapped_column(String, nullable=False)
    xmltv_id: Mapped[str] = mapped_column(String, nullable=False, default="")
    site_id: Mapped[str] = mapped_column(String, nullable=False, default="")
    name: Mapped[str] = mapped_column(String, nullable=False)
    country: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("idx_site", "site"),
        Index("idx_lang", "lang"),
        Index("idx_country", "country"),
        Index("idx_name", "name"),
        Index("idx_xmltv_id", "xmltv_id"),
    )

    def __repr__(self) -> str:
        return f"<Channel(id={self.id}, xmltv_id={self.xmltv_id}, site={self.site})>"


class Metadata(Base):
    """Key/value store for refresh bookkeeping (e.g. last_update)"""
    __tablename__ = "metadata"

    key: Mapped[str] = mapped_column(String, primary_key=True)
    value: Mapped[str | None] = mapped_column(Text, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(timezone.utc))

    def __repr__(self) -> str:
        return f"<Metadata(key={self.key}, value={self.value})>"


class Report(Base):
    """User-submitted problem report for a channel (append-only)"""
    __tablename__ = "reports"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    channel_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    xmltv_id: Mapped[str | None] = mapped_column(String, nullable=True)
    channel_name: Mapped[str | None] = mapped_column(String, nullable=True)
    site: Mapped[str | None] = mapped_column(String, nullable=True)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(timezone.utc))

    def __repr__(self) -> str:
        return f"<Report(id={self.id}, channel_id={self.channel_id})>"
