"""SQLAlchemy ORM schema for the site's extension registry.

Mirrors the host's ``civicrm_extension`` table: one row per extension the
site has installed (active or disabled). Uninstalled extensions have no row.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all cv ORM models."""

    pass


class ExtensionRecord(Base):
    """Installation record of one extension."""

    __tablename__ = "civicrm_extension"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    type: Mapped[str] = mapped_column(String(32), nullable=False, default="module")
    full_name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    label: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    file: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    schema_version: Mapped[Optional[str]] = mapped_column(String(63), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
