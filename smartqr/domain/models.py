from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, String, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class MetadataEntry(Base):
    __tablename__ = "metadata_entries"

    # Keys carry their own namespace prefix (code-, file-, analytics-).
    key: Mapped[str] = mapped_column(String, primary_key=True)
    # JSONB on Postgres, plain JSON elsewhere so sqlite works for local runs.
    value_json: Mapped[dict[str, Any]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
