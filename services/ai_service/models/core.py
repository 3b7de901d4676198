"""SQLAlchemy models for the AI Service."""

import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base, UTCDateTime
from sqlalchemy import JSON, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column


class AIInsight(Base):
    """One generated set of business insights, kept as a cache and an audit log.

    ``source`` is ``ai`` for model output and ``fallback`` for the rule-based
    result returned when no model is configured.
    """

    __tablename__ = "ai_insights"
    __table_args__ = (Index("ix_ai_insights_kind_months", "kind", "months"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    kind: Mapped[str] = mapped_column(String(50), nullable=False)  # "predictions"
    months: Mapped[int] = mapped_column(Integer, nullable=False)
    source: Mapped[str] = mapped_column(String(20), nullable=False)

    model_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    input_summary: Mapped[dict] = mapped_column(JSON, nullable=False)
    output_data: Mapped[dict] = mapped_column(JSON, nullable=False)

    latency_ms: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    input_tokens: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    output_tokens: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    requested_by: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now, index=True)

    def __repr__(self):
        return f"<AIInsight {self.kind} {self.months}m {self.source}>"
