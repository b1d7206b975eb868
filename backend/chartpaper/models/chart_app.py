from sqlalchemy import String, Integer, JSON, ForeignKey, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import Optional
from datetime import datetime
from ..db.base import Base


class ChartApp(Base):
    """
    A workload discovered in a chart's rendered manifest by the engine's parse step.
    """
    __tablename__ = "apps"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    chart_id: Mapped[int] = mapped_column(ForeignKey("charts.id", ondelete="CASCADE"), index=True)

    name: Mapped[str] = mapped_column(String)
    image: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    app_type: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    ports: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    configs: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    mounts: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    chart: Mapped["Chart"] = relationship("Chart", back_populates="apps")

    def __repr__(self):
        return f"<ChartApp(id={self.id}, name={self.name}, chart={self.chart_id})>"
