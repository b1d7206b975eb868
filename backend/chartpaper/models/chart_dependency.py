from sqlalchemy import String, Integer, ForeignKey, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import Optional
from datetime import datetime
from ..db.base import Base


class ChartDependency(Base):
    """
    A dependency declared in a chart's metadata.
    The named chart may or may not be stored in the catalog yet.
    """
    __tablename__ = "dependencies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    chart_id: Mapped[int] = mapped_column(ForeignKey("charts.id", ondelete="CASCADE"), index=True)

    dependency_name: Mapped[str] = mapped_column(String)
    dependency_version: Mapped[str] = mapped_column(String)  # as declared, not resolved
    repository: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    condition_field: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    # Tags learned by fetching the dependency at store time (best effort)
    image_tag: Mapped[str] = mapped_column(String, default="N/A")
    canary_tag: Mapped[str] = mapped_column(String, default="N/A")

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    chart: Mapped["Chart"] = relationship("Chart", back_populates="dependencies")

    def __repr__(self):
        return f"<ChartDependency(chart_id={self.chart_id}, name={self.dependency_name}, version={self.dependency_version})>"
