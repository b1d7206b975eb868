from sqlalchemy import String, Integer, JSON, DateTime, Text, Boolean, UniqueConstraint, Index, text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import Optional, List
from datetime import datetime
from ..db.base import Base


class Chart(Base):
    """
    One immutable snapshot of a Helm chart at a specific version.
    At most one row per name carries is_latest=True (the current version).
    """
    __tablename__ = "charts"
    __table_args__ = (
        UniqueConstraint("name", "version", name="charts_name_version_key"),
        Index("idx_charts_name_version", "name", "version"),
        # At most one current version per name
        Index(
            "uq_charts_current_name", "name", unique=True,
            postgresql_where=text("is_latest"), sqlite_where=text("is_latest"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, index=True)
    version: Mapped[str] = mapped_column(String)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(String, default="application")  # application | library
    chart_url: Mapped[str] = mapped_column(String)

    # Primary tags derived from the rendered manifest (NULL means "N/A")
    image_tag: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    canary_tag: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    # Derived manifest facts, JSON lists of strings
    container_images: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    ingress_paths: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    service_ports: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    manifest_parsed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    is_latest: Mapped[bool] = mapped_column(Boolean, default=True, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    dependencies: Mapped[List["ChartDependency"]] = relationship(
        "ChartDependency", back_populates="chart", cascade="all, delete-orphan", passive_deletes=True
    )
    apps: Mapped[List["ChartApp"]] = relationship(
        "ChartApp", back_populates="chart", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self):
        return f"<Chart(id={self.id}, name={self.name}, version={self.version}, latest={self.is_latest})>"
