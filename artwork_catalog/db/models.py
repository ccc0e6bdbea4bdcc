"""
SQLAlchemy models for the artwork overlay.
"""

from sqlalchemy import Boolean, Column, Date, DateTime, Index, String, Text, text
from sqlalchemy.sql import func

from ..schemas import ArtworkRow
from .base import Base


class ArtworkModel(Base):
    """User-editable artwork fields.

    Empty strings and NULL dates mean "defer to the value derived from the
    artwork's storage namespace".
    """

    __tablename__ = "artworks"

    id = Column(String(64), primary_key=True)
    title = Column(Text, nullable=False, default="", server_default="")
    painted_location = Column(Text, nullable=False, default="", server_default="")
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    in_progress = Column(Boolean, nullable=False, default=False, server_default=text("false"))
    detalle = Column(Text, nullable=False, default="", server_default="")
    bitacora = Column(Text, nullable=False, default="", server_default="")
    primary_image = Column(Text, nullable=False, default="", server_default="")

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Titles are unique once set; untitled rows may repeat the empty title.
    __table_args__ = (
        Index(
            "artworks_title_unique",
            "title",
            unique=True,
            postgresql_where=text("title <> ''"),
            sqlite_where=text("title <> ''"),
        ),
    )

    def to_row(self) -> ArtworkRow:
        return ArtworkRow(
            id=self.id,
            title=self.title or "",
            painted_location=self.painted_location or "",
            start_date=self.start_date,
            end_date=self.end_date,
            in_progress=bool(self.in_progress),
            detalle=self.detalle or "",
            bitacora=self.bitacora or "",
            primary_image=self.primary_image or "",
        )
