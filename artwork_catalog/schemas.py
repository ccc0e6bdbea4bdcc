from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DATE_FORMAT = "%Y-%m-%d"

# Keys always present in the serialized artwork, even when empty.
_ALWAYS_SERIALIZED = {"id", "title", "images"}


def _parse_date(value: str) -> date:
    return datetime.strptime(value, DATE_FORMAT).date()


class Artwork(BaseModel):
    """Assembled view of one artwork.

    Computed on every request from the storage backend plus the optional
    database overlay; never persisted as a whole.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str = ""
    images: List[str] = Field(default_factory=list)
    videos: List[str] = Field(default_factory=list)
    detalle: str = ""
    painted_location: str = Field(default="", alias="paintedLocation")
    start_date: str = Field(default="", alias="startDate")
    end_date: str = Field(default="", alias="endDate")
    in_progress: bool = Field(default=False, alias="inProgress")
    bitacora: str = ""
    primary_image: str = Field(default="", alias="primaryImage")

    @property
    def has_media(self) -> bool:
        return bool(self.images or self.videos)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with camelCase keys, omitting empty optional fields."""
        data = self.model_dump(by_alias=True)
        return {
            key: value
            for key, value in data.items()
            if key in _ALWAYS_SERIALIZED or value
        }


class ArtworkMeta(BaseModel):
    """Contents of a ``meta.json`` sidecar file."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    painted_location: str = Field(default="", alias="paintedLocation")
    start_date: str = Field(default="", alias="startDate")
    end_date: str = Field(default="", alias="endDate")
    in_progress: bool = Field(default=False, alias="inProgress")

    @field_validator("painted_location", "start_date", "end_date", mode="before")
    @classmethod
    def _clean_text(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()

    @field_validator("in_progress", mode="before")
    @classmethod
    def _null_is_false(cls, value: Any) -> Any:
        return False if value is None else value

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class ArtworkRow(BaseModel):
    """Editable fields stored in the database overlay.

    Empty strings and ``None`` mean "defer to the storage-derived value".
    """

    id: str
    title: str = ""
    painted_location: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    in_progress: bool = False
    detalle: str = ""
    bitacora: str = ""
    primary_image: str = ""


class ArtworkCreate(BaseModel):
    """Admin request body for creating an artwork."""

    title: str = ""


class ArtworkUpdate(BaseModel):
    """Admin request body for replacing an artwork's editable fields."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    painted_location: str = Field(default="", alias="paintedLocation")
    start_date: str = Field(default="", alias="startDate")
    end_date: str = Field(default="", alias="endDate")
    in_progress: bool = Field(default=False, alias="inProgress")
    detalle: str = ""
    bitacora: str = ""
    primary_image: str = Field(default="", alias="primaryImage")

    @field_validator("painted_location", "primary_image")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()

    @field_validator("start_date", "end_date")
    @classmethod
    def _iso_date_or_blank(cls, value: str) -> str:
        value = value.strip()
        if value:
            try:
                datetime.strptime(value, DATE_FORMAT)
            except ValueError:
                raise ValueError("dates must use the YYYY-MM-DD format")
        return value

    def parsed_start_date(self) -> Optional[date]:
        return _parse_date(self.start_date) if self.start_date else None

    def parsed_end_date(self) -> Optional[date]:
        return _parse_date(self.end_date) if self.end_date else None

    def to_meta(self) -> ArtworkMeta:
        return ArtworkMeta(
            painted_location=self.painted_location,
            start_date=self.start_date,
            end_date=self.end_date,
            in_progress=self.in_progress,
        )


class ArtworkListResponse(BaseModel):
    artworks: List[Artwork]
    total: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "artworks": [artwork.to_dict() for artwork in self.artworks],
            "total": self.total,
        }
