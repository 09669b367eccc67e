# pinmap/schemas/pin.py
from __future__ import annotations
import math
from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pinmap.core.categories import MAIN_CATEGORIES, SUB_TYPES

Coordinate = Annotated[float, Field(allow_inf_nan=False)]


class Location(BaseModel):
    type: Literal["Point"] = "Point"
    # GeoJSON order: [lng, lat]
    coordinates: List[Coordinate] = Field(..., min_length=2, max_length=2)

    @field_validator("coordinates", mode="before")
    @classmethod
    def _numbers_only(cls, v: Any) -> Any:
        # true/false would otherwise coerce to 1.0/0.0
        if isinstance(v, (list, tuple)) and any(isinstance(c, bool) for c in v):
            raise ValueError("coordinates must be numbers")
        return v

    @field_validator("coordinates")
    @classmethod
    def _in_range(cls, v: List[float]) -> List[float]:
        lng, lat = v
        if not -180.0 <= lng <= 180.0:
            raise ValueError("longitude must be between -180 and 180")
        if not -90.0 <= lat <= 90.0:
            raise ValueError("latitude must be between -90 and 90")
        return v

    @property
    def lng(self) -> float:
        return self.coordinates[0]

    @property
    def lat(self) -> float:
        return self.coordinates[1]


# --- Input pieces (what the client sends) ---
class PinCreate(BaseModel):
    main_category: str = Field(..., alias="mainCategory")
    sub_type: str = Field(..., alias="subType")
    title: Optional[str] = Field("", max_length=100)
    location: Location
    image_data: Optional[str] = Field(None, alias="imageData")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("main_category")
    @classmethod
    def _known_main(cls, v: str) -> str:
        if v not in MAIN_CATEGORIES:
            raise ValueError(f"mainCategory must be one of {', '.join(MAIN_CATEGORIES)}")
        return v

    @field_validator("sub_type")
    @classmethod
    def _known_sub(cls, v: str) -> str:
        if v not in SUB_TYPES:
            raise ValueError("subType is not a known sub-type")
        return v

    @field_validator("title", mode="after")
    @classmethod
    def _title_default(cls, v: Optional[str]) -> str:
        return v or ""

    @field_validator("image_data", mode="before")
    @classmethod
    def _image_or_none(cls, v: Any) -> Optional[str]:
        # anything that is not text is treated as "no image"
        return v if isinstance(v, str) and v else None


class VoteRequest(BaseModel):
    vote: int

    @field_validator("vote", mode="before")
    @classmethod
    def _plus_or_minus_one(cls, v: Any) -> int:
        if isinstance(v, bool):
            raise ValueError("vote must be 1 or -1")
        try:
            n = float(v)
        except (TypeError, ValueError):
            raise ValueError("vote must be 1 or -1")
        if n not in (1.0, -1.0):
            raise ValueError("vote must be 1 or -1")
        return int(n)


# --- Outputs ---
class PinOut(BaseModel):
    id: UUID
    title: str = ""
    main_category: str = Field(..., alias="mainCategory")
    sub_type: str = Field(..., alias="subType")
    status: str = "Active"
    votes: int = 0
    image_data: Optional[str] = Field(None, alias="imageData")
    location: Location
    created_at: datetime = Field(..., alias="createdAt")

    model_config = ConfigDict(populate_by_name=True)

    @classmethod
    def from_model(cls, pin) -> "PinOut":
        return cls(
            id=pin.id,
            title=pin.title or "",
            main_category=pin.main_category,
            sub_type=pin.sub_type,
            status=pin.status,
            votes=pin.votes or 0,
            image_data=pin.image_data,
            location=Location(coordinates=[pin.lng, pin.lat]),
            created_at=pin.created_at,
        )


class PinPage(BaseModel):
    pins: List[PinOut]
    page: int
    limit: int
    total: int


class DeleteResult(BaseModel):
    message: str = "deleted"


class Summary(BaseModel):
    total_pins: int = Field(0, alias="totalPins")
    by_main_category: Dict[str, int] = Field(default_factory=dict, alias="byMainCategory")
    by_sub_type: Dict[str, int] = Field(default_factory=dict, alias="bySubType")
    avg_votes: float = Field(0.0, alias="avgVotes")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("avg_votes")
    @classmethod
    def _finite(cls, v: float) -> float:
        return v if math.isfinite(v) else 0.0
