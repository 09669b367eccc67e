from __future__ import annotations
import math
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pinmap.core.categories import belongs_to
from pinmap.core.config import settings
from pinmap.core.exceptions import InvalidInput, NotFound, ValidationError
from pinmap.db.session import get_db
from pinmap.schemas.pin import DeleteResult, PinCreate, PinOut, PinPage, VoteRequest
from pinmap.services import pins as pin_service

router = APIRouter(prefix="/api/pins", tags=["pins"])


@router.get("", response_model=PinPage)
def list_pins(
    page: Optional[int] = Query(None, le=pin_service.MAX_PAGE),
    limit: Optional[int] = Query(None),
    main_category: Optional[str] = Query(None, alias="mainCategory"),
    sub_type: Optional[str] = Query(None, alias="subType"),
    db: Session = Depends(get_db),
):
    page = pin_service.effective_page(page)
    limit = pin_service.effective_limit(limit)
    rows, total = pin_service.list_pins(db, page, limit, main_category, sub_type)
    return PinPage(pins=[PinOut.from_model(p) for p in rows], page=page, limit=limit, total=total)


# Must stay above any "/{pin_id}" GET route
@router.get("/near", response_model=List[PinOut])
def nearby_pins(
    lng: float = Query(...),
    lat: float = Query(...),
    max_distance: Optional[int] = Query(None, alias="maxDistance"),
    db: Session = Depends(get_db),
):
    errors = []
    if not math.isfinite(lng) or not -180.0 <= lng <= 180.0:
        errors.append({"field": "lng", "message": "lng must be a finite longitude", "location": "query"})
    if not math.isfinite(lat) or not -90.0 <= lat <= 90.0:
        errors.append({"field": "lat", "message": "lat must be a finite latitude", "location": "query"})
    if errors:
        raise InvalidInput(errors)

    radius = pin_service.effective_max_distance(max_distance)
    return [PinOut.from_model(p) for p in pin_service.nearby_pins(db, lng, lat, radius)]


@router.post("", response_model=PinOut)
def create_pin(payload: PinCreate, db: Session = Depends(get_db)):
    if settings.enforce_subtype_match and not belongs_to(payload.main_category, payload.sub_type):
        raise ValidationError.single(
            "subType", f"subType '{payload.sub_type}' does not belong to {payload.main_category}"
        )
    pin = pin_service.create_pin(db, payload, settings.max_image_bytes)
    return PinOut.from_model(pin)


@router.patch("/{pin_id}/vote", response_model=PinOut)
def vote_pin(pin_id: str, body: VoteRequest, db: Session = Depends(get_db)):
    uid = pin_service.parse_id(pin_id)
    pin = pin_service.vote_pin(db, uid, body.vote) if uid else None
    if not pin:
        raise NotFound("Pin not found")
    return PinOut.from_model(pin)


@router.delete("/{pin_id}", response_model=DeleteResult)
def delete_pin(pin_id: str, db: Session = Depends(get_db)):
    uid = pin_service.parse_id(pin_id)
    if not uid or not pin_service.delete_pin(db, uid):
        raise NotFound("Pin not found")
    return DeleteResult(message="deleted")
