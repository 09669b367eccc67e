from __future__ import annotations
import logging
from typing import Optional, Tuple
from uuid import UUID

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.orm import Session

from pinmap.models.pin import Pin
from pinmap.schemas.pin import PinCreate, Summary
from pinmap.services.geodesy import bounding_box, distance_m
from pinmap.services.images import sanitize_image_data

logger = logging.getLogger(__name__)

MAX_LIMIT = 500
DEFAULT_LIMIT = 200
# Keeps (page - 1) * MAX_LIMIT inside a 64-bit OFFSET
MAX_PAGE = 1_000_000_000
NEARBY_LIMIT = 200
DEFAULT_MAX_DISTANCE_M = 50_000
MAX_DISTANCE_CAP_M = 200_000


def parse_id(raw) -> Optional[UUID]:
    # Malformed ids simply do not resolve
    if isinstance(raw, UUID):
        return raw
    try:
        return UUID(str(raw))
    except (TypeError, ValueError, AttributeError):
        return None


def effective_page(page: Optional[int]) -> int:
    return max(1, page or 1)


def effective_limit(limit: Optional[int]) -> int:
    if not limit:
        return DEFAULT_LIMIT
    return max(1, min(MAX_LIMIT, limit))


def effective_max_distance(max_distance: Optional[int]) -> int:
    if max_distance is None:
        return DEFAULT_MAX_DISTANCE_M
    return max(0, min(MAX_DISTANCE_CAP_M, max_distance))


def _filters(main_category: Optional[str], sub_type: Optional[str]):
    clauses = []
    if main_category:
        clauses.append(Pin.main_category == main_category)
    if sub_type:
        clauses.append(Pin.sub_type == sub_type)
    return clauses


def list_pins(
    db: Session,
    page: int = 1,
    limit: int = DEFAULT_LIMIT,
    main_category: Optional[str] = None,
    sub_type: Optional[str] = None,
) -> Tuple[list[Pin], int]:
    clauses = _filters(main_category, sub_type)
    # Newest first; id breaks timestamp ties so pages never overlap
    rows = db.scalars(
        select(Pin)
        .where(*clauses)
        .order_by(Pin.created_at.desc(), Pin.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()
    total = db.scalar(select(func.count()).select_from(Pin).where(*clauses)) or 0
    return list(rows), total


def nearby_pins(db: Session, lng: float, lat: float, max_distance: int) -> list[Pin]:
    min_lat, max_lat, lng_ranges = bounding_box(lng, lat, max_distance)
    lng_clause = or_(*[and_(Pin.lng >= west, Pin.lng <= east) for west, east in lng_ranges])
    candidates = db.scalars(
        select(Pin).where(Pin.lat >= min_lat, Pin.lat <= max_lat, lng_clause)
    ).all()

    scored = []
    for pin in candidates:
        d = distance_m(lng, lat, pin.lng, pin.lat)
        if d <= max_distance:
            scored.append((d, pin))
    scored.sort(key=lambda item: (item[0], -item[1].created_at.timestamp()))
    return [pin for _, pin in scored[:NEARBY_LIMIT]]


def create_pin(db: Session, pin_in: PinCreate, max_image_bytes: int) -> Pin:
    image = sanitize_image_data(pin_in.image_data, max_image_bytes)
    if pin_in.image_data and image is None:
        logger.info("Dropping oversize image on new %s/%s pin", pin_in.main_category, pin_in.sub_type)

    pin = Pin(
        title=pin_in.title or "",
        main_category=pin_in.main_category,
        sub_type=pin_in.sub_type,
        image_data=image,
        lng=pin_in.location.lng,
        lat=pin_in.location.lat,
    )
    db.add(pin)
    db.commit()
    db.refresh(pin)
    logger.info("Pin saved: %s", pin.id)
    return pin


def vote_pin(db: Session, pin_id: UUID, vote: int) -> Optional[Pin]:
    # Single-statement increment; the store keeps it atomic per row
    result = db.execute(
        update(Pin).where(Pin.id == pin_id).values(votes=Pin.votes + vote)
    )
    if result.rowcount == 0:
        db.rollback()
        return None
    db.commit()
    pin = db.get(Pin, pin_id, populate_existing=True)
    logger.info("Pin %s voted %+d -> %s", pin_id, vote, pin.votes if pin else "?")
    return pin


def delete_pin(db: Session, pin_id: UUID) -> bool:
    pin = db.get(Pin, pin_id)
    if not pin:
        return False
    db.delete(pin)
    db.commit()
    logger.info("Pin deleted: %s", pin_id)
    return True


def summarize(db: Session) -> Summary:
    rows = db.execute(
        select(Pin.main_category, Pin.sub_type, func.count(), func.coalesce(func.sum(Pin.votes), 0))
        .group_by(Pin.main_category, Pin.sub_type)
    ).all()

    total = 0
    votes_total = 0
    by_main: dict[str, int] = {}
    by_sub: dict[str, int] = {}
    for main, sub, count, votes in rows:
        total += count
        votes_total += votes
        by_main[main] = by_main.get(main, 0) + count
        by_sub[sub] = by_sub.get(sub, 0) + count

    return Summary(
        total_pins=total,
        by_main_category=by_main,
        by_sub_type=by_sub,
        avg_votes=votes_total / total if total else 0.0,
    )
