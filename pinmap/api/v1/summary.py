from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pinmap.db.session import get_db
from pinmap.schemas.pin import Summary
from pinmap.services import pins as pin_service

router = APIRouter(prefix="/api", tags=["summary"])


@router.get("/summary", response_model=Summary)
def summary(db: Session = Depends(get_db)):
    # Recomputed from a live scan on every call
    return pin_service.summarize(db)
