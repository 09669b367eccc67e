from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from pinmap.schemas.pin import PinOut


@dataclass
class BoardState:
    pins: List[PinOut] = field(default_factory=list)
    page: int = 1
    total: int = 0
    category_filter: Optional[str] = None
    # (lng, lat), the order the API stores
    selected_coords: Optional[Tuple[float, float]] = None
    list_token: int = 0
    summary_token: int = 0

    def index_of(self, pin_id: str) -> int:
        for i, pin in enumerate(self.pins):
            if str(pin.id) == str(pin_id):
                return i
        return -1

    def find(self, pin_id: str) -> Optional[PinOut]:
        i = self.index_of(pin_id)
        return self.pins[i] if i != -1 else None

    def reached_end(self) -> bool:
        return len(self.pins) >= self.total

    def next_list_token(self) -> int:
        self.list_token += 1
        return self.list_token

    def next_summary_token(self) -> int:
        self.summary_token += 1
        return self.summary_token
