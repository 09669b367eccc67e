# pinmap/client/render.py
# HTML fragments and short texts shown by the board view.
from __future__ import annotations
from html import escape
from typing import Iterable, List, Optional

from pinmap.core.categories import sub_types_for
from pinmap.schemas.pin import PinOut, Summary

LIST_CAP = 50


def escape_html(s) -> str:
    return escape(str(s or ""), quote=True)


def pin_label(pin: PinOut) -> str:
    return pin.title or f"{pin.main_category} - {pin.sub_type}"


def alerts_list_html(pins: Iterable[PinOut]) -> str:
    pins = list(pins)
    if not pins:
        return '<div class="list-group-item">No alerts</div>'

    rows = []
    for pin in pins[:LIST_CAP]:
        pid = escape_html(pin.id)
        rows.append(
            '<div class="list-group-item d-flex justify-content-between align-items-center">'
            f"<div><strong>{escape_html(pin.title or pin.sub_type)}</strong><br>"
            f"<small>{pin.location.lat:.4f}, {pin.location.lng:.4f}</small></div>"
            '<div class="text-end">'
            f'<div class="mb-1"><small>Votes: <span data-id="{pid}" class="vote-count">{pin.votes}</span></small></div>'
            "<div>"
            f'<button class="btn btn-sm btn-outline-success me-1" data-id="{pid}" data-vote="1">+1</button>'
            f'<button class="btn btn-sm btn-outline-danger me-1" data-id="{pid}" data-vote="-1">-1</button>'
            f'<button class="btn btn-sm btn-outline-secondary" data-id="{pid}" data-clear="true">Clear</button>'
            "</div></div></div>"
        )
    return "".join(rows)


def popup_html(pin: PinOut) -> str:
    img = ""
    if pin.image_data:
        img = (
            f'<div><img src="{escape_html(pin.image_data)}" '
            'style="max-width:150px;border-radius:6px;margin-top:6px" /></div>'
        )
    return (
        f"<b>{escape_html(pin_label(pin))}</b><br>"
        f"<small>{escape_html(pin.main_category)} › {escape_html(pin.sub_type)}</small><br>"
        f"Votes: {pin.votes}{img}"
    )


def summary_text(summary: Summary) -> str:
    parts = [f"Active {summary.total_pins} reports", f"Avg votes {summary.avg_votes:.2f}"]
    parts.extend(f"{k}:{v}" for k, v in summary.by_main_category.items())
    return " · ".join(parts)


def coords_text(lat: float, lng: float) -> str:
    return f"{lat:.6f}, {lng:.6f}"


def sub_type_options(main: Optional[str]) -> List[str]:
    """Options for the dependent subtype selector; empty until a category is chosen."""
    return sub_types_for(main)
