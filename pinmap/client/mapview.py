# pinmap/client/mapview.py
from __future__ import annotations
from typing import Iterable, Protocol

from pinmap.client.render import popup_html
from pinmap.schemas.pin import PinOut

DEFAULT_CENTER = (20.5937, 78.9629)
DEFAULT_ZOOM = 5
LOCATE_ZOOM = 13
BOUNDS_PAD = 0.2


class MapWidget(Protocol):
    """The tile map. Takes (lat, lng) like most web map widgets."""

    def clear_markers(self) -> None: ...

    def add_marker(self, lat: float, lng: float, popup_html: str) -> None: ...

    def set_view(self, lat: float, lng: float, zoom: int) -> None: ...

    def fit_bounds(self, south: float, west: float, north: float, east: float) -> None: ...


class PinMarkers:
    def __init__(self, widget: MapWidget):
        self.widget = widget
        self.widget.set_view(*DEFAULT_CENTER, DEFAULT_ZOOM)

    def render(self, pins: Iterable[PinOut]) -> None:
        self.widget.clear_markers()
        for pin in pins:
            self.add(pin)

    def add(self, pin: PinOut) -> None:
        # stored [lng, lat] -> widget (lat, lng)
        lng, lat = pin.location.coordinates
        self.widget.add_marker(lat, lng, popup_html(pin))

    def center_on(self, lat: float, lng: float, zoom: int = LOCATE_ZOOM) -> None:
        self.widget.set_view(lat, lng, zoom)

    def fit_to_pins(self, pins: Iterable[PinOut]) -> None:
        pins = list(pins)
        if not pins:
            return
        lats = [p.location.lat for p in pins]
        lngs = [p.location.lng for p in pins]
        south, north = min(lats), max(lats)
        west, east = min(lngs), max(lngs)
        dlat = (north - south) * BOUNDS_PAD
        dlng = (east - west) * BOUNDS_PAD
        self.widget.fit_bounds(
            max(-90.0, south - dlat),
            max(-180.0, west - dlng),
            min(90.0, north + dlat),
            min(180.0, east + dlng),
        )
