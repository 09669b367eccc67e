# pinmap/client/board.py
"""
Board controller: keeps the loaded pins, drives the view and the map.

All state lives on a BoardState owned by the controller. Network calls are
awaited; list and summary responses carry a token so that a slow, superseded
response never overwrites newer state.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Protocol, Tuple

from pinmap.client.api import ApiError, PinsApi
from pinmap.client.mapview import MapWidget, PinMarkers
from pinmap.client.render import (
    alerts_list_html,
    coords_text,
    sub_type_options,
    summary_text,
)
from pinmap.client.state import BoardState
from pinmap.schemas.pin import PinOut
from pinmap.services.images import to_data_url

logger = logging.getLogger(__name__)

PAGE_LIMIT = 100
CLIENT_MAX_IMAGE_BYTES = 2_000_000
FAILED_TO_LOAD_HTML = '<div class="list-group-item">Failed to load</div>'


class BoardView(Protocol):
    def show_alerts(self, html: str) -> None: ...

    def update_vote(self, pin_id: str, votes: int) -> None: ...

    def set_load_more(self, visible: bool) -> None: ...

    def show_coords(self, text: str) -> None: ...

    def show_summary(self, text: str) -> None: ...

    def set_sub_type_options(self, options: List[str]) -> None: ...

    def toast(self, title: str, body: str) -> None: ...

    def alert(self, message: str) -> None: ...

    def confirm(self, message: str) -> bool: ...

    def reset_form(self) -> None: ...


class LocationUnavailable(Exception):
    pass


# Resolves to (lat, lng) or raises LocationUnavailable
Locator = Callable[[], Awaitable[Tuple[float, float]]]


@dataclass
class PinForm:
    main_category: str = ""
    sub_type: str = ""
    title: str = ""
    image: Optional[bytes] = None
    image_type: str = "image/jpeg"


class PinBoard:
    def __init__(
        self,
        api: PinsApi,
        view: BoardView,
        map_widget: MapWidget,
        page_limit: int = PAGE_LIMIT,
        max_image_bytes: int = CLIENT_MAX_IMAGE_BYTES,
    ):
        self.api = api
        self.view = view
        self.markers = PinMarkers(map_widget)
        self.page_limit = page_limit
        self.max_image_bytes = max_image_bytes
        self.state = BoardState()

    async def start(self) -> None:
        await self.load_pins(reset=True)
        await self.load_summary()

    # --- list ---

    async def load_pins(self, reset: bool = False) -> None:
        state = self.state
        if reset:
            state.page = 1
            state.pins = []
            self.markers.widget.clear_markers()

        token = state.next_list_token()
        try:
            data = await self.api.fetch_pins(
                page=state.page, limit=self.page_limit, main_category=state.category_filter
            )
        except ApiError as e:
            logger.warning("loadPins: %s", e.message)
            if token == state.list_token:
                self.view.show_alerts(FAILED_TO_LOAD_HTML)
            return

        if token != state.list_token:
            logger.debug("Discarding stale page %s response", data.page)
            return

        if state.page == 1:
            state.pins = list(data.pins)
        else:
            state.pins = state.pins + list(data.pins)
        state.total = data.total
        self._render()
        self.view.set_load_more(not state.reached_end())

    async def load_more(self) -> None:
        self.state.page += 1
        await self.load_pins()

    async def change_filter(self, category: Optional[str]) -> None:
        self.state.category_filter = category or None
        await self.load_pins(reset=True)
        await self.load_summary()

    # --- location and form ---

    def select_location(self, lng: float, lat: float) -> None:
        self.state.selected_coords = (lng, lat)
        self.view.show_coords(coords_text(lat, lng))
        self.view.toast("Location selected", "Tap 'Send report' or use your location.")

    async def use_device_location(self, locate: Optional[Locator]) -> None:
        if locate is None:
            self.view.toast("No geolocation", "Your device doesn't support geolocation.")
            return
        try:
            lat, lng = await locate()
        except LocationUnavailable:
            self.view.toast("Location denied", "Allow location to auto-fill coords.")
            return
        self.state.selected_coords = (lng, lat)
        self.markers.center_on(lat, lng)
        self.view.show_coords(coords_text(lat, lng))
        self.view.toast("Using your location", "Ready to submit.")

    def choose_category(self, main: Optional[str]) -> None:
        self.view.set_sub_type_options(sub_type_options(main))

    def _form_problem(self, form: PinForm) -> Optional[str]:
        if not form.main_category or not form.sub_type:
            return "Choose both category and subtype."
        if not self.state.selected_coords:
            return "Pick a location on the map or use your location."
        if form.image is not None and len(form.image) > self.max_image_bytes:
            return f"Image too large. Max {self.max_image_bytes // 1_000_000}MB."
        return None

    async def submit(self, form: PinForm) -> Optional[PinOut]:
        problem = self._form_problem(form)
        if problem:
            self.view.alert(problem)
            return None

        lng, lat = self.state.selected_coords
        payload = {
            "mainCategory": form.main_category,
            "subType": form.sub_type,
            "title": form.title.strip(),
            "location": {"type": "Point", "coordinates": [lng, lat]},
            "imageData": to_data_url(form.image, form.image_type) if form.image else None,
        }

        try:
            created = await self.api.create_pin(payload)
        except ApiError as e:
            logger.warning("submit: %s", e.message)
            self.view.alert(f"Failed to send report: {e.message}")
            return None

        self.view.toast("Report sent", "Thanks. Community will verify.")
        # optimistic: add to local cache instead of refetching
        self.state.pins.insert(0, created)
        self.state.total += 1
        self._render()
        self.state.selected_coords = None
        self.view.show_coords("")
        self.view.reset_form()
        await self.load_summary()
        return created

    # --- votes and deletes ---

    def _shift_votes(self, pin_id: str, delta: int) -> None:
        pin = self.state.find(pin_id)
        if pin is not None:
            pin.votes += delta
            self.view.update_vote(pin_id, pin.votes)

    async def vote(self, pin_id: str, vote: int) -> Optional[PinOut]:
        self._shift_votes(pin_id, vote)
        try:
            updated = await self.api.vote_pin(pin_id, vote)
        except ApiError as e:
            logger.warning("vote %s: %s", pin_id, e.message)
            self._shift_votes(pin_id, -vote)
            self.view.toast("Vote failed", e.message or "Server error")
            await self.load_pins(reset=True)
            return None

        # re-find: the cache may have been replaced while the request was in flight
        i = self.state.index_of(pin_id)
        if i != -1:
            self.state.pins[i] = updated
            self.view.update_vote(pin_id, updated.votes)
        return updated

    async def clear(self, pin_id: str) -> bool:
        if not self.view.confirm("Mark as cleared? This removes it."):
            return False
        try:
            await self.api.delete_pin(pin_id)
        except ApiError as e:
            # local state is left as it was
            logger.warning("clear %s: %s", pin_id, e.message)
            self.view.toast("Delete failed", e.message or "Server error")
            return False

        before = len(self.state.pins)
        self.state.pins = [p for p in self.state.pins if str(p.id) != str(pin_id)]
        if len(self.state.pins) < before:
            self.state.total = max(0, self.state.total - 1)
        self._render()
        await self.load_summary()
        return True

    # --- summary ---

    async def load_summary(self) -> None:
        token = self.state.next_summary_token()
        try:
            summary = await self.api.get_summary()
        except ApiError as e:
            logger.warning("summary: %s", e.message)
            if token == self.state.summary_token:
                self.view.show_summary("")
            return
        if token != self.state.summary_token:
            return
        self.view.show_summary(summary_text(summary))

    def _render(self) -> None:
        self.markers.render(self.state.pins)
        self.view.show_alerts(alerts_list_html(self.state.pins))
