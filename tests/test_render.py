from conftest import pin_out
from pinmap.client.mapview import PinMarkers
from pinmap.client.render import alerts_list_html, popup_html, summary_text
from pinmap.core.categories import CATEGORIES, MAIN_CATEGORIES, SUB_TYPES
from pinmap.schemas.pin import Summary


def test_list_escapes_titles_and_caps_length():
    pins = [pin_out(title="<script>x</script>")] + [pin_out(title=f"t{i}") for i in range(60)]
    html = alerts_list_html(pins)
    assert "<script>" not in html
    assert "&lt;script&gt;" in html
    assert html.count('class="vote-count"') == 50


def test_empty_list():
    assert "No alerts" in alerts_list_html([])


def test_list_shows_lat_then_lng():
    html = alerts_list_html([pin_out(lng=77.12344, lat=28.98766)])
    assert "28.9877, 77.1234" in html


def test_popup_falls_back_to_category_label():
    html = popup_html(pin_out(title="", main_category="Impact", sub_type="Injury", votes=4))
    assert "<b>Impact - Injury</b>" in html
    assert "Votes: 4" in html


def test_summary_text():
    s = Summary(total_pins=3, by_main_category={"Hazard": 2, "Alert": 1}, avg_votes=0.6667)
    assert summary_text(s) == "Active 3 reports · Avg votes 0.67 · Hazard:2 · Alert:1"


def test_fit_to_pins_pads_bounds(map_widget):
    markers = PinMarkers(map_widget)
    markers.fit_to_pins([pin_out(lng=10.0, lat=40.0), pin_out(lng=20.0, lat=50.0)])
    assert map_widget.bounds == (38.0, 8.0, 52.0, 22.0)
    markers.fit_to_pins([])
    assert map_widget.bounds == (38.0, 8.0, 52.0, 22.0)


def test_category_table_is_consistent():
    assert MAIN_CATEGORIES == ["Hazard", "Impact", "Resource", "Alert"]
    assert len(SUB_TYPES) == len(set(SUB_TYPES)) == 18
    assert CATEGORIES["Hazard"][3] == "Chemical Leak"
