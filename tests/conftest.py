import os

# The app reads its settings at import time; point it at a throwaway store first.
os.environ["DATABASE_URL"] = "sqlite://"

import uuid
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pinmap.db.base import Base
from pinmap.db.session import get_db, init_models
from pinmap.main import app
from pinmap.schemas.pin import Location, PinOut


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_models(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def db_session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def override_db(db_session_factory):
    def _get_db():
        db = db_session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    yield
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def client(override_db):
    return TestClient(app)


def pin_payload(**overrides):
    body = {
        "mainCategory": "Hazard",
        "subType": "Fire",
        "title": "Smoke over the ridge",
        "location": {"type": "Point", "coordinates": [77.2090, 28.6139]},
    }
    body.update(overrides)
    return body


@pytest.fixture
def make_pin(client):
    def _make(**overrides):
        r = client.post("/api/pins", json=pin_payload(**overrides))
        assert r.status_code == 200, r.text
        return r.json()

    return _make


def pin_out(votes=0, lng=77.0, lat=28.0, **kw) -> PinOut:
    return PinOut(
        id=kw.pop("id", uuid.uuid4()),
        title=kw.pop("title", ""),
        main_category=kw.pop("main_category", "Hazard"),
        sub_type=kw.pop("sub_type", "Fire"),
        votes=votes,
        location=Location(coordinates=[lng, lat]),
        created_at=kw.pop("created_at", datetime.now(timezone.utc)),
        **kw,
    )


class FakeView:
    def __init__(self, confirm_answer=True):
        self.confirm_answer = confirm_answer
        self.alerts_html = ""
        self.votes = []
        self.load_more_visible = None
        self.coords = None
        self.summary = None
        self.sub_type_options = None
        self.toasts = []
        self.alerts = []
        self.confirms = []
        self.form_resets = 0

    def show_alerts(self, html):
        self.alerts_html = html

    def update_vote(self, pin_id, votes):
        self.votes.append((str(pin_id), votes))

    def set_load_more(self, visible):
        self.load_more_visible = visible

    def show_coords(self, text):
        self.coords = text

    def show_summary(self, text):
        self.summary = text

    def set_sub_type_options(self, options):
        self.sub_type_options = options

    def toast(self, title, body):
        self.toasts.append((title, body))

    def alert(self, message):
        self.alerts.append(message)

    def confirm(self, message):
        self.confirms.append(message)
        return self.confirm_answer

    def reset_form(self):
        self.form_resets += 1


class FakeMap:
    def __init__(self):
        self.markers = []
        self.views = []
        self.bounds = None

    def clear_markers(self):
        self.markers = []

    def add_marker(self, lat, lng, popup_html):
        self.markers.append((lat, lng, popup_html))

    def set_view(self, lat, lng, zoom):
        self.views.append((lat, lng, zoom))

    def fit_bounds(self, south, west, north, east):
        self.bounds = (south, west, north, east)


@pytest.fixture
def view():
    return FakeView()


@pytest.fixture
def map_widget():
    return FakeMap()
