"""Tests for the distribution settings behind the sponsorship wizard."""

import pytest

from changebag import db
from changebag.errors import NotFoundError, ValidationError
from changebag.models import DistributionPoint
from changebag.services import DistributionService


@pytest.fixture
def places(app):
    """A country, one city, one category, as a dict of ids."""
    with app.app_context():
        country = DistributionService.create_record("countries", {"name": "India", "code": "IN"})
        city = DistributionService.create_record(
            "cities", {"name": "Pune", "state": "Maharashtra", "countryId": country.id}
        )
        category = DistributionService.create_record("categories", {
            "name": "Colleges", "icon": "school", "color": "#2e7d32", "defaultToteCount": 200,
        })
        return {"country": country.id, "city": city.id, "category": category.id}


def _point(places, name, **extra):
    data = {
        "name": name,
        "cityId": places["city"],
        "categoryId": places["category"],
        "defaultToteCount": 50,
    }
    data.update(extra)
    return DistributionService.create_record("points", data)


def test_create_strips_text_and_defaults_active(ctx, places):
    point = _point(places, "  Fergusson College ")

    assert point.name == "Fergusson College"
    assert point.is_active is True
    assert point.to_dict()["cityId"] == places["city"]


def test_create_reports_missing_and_invalid_fields(ctx, places):
    with pytest.raises(ValidationError) as exc:
        DistributionService.create_record("points", {"name": "Somewhere"})
    assert exc.value.missing_fields == ["cityId", "categoryId", "defaultToteCount"]

    with pytest.raises(ValidationError) as exc:
        _point(places, "Somewhere", cityId=9999, defaultToteCount="lots", isActive="yes")
    assert set(exc.value.invalid_fields) == {"cityId", "defaultToteCount", "isActive"}


def test_unknown_record_type(ctx):
    with pytest.raises(NotFoundError):
        DistributionService.create_record("planets", {"name": "Mars"})


def test_update_is_partial(ctx, places):
    point = _point(places, "Fergusson College")

    updated = DistributionService.update_record("points", point.id, {"defaultToteCount": 80})

    assert updated.default_tote_count == 80
    assert updated.name == "Fergusson College"


def test_update_missing_record(ctx):
    with pytest.raises(NotFoundError):
        DistributionService.update_record("cities", 9999, {"name": "Nowhere"})


def test_points_for_skips_inactive(ctx, places):
    _point(places, "Fergusson College")
    _point(places, "Closed Campus", isActive=False)

    points = DistributionService.points_for(places["city"], places["category"])

    assert [p.name for p in points] == ["Fergusson College"]


def test_settings_lists_everything(ctx, places):
    _point(places, "Fergusson College", isActive=False)

    settings = DistributionService.get_settings()

    assert [c["code"] for c in settings["countries"]] == ["IN"]
    assert [c["name"] for c in settings["cities"]] == ["Pune"]
    assert settings["categories"][0]["defaultToteCount"] == 200
    assert [p["isActive"] for p in settings["points"]] == [False]


def test_delete_point(ctx, places):
    point = _point(places, "Fergusson College")

    DistributionService.delete_point(point.id)

    assert db.session.get(DistributionPoint, point.id) is None
    with pytest.raises(NotFoundError):
        DistributionService.delete_point(point.id)


# ---------------------------------------------------------------------------
# /api/distribution
# ---------------------------------------------------------------------------


def test_settings_are_public(client, places):
    resp = client.get("/api/distribution/settings")

    assert resp.status_code == 200
    assert resp.get_json()["cities"][0]["name"] == "Pune"


def test_admin_edits_points(admin_client, client, places):
    resp = admin_client.post("/api/distribution/points", json={
        "name": "Symbiosis", "cityId": places["city"], "categoryId": places["category"],
        "defaultToteCount": 120,
    })
    assert resp.status_code == 201
    point_id = resp.get_json()["id"]

    resp = admin_client.put(f"/api/distribution/points/{point_id}", json={"isActive": False})
    assert resp.get_json()["isActive"] is False

    listed = client.get(f"/api/distribution/points/{places['city']}/{places['category']}")
    assert listed.get_json() == []

    resp = admin_client.delete(f"/api/distribution/points/{point_id}")
    assert resp.get_json() == {"success": True}


def test_writes_need_admin(client, places):
    resp = client.post("/api/distribution/countries", json={"name": "Nepal", "code": "NP"})
    assert resp.status_code == 401


def test_bad_payload_is_400(admin_client):
    resp = admin_client.post("/api/distribution/countries", json={"name": 5})

    assert resp.status_code == 400
    body = resp.get_json()
    assert body["missingFields"] == ["code"]
    assert body["invalidFields"] == {"name": "must be non-empty text"}
