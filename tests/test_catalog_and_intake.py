"""Tests for the plant catalog, complaints and newsletter endpoints."""

import json

import pytest

from errors import InternalError
from plants import filter_plants


def test_plants_unfiltered(client):
    resp = client.get("/plants")
    assert resp.status_code == 200
    assert [p["name"] for p in resp.json()] == ["Snake Plant", "Boston Fern", "Spider Plant"]
    assert resp.json()[0]["soilType"] == "Sandy"


def test_plants_exact_match_filters(client):
    resp = client.get("/plants", params={"sunlight": "Indirect Light", "toxicity": "Non-toxic"})
    assert [p["name"] for p in resp.json()] == ["Boston Fern", "Spider Plant"]

    resp = client.get("/plants", params={"sunlight": "Indirect Light", "soilType": "Loamy"})
    assert [p["name"] for p in resp.json()] == ["Spider Plant"]

    assert client.get("/plants", params={"sunlight": "indirect light"}).json() == []


def test_plants_reread_on_every_query(client, plants_file):
    assert len(client.get("/plants").json()) == 3
    plants_file.write_text('[{"name": "Moss"}]', encoding="utf-8")
    assert [p["name"] for p in client.get("/plants").json()] == ["Moss"]


def test_plant_by_name(client):
    resp = client.get("/plants/spider plant")
    assert resp.status_code == 200
    assert resp.json()["wateringFrequency"] == "Weekly"
    assert client.get("/plants/Triffid").status_code == 404


def test_broken_dataset(client, plants_file):
    plants_file.write_text("{not json", encoding="utf-8")
    resp = client.get("/plants")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to load plant data"}


def test_missing_dataset(tmp_path):
    with pytest.raises(InternalError):
        filter_plants(tmp_path / "absent.json")


def test_record_without_name(client, plants_file):
    plants_file.write_text(json.dumps([{"maintenance": "Low"}]), encoding="utf-8")
    resp = client.get("/plants")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to load plant data"}


def test_complaint(client, db):
    resp = client.post(
        "/complaint",
        json={"name": "Ivy", "email": "ivy@plants.org", "message": "More cacti please"},
    )
    assert resp.status_code == 201
    assert db["complaint"].count_documents({}) == 1

    assert client.post("/complaint", json={"name": "Ivy", "email": "ivy@plants.org"}).status_code == 400


def test_newsletter(client):
    first = client.post("/newsletter/subscribe", json={"email": "ivy@plants.org"})
    assert first.status_code == 201

    dup = client.post("/newsletter/subscribe", json={"email": "IVY@plants.org"})
    assert dup.status_code == 400
    assert dup.json()["error"] == "Email already subscribed!"

    assert client.post("/newsletter/unsubscribe", json={"email": "ivy@plants.org"}).status_code == 200
    assert client.post("/newsletter/unsubscribe", json={"email": "ivy@plants.org"}).status_code == 404
