"""Pytest configuration and shared fixtures for the Plantastic Care API tests."""

import json
import os
import sys
from datetime import datetime, timedelta, timezone
from typing import Dict

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "ERROR")

import mongomock
import pytest
from fastapi.testclient import TestClient
from loguru import logger

from auth import hash_password
from database import ensure_indexes, get_db
from main import app, get_plants_path, limiter
from schemas import User

PLANTS = [
    {"name": "Snake Plant", "maintenance": "Low", "sunlight": "Low Light", "climate": "Tropical",
     "soilType": "Sandy", "toxicity": "Toxic to pets", "wateringFrequency": "Every 2-3 weeks"},
    {"name": "Boston Fern", "maintenance": "Medium", "sunlight": "Indirect Light", "climate": "Humid",
     "soilType": "Peaty", "toxicity": "Non-toxic", "wateringFrequency": "Twice a week"},
    {"name": "Spider Plant", "maintenance": "Low", "sunlight": "Indirect Light", "climate": "Temperate",
     "soilType": "Loamy", "toxicity": "Non-toxic", "wateringFrequency": "Weekly"},
]


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(autouse=True)
def quiet_logging():
    logger.remove()
    logger.add(sys.stderr, level="ERROR", format="{time} {level} {message}", catch=True)
    yield


# =============================================================================
# Storage
# =============================================================================


@pytest.fixture
def db():
    database = mongomock.MongoClient(tz_aware=True)["plantastic_test"]
    ensure_indexes(database)
    return database


@pytest.fixture
def make_user(db):
    """Insert a user directly and return its id as a string."""

    def _make(username: str = "fern", email: str = None, password: str = "secret1") -> str:
        user = User(
            username=username,
            email=email or f"{username}@plants.org",
            phone="555-0100",
            password_hash=hash_password(password),
        )
        return str(db["user"].insert_one(user.model_dump()).inserted_id)

    return _make


@pytest.fixture
def clock():
    """Deterministic clock: each call is one second after the previous."""
    start = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)
    ticks = {"n": 0}

    def _now():
        ticks["n"] += 1
        return start + timedelta(seconds=ticks["n"])

    return _now


@pytest.fixture
def plants_file(tmp_path):
    path = tmp_path / "plants.json"
    path.write_text(json.dumps(PLANTS), encoding="utf-8")
    return path


# =============================================================================
# HTTP
# =============================================================================


@pytest.fixture
def client(db, plants_file):
    limiter.enabled = False
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_plants_path] = lambda: plants_file
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    """Register a user over HTTP, log in, and return (user_id, auth headers)."""

    def _register(username: str, password: str = "secret1"):
        email = f"{username}@plants.org"
        resp = client.post(
            "/register",
            json={"username": username, "email": email, "phone": "555-0100", "password": password},
        )
        assert resp.status_code == 201, resp.text
        login = client.post("/login", json={"email": email, "password": password})
        assert login.status_code == 200, login.text
        body = login.json()
        headers: Dict[str, str] = {"Authorization": f"Bearer {body['token']}"}
        return body["user"]["id"], headers

    return _register
