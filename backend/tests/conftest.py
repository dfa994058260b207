"""
Shared fixtures for the service and route tests
"""
import os
import copy

os.environ.setdefault("MONGO_URL", "mongodb://localhost:27017")
os.environ.setdefault("DB_NAME", "wellness_test")

import pytest

import database
from services import directory_service, hierarchy_service, reports_service
from factories import FakeDatabase


@pytest.fixture
def fake_db(monkeypatch):
    """Replace the Motor database in every module that talks to the store"""
    db = FakeDatabase()
    for module in (database, directory_service, hierarchy_service, reports_service):
        monkeypatch.setattr(module, "db", db)
    return db


@pytest.fixture
def seed(fake_db):
    """Insert users and reports into the fake store"""
    def _seed(users=(), reports=()):
        fake_db.users.docs.extend(copy.deepcopy(list(users)))
        fake_db.mental_health_reports.docs.extend(copy.deepcopy(list(reports)))
        return fake_db
    return _seed
