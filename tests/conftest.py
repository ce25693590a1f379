import copy
import re
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from database import get_database
from main import app
from security import get_current_user


def _resolve(document, value):
    if isinstance(value, str) and value.startswith("$"):
        return document.get(value[1:])
    return value


def _matches_condition(actual, condition):
    if isinstance(condition, dict):
        for operator, expected in condition.items():
            if operator == "$lt" and not (actual is not None and actual < expected):
                return False
            if operator == "$lte" and not (actual is not None and actual <= expected):
                return False
            if operator == "$ne" and actual == expected:
                return False
        return True
    return actual == condition


def matches(document, query):
    for key, condition in query.items():
        if key == "$expr":
            (operator, (left, right)), = condition.items()
            left, right = _resolve(document, left), _resolve(document, right)
            if operator == "$lte" and not left <= right:
                return False
        elif key == "$text":
            words = condition["$search"].lower().split()
            haystack = " ".join(str(document.get(f, "")) for f in ("name", "manufacturer", "category")).lower()
            if not any(re.search(rf"\b{re.escape(word)}\b", haystack) for word in words):
                return False
        elif not _matches_condition(document.get(key), condition):
            return False
    return True


class FakeCursor:
    def __init__(self, documents):
        self.documents = documents

    def sort(self, key, direction=1):
        self.documents = sorted(self.documents, key=lambda d: d.get(key), reverse=direction == -1)
        return self

    def skip(self, count):
        self.documents = self.documents[count:]
        return self

    def limit(self, count):
        self.documents = self.documents[:count]
        return self

    async def to_list(self, length=None):
        return [copy.deepcopy(d) for d in self.documents[:length]]


class FakeCollection:
    """Just enough of the Motor collection API for the routes."""

    def __init__(self):
        self.documents = []
        self.aggregate_results = []
        self.created_indexes = []

    async def insert_one(self, document):
        self.documents.append(copy.deepcopy(document))
        return SimpleNamespace(inserted_id=document.get("_id"))

    async def find_one(self, query):
        for document in self.documents:
            if matches(document, query):
                return copy.deepcopy(document)
        return None

    def find(self, query=None):
        return FakeCursor([d for d in self.documents if matches(d, query or {})])

    async def count_documents(self, query):
        return len([d for d in self.documents if matches(d, query)])

    async def replace_one(self, query, replacement):
        for index, document in enumerate(self.documents):
            if matches(document, query):
                self.documents[index] = copy.deepcopy(replacement)
                return SimpleNamespace(matched_count=1, modified_count=1)
        return SimpleNamespace(matched_count=0, modified_count=0)

    async def update_one(self, query, update):
        for document in self.documents:
            if matches(document, query):
                document.update(copy.deepcopy(update.get("$set", {})))
                return SimpleNamespace(matched_count=1, modified_count=1)
        return SimpleNamespace(matched_count=0, modified_count=0)

    async def delete_one(self, query):
        for index, document in enumerate(self.documents):
            if matches(document, query):
                del self.documents[index]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

    def aggregate(self, pipeline):
        return FakeCursor(self.aggregate_results.pop(0) if self.aggregate_results else [])

    async def create_indexes(self, indexes):
        self.created_indexes.extend(indexes)
        return [index.document["name"] for index in indexes]


class FakeDatabase:
    def __init__(self):
        self.collections = {}

    def __getitem__(self, name):
        return self.collections.setdefault(name, FakeCollection())


STAFF_USER = {"user_id": "USER-STAFF1", "name": "Pat Pharmacist", "email": "staff@example.com", "role": "pharmacist"}
CUSTOMER_USER = {"user_id": "USER-CUST01", "name": "Casey Customer", "email": "casey@example.com", "role": "customer"}
OTHER_CUSTOMER = {"user_id": "USER-CUST02", "name": "Robin Customer", "email": "robin@example.com", "role": "customer"}


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def client(fake_db):
    app.dependency_overrides[get_database] = lambda: fake_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def login_as(client):
    def _login_as(user):
        app.dependency_overrides[get_current_user] = lambda: dict(user)
        return client
    return _login_as


@pytest.fixture
def staff_client(login_as):
    return login_as(STAFF_USER)


@pytest.fixture
def customer_client(login_as):
    return login_as(CUSTOMER_USER)


def future(days=365):
    return datetime.now(timezone.utc) + timedelta(days=days)


def past(days=30):
    return datetime.now(timezone.utc) - timedelta(days=days)


@pytest.fixture
def medicine_payload():
    return {
        "name": "Paracetamol 500mg",
        "description": "Pain reliever and fever reducer",
        "manufacturer": "Acme Pharma",
        "price": 4.5,
        "quantity_in_stock": 120,
        "expiry_date": future().isoformat(),
        "category": "Tablet",
    }


@pytest.fixture
def order_payload():
    return {
        "customer_id": CUSTOMER_USER["user_id"],
        "medicines": [
            {"medicine_id": "MED-AAAAAA", "quantity": 2, "price_at_order": 5.0},
            {"medicine_id": "MED-BBBBBB", "quantity": 3, "price_at_order": 1.5},
        ],
        "total_amount": 999,
        "shipping_address": "12 Market Street, Springfield",
        "payment_method": "card",
    }
