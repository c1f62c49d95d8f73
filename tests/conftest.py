# tests/conftest.py
from __future__ import annotations

import random
from typing import Any

import pytest

from colaboradores.draft_storage import DraftStorage
from colaboradores.employee_store import EmployeeStore
from fake_firestore import FakeAsyncClient


@pytest.fixture
def client() -> FakeAsyncClient:
    return FakeAsyncClient()


@pytest.fixture
def store(client: FakeAsyncClient) -> EmployeeStore:
    return EmployeeStore(client, rng=random.Random(7))  # type: ignore[arg-type]


@pytest.fixture
def browser_storage() -> dict[str, Any]:
    """Stands in for app.storage.user."""
    return {}


@pytest.fixture
def draft_storage(browser_storage: dict[str, Any]) -> DraftStorage:
    return DraftStorage(browser_storage)


def make_form_data(first_name: str = 'Ana', email: str = 'ana@x.com',
                   activate: bool | None = True, department: str = 'design') -> dict[str, Any]:
    return {
        'personalInfo': {'firstName': first_name, 'email': email, 'activateOnCreate': activate},
        'professionalInfo': {'department': department},
    }
