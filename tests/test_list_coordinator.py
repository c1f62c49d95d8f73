# tests/test_list_coordinator.py
from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from google.api_core import exceptions as core_exceptions

from colaboradores.employee_store import EmployeeStore
from colaboradores.errors import BulkDeleteError
from colaboradores.list_coordinator import ListCoordinator, SortDirection, SortField
from colaboradores.models import Employee, EmployeeStatus
from conftest import make_form_data
from fake_firestore import FakeAsyncClient

NOW = datetime(2024, 5, 1, tzinfo=timezone.utc)

def _employee(i: int, name: str, email: str, department: str = 'ti',
              status: EmployeeStatus = EmployeeStatus.ACTIVE) -> Employee:
    return Employee(id=f"e{i}", first_name=name, email=email, department=department, status=status,
                    avatar='#FF6B6B', created_at=NOW - timedelta(days=i))

RECORDS = [
    _employee(1, 'carla', 'Carla@x.com', 'rh', EmployeeStatus.INACTIVE),
    _employee(2, 'Ana', 'bruno@x.com', 'design'),
    _employee(3, 'bia', 'ana@x.com', 'marketing'),
]

def _emails(coordinator: ListCoordinator) -> list[str]:
    return [record.email for record in coordinator.sorted_records()]

async def _seed(store: EmployeeStore, count: int) -> list[str]:
    return [
        await store.create(make_form_data(first_name=f"Pessoa {i}", email=f"p{i}@x.com"))
        for i in range(count)
    ]

# ===================================================================
# SORTING
# ===================================================================

def test_store_order_without_sort() -> None:
    coordinator = ListCoordinator(RECORDS)
    assert [r.id for r in coordinator.sorted_records()] == ['e1', 'e2', 'e3']

def test_sort_email_toggles_direction() -> None:
    coordinator = ListCoordinator(RECORDS)
    coordinator.toggle_sort(SortField.EMAIL)
    assert coordinator.sort_direction == SortDirection.ASC
    assert _emails(coordinator) == ['ana@x.com', 'bruno@x.com', 'Carla@x.com'], "Case-insensitive"

    coordinator.toggle_sort(SortField.EMAIL)
    assert coordinator.sort_direction == SortDirection.DESC
    assert _emails(coordinator) == ['Carla@x.com', 'bruno@x.com', 'ana@x.com']

def test_new_field_starts_ascending() -> None:
    coordinator = ListCoordinator(RECORDS)
    coordinator.toggle_sort('email')
    coordinator.toggle_sort('email')
    coordinator.toggle_sort(SortField.FIRST_NAME)
    assert coordinator.sort_field == SortField.FIRST_NAME
    assert coordinator.sort_direction == SortDirection.ASC
    assert [r.first_name for r in coordinator.sorted_records()] == ['Ana', 'bia', 'carla']

def test_sort_by_status_uses_its_value() -> None:
    coordinator = ListCoordinator(RECORDS)
    coordinator.toggle_sort(SortField.STATUS)
    assert [r.status for r in coordinator.sorted_records()][0] is EmployeeStatus.ACTIVE
    assert coordinator.sorted_records()[-1].id == 'e1'

def test_sort_indicator() -> None:
    coordinator = ListCoordinator(RECORDS)
    assert coordinator.sort_indicator(SortField.EMAIL) == ''
    coordinator.toggle_sort(SortField.EMAIL)
    assert coordinator.sort_indicator(SortField.EMAIL) == '↑'
    coordinator.toggle_sort(SortField.EMAIL)
    assert coordinator.sort_indicator(SortField.EMAIL) == '↓'
    assert coordinator.sort_indicator(SortField.DEPARTMENT) == ''

# ===================================================================
# ROW INTERACTION & DELETE MODE
# ===================================================================

def test_row_click_opens_for_edit_only_in_normal_mode() -> None:
    coordinator = ListCoordinator(RECORDS)
    assert coordinator.row_click('e2') == 'e2'
    coordinator.enter_delete_mode()
    assert coordinator.row_click('e2') is None
    assert coordinator.selected_ids == set(), "Row click does not select"

def test_selection_toggles_only_in_delete_mode() -> None:
    coordinator = ListCoordinator(RECORDS)
    coordinator.toggle_selection('e1')
    assert coordinator.selected_ids == set()

    coordinator.enter_delete_mode('e1')
    coordinator.toggle_selection('e2')
    assert coordinator.selected_ids == {'e1', 'e2'}
    coordinator.toggle_selection('e1')
    assert coordinator.selected_ids == {'e2'}

def test_cancel_clears_without_store_calls(client: FakeAsyncClient) -> None:
    coordinator = ListCoordinator(RECORDS)
    coordinator.enter_delete_mode('e1')
    coordinator.cancel_delete_mode()
    assert coordinator.delete_mode is False
    assert coordinator.selected_ids == set()
    assert client.calls == []

def test_bulk_delete_two_records(store: EmployeeStore, client: FakeAsyncClient) -> None:
    async def scenario() -> None:
        ids = await _seed(store, 3)
        coordinator = ListCoordinator()
        await coordinator.refresh(store)
        assert coordinator.employee_count == 3

        coordinator.enter_delete_mode(ids[0])
        coordinator.toggle_selection(ids[2])
        deleted = await coordinator.confirm_delete(store)

        assert sorted(deleted) == sorted([ids[0], ids[2]])
        assert client.count('delete') == 2
        assert coordinator.employee_count == 1
        assert [r.id for r in coordinator.records] == [ids[1]]
        assert coordinator.delete_mode is False
        assert coordinator.selected_ids == set()
        assert len(await store.list()) == 1
    asyncio.run(scenario())

def test_confirm_with_empty_selection_does_nothing(store: EmployeeStore, client: FakeAsyncClient) -> None:
    coordinator = ListCoordinator()
    coordinator.enter_delete_mode()
    assert asyncio.run(coordinator.confirm_delete(store)) == []
    assert client.count('delete') == 0

def test_bulk_delete_partial_failure(store: EmployeeStore, client: FakeAsyncClient) -> None:
    async def scenario() -> None:
        ids = await _seed(store, 3)
        coordinator = ListCoordinator()
        await coordinator.refresh(store)
        client.delete_failures[ids[1]] = core_exceptions.PermissionDenied('rules')

        coordinator.enter_delete_mode(ids[0])
        coordinator.toggle_selection(ids[1])
        with pytest.raises(BulkDeleteError) as excinfo:
            await coordinator.confirm_delete(store)

        assert excinfo.value.deleted_ids == [ids[0]]
        assert set(excinfo.value.failures) == {ids[1]}
        assert client.count('delete') == 2, "Every delete was attempted"
        assert coordinator.delete_mode is True
        assert coordinator.selected_ids == {ids[1]}, "Only the failed one stays selected"
        assert ids[0] not in {r.id for r in coordinator.records}
        assert len(await store.list()) == 2
    asyncio.run(scenario())

# ===================================================================
# LOADING
# ===================================================================

def test_refresh_failure_keeps_records_and_sets_error(store: EmployeeStore, client: FakeAsyncClient) -> None:
    async def scenario() -> None:
        await _seed(store, 2)
        coordinator = ListCoordinator()
        assert await coordinator.refresh(store) is True
        client.failures['stream'] = core_exceptions.DeadlineExceeded('slow')

        assert await coordinator.refresh(store) is False
        assert coordinator.employee_count == 2
        assert coordinator.load_error is not None
        assert coordinator.is_loading is False

        del client.failures['stream']
        assert await coordinator.refresh(store) is True
        assert coordinator.load_error is None
    asyncio.run(scenario())

def test_refresh_drops_vanished_selection(store: EmployeeStore) -> None:
    async def scenario() -> None:
        ids = await _seed(store, 2)
        coordinator = ListCoordinator()
        await coordinator.refresh(store)
        coordinator.enter_delete_mode(ids[0])
        await store.delete(ids[0])
        await coordinator.refresh(store)
        assert coordinator.selected_ids == set()
    asyncio.run(scenario())

def test_refresh_survives_retry_deadline(store: EmployeeStore, client: FakeAsyncClient) -> None:
    client.failures['stream'] = core_exceptions.RetryError('Timeout of 60s exceeded', None)
    coordinator = ListCoordinator(RECORDS)
    assert asyncio.run(coordinator.refresh(store)) is False, "Should report the failure, not raise"
    assert coordinator.load_error == 'O tempo para a operação foi excedido. Verifique sua conexão com a internet.'
    assert coordinator.employee_count == len(RECORDS)
