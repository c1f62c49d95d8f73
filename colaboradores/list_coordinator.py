# colaboradores/list_coordinator.py
from __future__ import annotations
import asyncio
import logging
from enum import Enum
from typing import Any

from .employee_store import EmployeeStore
from .errors import BulkDeleteError, StoreError
from .models import Employee

logger = logging.getLogger(__name__)

class SortField(str, Enum):
    FIRST_NAME = 'first_name'
    EMAIL = 'email'
    DEPARTMENT = 'department'
    STATUS = 'status'

class SortDirection(str, Enum):
    ASC = 'asc'
    DESC = 'desc'

def _sort_value(record: Employee, field: SortField) -> str:
    value: Any = getattr(record, field.value)
    if isinstance(value, Enum):
        value = value.value
    return str(value).lower()

class ListCoordinator:
    """
    Client-side state of the employee list: the loaded records, the active
    sort and the delete-mode selection. Every mutation is followed by a full
    re-fetch from the store.
    """

    def __init__(self, records: list[Employee] | None = None) -> None:
        self.records: list[Employee] = list(records or [])
        self.sort_field: SortField | None = None
        self.sort_direction: SortDirection = SortDirection.ASC
        self.delete_mode: bool = False
        self.selected_ids: set[str] = set()
        self.load_error: str | None = None
        self.is_loading: bool = False

    @property
    def employee_count(self) -> int:
        return len(self.records)

    # --- Loading ---

    async def refresh(self, store: EmployeeStore) -> bool:
        """Re-fetches every record. On failure the old records are kept and load_error is set."""
        self.is_loading = True
        try:
            self.records = await store.list()
        except StoreError as e:
            logger.error(f"Failed to load employees: {e.message}")
            self.load_error = e.message
            return False
        finally:
            self.is_loading = False
        self.load_error = None
        known_ids = {record.id for record in self.records}
        self.selected_ids &= known_ids
        return True

    # --- Sorting ---

    def toggle_sort(self, field: SortField | str) -> None:
        field = SortField(field)
        if field == self.sort_field:
            self.sort_direction = (
                SortDirection.DESC if self.sort_direction == SortDirection.ASC else SortDirection.ASC
            )
        else:
            self.sort_field = field
            self.sort_direction = SortDirection.ASC

    def sort_indicator(self, field: SortField | str) -> str:
        if self.sort_field != SortField(field):
            return ''
        return '↑' if self.sort_direction == SortDirection.ASC else '↓'

    def sorted_records(self) -> list[Employee]:
        """Records in the active sort, or in store order (newest first) when none is set."""
        if self.sort_field is None:
            return list(self.records)
        field = self.sort_field
        return sorted(
            self.records,
            key=lambda record: _sort_value(record, field),
            reverse=self.sort_direction == SortDirection.DESC,
        )

    # --- Row interaction & delete mode ---

    def row_click(self, employee_id: str) -> str | None:
        """The id to open for editing, or None while selecting rows to delete."""
        if self.delete_mode:
            return None
        return employee_id

    def enter_delete_mode(self, employee_id: str | None = None) -> None:
        self.delete_mode = True
        if employee_id is not None:
            self.selected_ids.add(employee_id)

    def toggle_selection(self, employee_id: str) -> None:
        if not self.delete_mode:
            return
        if employee_id in self.selected_ids:
            self.selected_ids.discard(employee_id)
        else:
            self.selected_ids.add(employee_id)

    def cancel_delete_mode(self) -> None:
        self.delete_mode = False
        self.selected_ids.clear()

    async def confirm_delete(self, store: EmployeeStore) -> list[str]:
        """
        Deletes every selected employee concurrently and waits for all of
        them to settle.

        When all succeed the selection and delete mode are cleared and the
        list is re-fetched. When any fails, the ones that went through are
        dropped from the loaded records, the selection is narrowed to the
        failed ids for a retry and BulkDeleteError is raised without a
        re-fetch.
        """
        ids = sorted(self.selected_ids)
        if not ids:
            return []
        results = await asyncio.gather(*(store.delete(i) for i in ids), return_exceptions=True)

        deleted: list[str] = []
        failures: dict[str, StoreError] = {}
        for employee_id, result in zip(ids, results):
            if isinstance(result, StoreError):
                failures[employee_id] = result
            elif isinstance(result, BaseException):
                raise result
            else:
                deleted.append(employee_id)

        if failures:
            logger.error(f"Bulk delete: {len(deleted)} deleted, {len(failures)} failed ({', '.join(failures)}).")
            removed = set(deleted)
            self.records = [record for record in self.records if record.id not in removed]
            self.selected_ids = set(failures)
            raise BulkDeleteError(deleted, failures)

        logger.info(f"Bulk delete removed {len(deleted)} employee(s).")
        self.cancel_delete_mode()
        await self.refresh(store)
        return deleted
