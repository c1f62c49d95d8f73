# colaboradores/employee_store.py
from __future__ import annotations
import logging
import os
import random
from datetime import datetime, timezone
from typing import Any
from collections.abc import Mapping

from google.api_core import exceptions as core_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import firestore

from .errors import StoreError, map_store_error
from .models import Employee, EmployeeStatus
from .para import avatar_colors
from .utils import EMPLOYEES_COLLECTION, PERSONAL_INFO, PROFESSIONAL_INFO

logger = logging.getLogger(__name__)

# Failures raised by the Firestore client that map onto StoreError.
PROVIDER_ERRORS: tuple[type[Exception], ...] = (
    core_exceptions.GoogleAPIError,
    auth_exceptions.GoogleAuthError,
)

def create_firestore_client(project_id: str | None = None) -> firestore.AsyncClient:
    """
    Builds the async Firestore client from the environment.

    Credentials come from GOOGLE_APPLICATION_CREDENTIALS and the client
    library honours FIRESTORE_EMULATOR_HOST on its own.
    """
    project = project_id or os.environ.get('FIREBASE_PROJECT_ID')
    logger.info(f"Connecting to Firestore project: {project or '<default>'}")
    return firestore.AsyncClient(project=project)

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

class EmployeeStore:
    """Async CRUD over the employees collection."""

    def __init__(self, client: firestore.AsyncClient, collection: str = EMPLOYEES_COLLECTION,
                 rng: random.Random | None = None) -> None:
        self._client = client
        self._collection_name = collection
        self._rng = rng or random.Random()

    @property
    def _collection(self) -> Any:
        return self._client.collection(self._collection_name)

    def _fail(self, action: str, error: Exception) -> StoreError:
        store_error = map_store_error(error)
        logger.error(f"Firestore {action} failed [{store_error.code}]: {error}")
        return store_error

    async def create(self, form_data: Mapping[str, Any]) -> str:
        personal = dict(form_data.get(PERSONAL_INFO) or {})
        professional = dict(form_data.get(PROFESSIONAL_INFO) or {})
        document = {
            PERSONAL_INFO: personal,
            PROFESSIONAL_INFO: professional,
            'status': EmployeeStatus.from_flag(personal.get('activateOnCreate')).value,
            'avatar': self._rng.choice(avatar_colors),
            'createdAt': _utcnow(),
        }
        try:
            _, doc_ref = await self._collection.add(document)
        except PROVIDER_ERRORS as e:
            raise self._fail('create', e) from e
        logger.info(f"Created employee '{doc_ref.id}'.")
        return doc_ref.id

    async def update(self, employee_id: str, form_data: Mapping[str, Any]) -> None:
        """Writes only the sections present. Avatar and createdAt are never touched."""
        update_data: dict[str, Any] = {}
        personal = form_data.get(PERSONAL_INFO)
        if personal is not None:
            update_data[PERSONAL_INFO] = dict(personal)
            update_data['status'] = EmployeeStatus.from_flag(personal.get('activateOnCreate')).value
        professional = form_data.get(PROFESSIONAL_INFO)
        if professional is not None:
            update_data[PROFESSIONAL_INFO] = dict(professional)
        if not update_data:
            return
        update_data['updatedAt'] = _utcnow()
        try:
            await self._collection.document(employee_id).update(update_data)
        except PROVIDER_ERRORS as e:
            raise self._fail('update', e) from e
        logger.info(f"Updated employee '{employee_id}' ({', '.join(sorted(update_data))}).")

    async def get(self, employee_id: str) -> Employee | None:
        try:
            snapshot = await self._collection.document(employee_id).get()
        except PROVIDER_ERRORS as e:
            raise self._fail('get', e) from e
        if not snapshot.exists:
            return None
        return Employee.from_document(snapshot.id, snapshot.to_dict() or {})

    async def list(self) -> list[Employee]:
        """All employees, newest first."""
        query = self._collection.order_by('createdAt', direction=firestore.Query.DESCENDING)
        try:
            return [
                Employee.from_document(snapshot.id, snapshot.to_dict() or {})
                async for snapshot in query.stream()
            ]
        except PROVIDER_ERRORS as e:
            raise self._fail('list', e) from e

    async def delete(self, employee_id: str) -> None:
        try:
            await self._collection.document(employee_id).delete()
        except PROVIDER_ERRORS as e:
            raise self._fail('delete', e) from e
        logger.info(f"Deleted employee '{employee_id}'.")
