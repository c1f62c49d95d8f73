# colaboradores/models.py
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from .para import DEFAULT_AVATAR_COLOR, department_options, status_labels
from .utils import PERSONAL_INFO, PROFESSIONAL_INFO, EmployeeFormData

class EmployeeStatus(str, Enum):
    ACTIVE = 'Active'
    INACTIVE = 'Inactive'

    @classmethod
    def from_flag(cls, activate_on_create: bool | None) -> EmployeeStatus:
        return cls.ACTIVE if activate_on_create else cls.INACTIVE

    @property
    def label(self) -> str:
        return status_labels[self.value]

@dataclass(frozen=True)
class Employee:
    """A persisted employee, flattened from its Firestore document."""
    id: str
    first_name: str
    email: str
    department: str
    status: EmployeeStatus
    avatar: str
    created_at: datetime
    activate_on_create: bool = False
    updated_at: datetime | None = None

    @property
    def department_label(self) -> str:
        return department_options.get(self.department, self.department)

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> Employee:
        personal = data.get(PERSONAL_INFO) or {}
        professional = data.get(PROFESSIONAL_INFO) or {}
        activate = bool(personal.get('activateOnCreate', False))
        try:
            status = EmployeeStatus(data.get('status'))
        except ValueError:
            status = EmployeeStatus.from_flag(activate)
        return cls(
            id=doc_id,
            first_name=personal.get('firstName', ''),
            email=personal.get('email', ''),
            department=professional.get('department', ''),
            status=status,
            avatar=data.get('avatar') or DEFAULT_AVATAR_COLOR,
            created_at=data.get('createdAt') or datetime.now(timezone.utc),
            activate_on_create=activate,
            updated_at=data.get('updatedAt'),
        )

    def to_form_data(self) -> EmployeeFormData:
        """Seeds an edit session."""
        return {
            'personalInfo': {
                'firstName': self.first_name,
                'email': self.email,
                'activateOnCreate': self.activate_on_create,
            },
            'professionalInfo': {'department': self.department},
        }
