# colaboradores/utils.py
from __future__ import annotations
import copy
from typing import Any, TypedDict
from dataclasses import dataclass

from .para import department_options
from .validation import ValidatorFunc

# ===================================================================
# 1. CORE DATA STRUCTURES & TYPE ALIASES
# ===================================================================

PERSONAL_INFO: str = 'personalInfo'
PROFESSIONAL_INFO: str = 'professionalInfo'
FORM_SECTIONS: tuple[str, str] = (PERSONAL_INFO, PROFESSIONAL_INFO)

@dataclass(frozen=True)
class FormField:
    """Defines everything about a form field in one place."""
    key: str
    label: str
    section: str
    ui_type: str = 'text'
    options: dict[str, str] | None = None
    default_value: Any = ''

    @property
    def path(self) -> str:
        """Dotted path used to key validation errors, e.g. 'personalInfo.email'."""
        return f"{self.section}.{self.key}"

    def read(self, form_data: dict[str, Any]) -> Any:
        return (form_data.get(self.section) or {}).get(self.key)

class PersonalInfo(TypedDict, total=False):
    firstName: str
    email: str
    activateOnCreate: bool

class ProfessionalInfo(TypedDict, total=False):
    department: str

class EmployeeFormData(TypedDict, total=False):
    personalInfo: PersonalInfo
    professionalInfo: ProfessionalInfo

class FieldConfig(TypedDict):
    field: FormField
    validators: list[ValidatorFunc]

class StepDefinition(TypedDict):
    id: int
    name: str
    title: str
    subtitle: str
    fields: list[FieldConfig]

class StepValidation(TypedDict):
    is_valid: bool
    errors: dict[str, str]

# ===================================================================
# 2. THE APPLICATION SCHEMA (Single Source of Truth)
# ===================================================================

class AppSchema:
    """
    Defines all fields used in the application. Each field is an instance
    of the FormField dataclass, containing all its necessary metadata.
    """
    FIRST_NAME = FormField(key='firstName', label='Nome', section=PERSONAL_INFO)
    EMAIL = FormField(key='email', label='E-mail', section=PERSONAL_INFO, ui_type='email')
    ACTIVATE_ON_CREATE = FormField(key='activateOnCreate', label='Ativar ao criar',
                                   section=PERSONAL_INFO, ui_type='switch', default_value=False)
    DEPARTMENT = FormField(key='department', label='Departamento', section=PROFESSIONAL_INFO,
                           ui_type='select', options=department_options)

    @classmethod
    def get_all_fields(cls) -> list[FormField]:
        return [
            field_instance for field_instance in cls.__dict__.values()
            if isinstance(field_instance, FormField)
        ]

def default_form_data() -> EmployeeFormData:
    """Empty draft built from the schema defaults."""
    form_data: dict[str, dict[str, Any]] = {section: {} for section in FORM_SECTIONS}
    for field in AppSchema.get_all_fields():
        form_data[field.section][field.key] = copy.copy(field.default_value)
    return form_data  # type: ignore[return-value]

# ===================================================================
# 3. CENTRALIZED CONSTANTS
# ===================================================================

DRAFT_STORAGE_KEY: str = 'employee-form-data'
FIRST_STEP: int = 1
LAST_STEP: int = 2
EMPLOYEES_COLLECTION: str = 'employees'
DRAFT_CORRUPTED_MESSAGE: str = 'Dados salvos corrompidos. O formulário foi resetado.'
DUPLICATE_EMAIL_MESSAGE: str = 'Já existe um colaborador cadastrado com este e-mail.'
