# colaboradores/form_state.py
from __future__ import annotations
import copy
import logging
from typing import Any
from collections.abc import Mapping

from .draft_storage import DraftStorage, DraftCorruptedError
from .form_data_builder import FormMode, FormTemplate, FORM_TEMPLATE_REGISTRY
from .step_definitions import STEPS_BY_ID
from .utils import (
    AppSchema, EmployeeFormData, FieldConfig, StepDefinition, StepValidation,
    FORM_SECTIONS, PERSONAL_INFO, PROFESSIONAL_INFO, FIRST_STEP, LAST_STEP,
    DRAFT_CORRUPTED_MESSAGE, default_form_data,
)

logger = logging.getLogger(__name__)

# ===================================================================
# 1. VALIDATION ENGINE
# ===================================================================

def _validate_simple_field(field_conf: FieldConfig, form_data: dict[str, Any], errors: dict[str, str]) -> bool:
    field = field_conf['field']
    value_to_validate = field.read(form_data)
    for validator_func in field_conf['validators']:
        is_valid, msg = validator_func(value_to_validate, form_data)
        if not is_valid:
            if field.path not in errors: errors[field.path] = msg
            return False
    return True

def execute_step_validators(step_def: StepDefinition, form_data: dict[str, Any]) -> tuple[bool, dict[str, str]]:
    new_errors: dict[str, str] = {}
    is_step_valid = True
    for field_conf in step_def.get('fields', []):
        if not _validate_simple_field(field_conf, form_data, new_errors):
            is_step_valid = False
    return is_step_valid, new_errors

def validate_step(step: int, form_data: Mapping[str, Any]) -> StepValidation:
    """
    Runs every validator of the given step. Each failing field contributes
    exactly one message, keyed by its dotted path. Unknown steps are valid.
    """
    step_def = STEPS_BY_ID.get(step)
    if not step_def:
        return {'is_valid': True, 'errors': {}}
    is_valid, errors = execute_step_validators(step_def, dict(form_data))
    return {'is_valid': is_valid, 'errors': errors}

# ===================================================================
# 2. PROGRESS
# ===================================================================

TRACKED_FIELDS = (AppSchema.FIRST_NAME, AppSchema.EMAIL, AppSchema.ACTIVATE_ON_CREATE, AppSchema.DEPARTMENT)

def _is_filled(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip() != ''
    # Booleans count as soon as they are set, False included.
    return value is not None

def calculate_progress(form_data: Mapping[str, Any]) -> int:
    """Percentage of the tracked fields that hold a value: 0, 25, 50, 75 or 100."""
    filled = sum(1 for field in TRACKED_FIELDS if _is_filled(field.read(dict(form_data))))
    return round(filled / len(TRACKED_FIELDS) * 100)

def step_progress(step: int, total_steps: int = LAST_STEP) -> int:
    """Position of a step inside the flow, as shown in the form header."""
    if total_steps <= 1:
        return 100
    return round((step - 1) / (total_steps - 1) * 100)

# ===================================================================
# 3. NAVIGATION
# ===================================================================

def calculate_next_step_id(current_step_id: int, form_template: FormTemplate) -> int:
    """Calculates the ID of the next step in the sequence."""
    step_sequence: list[int] = form_template['step_sequence']
    if not step_sequence:
        return FIRST_STEP
    try:
        current_index: int = step_sequence.index(current_step_id)
    except ValueError:
        return step_sequence[0]  # Go to start if current step isn't in sequence
    if current_index < len(step_sequence) - 1:
        return step_sequence[current_index + 1]
    return current_step_id  # Stay on the last step

def calculate_prev_step_id(current_step_id: int, form_template: FormTemplate) -> int:
    """Calculates the ID of the previous step in the sequence."""
    step_sequence: list[int] = form_template['step_sequence']
    if not step_sequence:
        return FIRST_STEP
    try:
        current_index: int = step_sequence.index(current_step_id)
    except ValueError:
        return step_sequence[0]
    return step_sequence[current_index - 1] if current_index > 0 else step_sequence[0]

def clamp_step(step: int) -> int:
    return max(FIRST_STEP, min(step, LAST_STEP))

# ===================================================================
# 4. FORM-STATE CONTROLLER
# ===================================================================

def _merge_sections(base: dict[str, Any], incoming: Mapping[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(base)
    for section in FORM_SECTIONS:
        section_data = incoming.get(section)
        if isinstance(section_data, Mapping):
            merged.setdefault(section, {}).update(section_data)
    return merged

class FormStateController:
    """
    Owns one form session: the active step, the draft, the error map and
    the submitting flag.

    Passing `initial_data` starts an edit session seeded from an existing
    record. Edit sessions never touch the draft storage. Create sessions
    restore the saved draft once and mirror every mutation back to it.
    """

    def __init__(self, draft_storage: DraftStorage | None = None,
                 initial_data: Mapping[str, Any] | None = None) -> None:
        self.mode: FormMode = FormMode.EDIT if initial_data is not None else FormMode.CREATE
        self.template: FormTemplate = FORM_TEMPLATE_REGISTRY[self.mode]
        self._draft_storage = draft_storage if self.template['persists_draft'] else None

        self.current_step: int = FIRST_STEP
        self.errors: dict[str, str] = {}
        self.is_submitting: bool = False
        self.is_valid: bool = False
        self.storage_error: str | None = None

        if initial_data is not None:
            self._form_data = _merge_sections(dict(default_form_data()), initial_data)
        else:
            self._form_data = self._restore_draft()
        self.progress: int = calculate_progress(self._form_data)

    def _restore_draft(self) -> dict[str, Any]:
        defaults = dict(default_form_data())
        if self._draft_storage is None:
            return defaults
        try:
            saved = self._draft_storage.load()
        except DraftCorruptedError as e:
            logger.warning(f"Failed to parse saved form data: {e}")
            self.storage_error = DRAFT_CORRUPTED_MESSAGE
            return defaults
        if saved is None:
            return defaults
        logger.info("Restored saved draft for a new employee.")
        return _merge_sections(defaults, saved)

    # --- State accessors ---

    @property
    def form_data(self) -> EmployeeFormData:
        """A copy of the current draft."""
        return copy.deepcopy(self._form_data)  # type: ignore[return-value]

    @property
    def is_edit_mode(self) -> bool:
        return self.mode is FormMode.EDIT

    @property
    def is_last_step(self) -> bool:
        return self.current_step >= LAST_STEP

    # --- Mutations ---

    def _after_change(self) -> None:
        self.progress = calculate_progress(self._form_data)
        if self._draft_storage is not None:
            self._draft_storage.save(self._form_data)

    def update_form_data(self, changes: Mapping[str, Any]) -> None:
        """Merges whole sections, e.g. {'professionalInfo': {'department': 'ti'}}."""
        self._form_data = _merge_sections(self._form_data, changes)
        self._after_change()

    def update_personal_info(self, changes: Mapping[str, Any]) -> None:
        self._form_data.setdefault(PERSONAL_INFO, {}).update(changes)
        self._after_change()

    def update_professional_info(self, changes: Mapping[str, Any]) -> None:
        self._form_data.setdefault(PROFESSIONAL_INFO, {}).update(changes)
        self._after_change()

    def set_submitting(self, is_submitting: bool) -> None:
        self.is_submitting = is_submitting

    def clear_form_data(self) -> None:
        """Back to an empty draft on step 1. Also erases the saved draft."""
        if self._draft_storage is not None:
            self._draft_storage.clear()
        self.current_step = FIRST_STEP
        self._form_data = dict(default_form_data())
        self.errors = {}
        self.is_submitting = False
        self.is_valid = False
        self.storage_error = None
        self.progress = calculate_progress(self._form_data)

    # --- Validation & navigation ---

    def validate_current_step(self) -> bool:
        result = validate_step(self.current_step, self._form_data)
        self.errors = result['errors']
        self.is_valid = result['is_valid']
        return result['is_valid']

    def next_step(self) -> bool:
        if not self.validate_current_step():
            return False
        self.current_step = clamp_step(calculate_next_step_id(self.current_step, self.template))
        self.errors = {}
        return True

    def previous_step(self) -> None:
        self.current_step = clamp_step(calculate_prev_step_id(self.current_step, self.template))
        self.errors = {}

    def go_to_step(self, step: int) -> None:
        self.current_step = clamp_step(step)
        self.errors = {}
