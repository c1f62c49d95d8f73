from __future__ import annotations
from enum import Enum, auto
from typing import TypedDict

# ===================================================================
# 1. THE FORM MODES
# ===================================================================
# A form session either registers a new employee or edits an existing one.
# The mode decides the titles and whether the draft is mirrored locally.

class FormMode(Enum):
    CREATE = auto()
    EDIT = auto()

# ===================================================================
# 2. THE BLUEPRINT FOR EACH MODE
# ===================================================================

class FormTemplate(TypedDict):
    """A blueprint for one kind of form session."""
    name: str
    description: str
    # Ordered step IDs walked by next/previous navigation.
    step_sequence: list[int]
    submit_label: str
    # Only create sessions keep a draft in the browser storage.
    persists_draft: bool

# ===================================================================
# 3. THE REGISTRY
# ===================================================================

FORM_TEMPLATE_REGISTRY: dict[FormMode, FormTemplate] = {
    FormMode.CREATE: {
        'name': "Cadastrar Colaborador",
        'description': "Preencha as informações básicas e profissionais do novo colaborador.",
        'step_sequence': [1, 2],
        'submit_label': "Concluir",
        'persists_draft': True,
    },
    FormMode.EDIT: {
        'name': "Editar Colaborador",
        'description': "Atualize as informações do colaborador.",
        'step_sequence': [1, 2],
        'submit_label': "Salvar alterações",
        'persists_draft': False,
    },
}
