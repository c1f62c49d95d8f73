# colaboradores/step_definitions.py
from __future__ import annotations

from .utils import AppSchema, StepDefinition
from .validation import (
    required, required_choice, match_pattern, is_defined, EMAIL_PATTERN
)

STEPS_BY_ID: dict[int, StepDefinition] = {
    1: {
        'id': 1, 'name': 'personal_info', 'title': 'Infos Básicas',
        'subtitle': 'Dados de identificação e contato do colaborador.',
        'fields': [
            {'field': AppSchema.FIRST_NAME, 'validators': [required("Nome é obrigatório")]},
            {'field': AppSchema.EMAIL, 'validators': [
                required("E-mail é obrigatório"),
                match_pattern(EMAIL_PATTERN, "E-mail deve ter um formato válido"),
            ]},
            # Defaults to False, so this never fails in practice.
            {'field': AppSchema.ACTIVATE_ON_CREATE, 'validators': [
                is_defined("Definir status de ativação é obrigatório")
            ]},
        ],
    },
    2: {
        'id': 2, 'name': 'professional_info', 'title': 'Infos Profissionais',
        'subtitle': 'Departamento em que o colaborador vai atuar.',
        'fields': [
            {'field': AppSchema.DEPARTMENT, 'validators': [
                required_choice("Departamento é obrigatório"),
            ]},
        ],
    },
}
