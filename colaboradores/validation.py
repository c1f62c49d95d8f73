# colaboradores/validation.py
from __future__ import annotations
import re
from re import Pattern
from typing import Any
from collections.abc import Callable

# --- Type Aliases ---
ValidationResult = tuple[bool, str]
# The validator gets the value and the entire form_data dict for context
ValidatorFunc = Callable[[Any | None, dict[str, Any]], ValidationResult]

# --- Regex Patterns (centralized) ---
# local-part "@" domain with at least one dot
EMAIL_PATTERN: Pattern[str] = re.compile(r"^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+(\.[a-zA-Z0-9-]+)*\.[a-zA-Z]{2,}$")

# ===================================================================
# GENERIC VALIDATOR GENERATORS
# ===================================================================

def required(message: str = "Campo obrigatório.") -> ValidatorFunc:
    """Ensures a value is not None, not an empty string, and not just whitespace."""
    def validator(value: Any | None, form_data: dict[str, Any]) -> ValidationResult:
        if value is None:
            return False, message
        if isinstance(value, str) and not value.strip():
            return False, message
        return True, ""
    return validator

def required_choice(message: str = "Selecione uma opção.") -> ValidatorFunc:
    """Ensures a value from a select is not None or empty/whitespace."""
    def validator(value: Any | None, form_data: dict[str, Any]) -> ValidationResult:
        if value is None or (isinstance(value, str) and not value.strip()):
            return False, message
        return True, ""
    return validator

def is_defined(message: str) -> ValidatorFunc:
    """
    Ensures a flag was explicitly set. False is a valid answer, only a
    missing value (None) fails.
    """
    def validator(value: Any | None, form_data: dict[str, Any]) -> ValidationResult:
        if value is None:
            return False, message
        return True, ""
    return validator

def match_pattern(pattern: Pattern[str], message: str) -> ValidatorFunc:
    """Ensures a string value matches a regex pattern."""
    def validator(value: Any | None, form_data: dict[str, Any]) -> ValidationResult:
        # Empty values are `required`'s job.
        if not value or not isinstance(value, str) or not value.strip():
            return True, ""
        if not pattern.match(value.strip()):
            return False, message
        return True, ""
    return validator

