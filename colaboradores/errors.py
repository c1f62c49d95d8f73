# colaboradores/errors.py
"""
User-facing error taxonomy for the employee store.

Provider failures from the Firestore client come in as
`google.api_core.exceptions.GoogleAPIError` subclasses (or
`google.auth` errors when credentials are missing). They are turned into
`StoreError`s carrying a displayable message and the provider code.
"""
from __future__ import annotations
import logging

from google.api_core import exceptions as core_exceptions
from google.auth import exceptions as auth_exceptions

from .utils import DUPLICATE_EMAIL_MESSAGE

logger = logging.getLogger(__name__)

GENERIC_MESSAGE: str = 'Ocorreu um erro inesperado. Tente novamente.'

class StoreError(Exception):
    """A store failure with a message fit for the user and the provider code."""

    def __init__(self, message: str, code: str = 'unknown') -> None:
        super().__init__(message)
        self.message = message
        self.code = code

class StoreAccessDeniedError(StoreError):
    pass

class StoreUnavailableError(StoreError):
    """Transient, the operation can be retried."""

class RecordNotFoundError(StoreError):
    pass

class DuplicateEmailError(Exception):
    """Raised before any store call when the e-mail is already registered."""

    def __init__(self, email: str) -> None:
        super().__init__(DUPLICATE_EMAIL_MESSAGE)
        self.email = email
        self.message = DUPLICATE_EMAIL_MESSAGE

class BulkDeleteError(Exception):
    """Some deletes of a bulk operation failed."""

    def __init__(self, deleted_ids: list[str], failures: dict[str, StoreError]) -> None:
        count = len(failures)
        super().__init__(f"Não foi possível excluir {count} colaborador(es). Tente novamente.")
        self.message = str(self)
        self.deleted_ids = deleted_ids
        self.failures = failures

# --- Provider exception -> (error class, code, message) ---
_ERROR_MAP: list[tuple[type[Exception], type[StoreError], str, str]] = [
    (core_exceptions.PermissionDenied, StoreAccessDeniedError, 'permission-denied',
     'Permissão negada. Verifique as regras de segurança do Firestore.'),
    (core_exceptions.Unauthenticated, StoreAccessDeniedError, 'unauthenticated',
     'Acesso negado. Verifique as credenciais do Firebase.'),
    (core_exceptions.ServiceUnavailable, StoreUnavailableError, 'unavailable',
     'O serviço está temporariamente indisponível. Tente novamente mais tarde.'),
    (core_exceptions.DeadlineExceeded, StoreUnavailableError, 'deadline-exceeded',
     'O tempo para a operação foi excedido. Verifique sua conexão com a internet.'),
    # Raised when the client's retry deadline runs out.
    (core_exceptions.RetryError, StoreUnavailableError, 'deadline-exceeded',
     'O tempo para a operação foi excedido. Verifique sua conexão com a internet.'),
    (core_exceptions.NotFound, RecordNotFoundError, 'not-found',
     'O colaborador solicitado não existe mais.'),
    (core_exceptions.AlreadyExists, StoreError, 'already-exists',
     'Este registro já existe.'),
    (core_exceptions.InvalidArgument, StoreError, 'invalid-argument',
     'Os dados enviados são inválidos.'),
    (core_exceptions.ResourceExhausted, StoreError, 'resource-exhausted',
     'A cota do banco de dados foi excedida. Tente novamente mais tarde.'),
]

def _provider_code(error: Exception) -> str:
    if isinstance(error, core_exceptions.GoogleAPICallError):
        grpc_code = error.grpc_status_code
        if grpc_code is not None:
            return grpc_code.name.lower().replace('_', '-')
        if error.code is not None:
            return str(error.code)
    return type(error).__name__

def map_store_error(error: Exception) -> StoreError:
    """Converts a provider exception into the matching StoreError."""
    if isinstance(error, StoreError):
        return error
    for provider_cls, error_cls, code, message in _ERROR_MAP:
        if isinstance(error, provider_cls):
            return error_cls(message, code)
    code = _provider_code(error)
    if isinstance(error, auth_exceptions.GoogleAuthError):
        return StoreAccessDeniedError('Acesso negado. Verifique as credenciais do Firebase.', code)
    if isinstance(error, core_exceptions.GoogleAPIError):
        return StoreError(f"Um erro ocorreu: {code}. Por favor, contate o suporte.", code)
    logger.warning(f"Unclassified store failure {code}: {error}")
    return StoreError(GENERIC_MESSAGE, code)
