# colaboradores/submission.py
from __future__ import annotations
import asyncio
import logging
from collections.abc import Callable, Iterable

from .employee_store import EmployeeStore
from .errors import DuplicateEmailError, StoreError
from .form_state import FormStateController
from .models import Employee
from .utils import AppSchema

logger = logging.getLogger(__name__)

SUBMIT_DELAY: float = 1.2
PROGRESS_TICK_INTERVAL: float = 0.1
PROGRESS_TICK_STEP: int = 10

def _normalize_email(email: str | None) -> str:
    return (email or '').strip().lower()

def find_duplicate_email(records: Iterable[Employee], email: str | None,
                         exclude_id: str | None = None) -> Employee | None:
    """First loaded record using the e-mail, other than the one being edited."""
    wanted = _normalize_email(email)
    if not wanted:
        return None
    for record in records:
        if record.id != exclude_id and _normalize_email(record.email) == wanted:
            return record
    return None

def ensure_unique_email(records: Iterable[Employee], email: str | None,
                        exclude_id: str | None = None) -> None:
    if find_duplicate_email(records, email, exclude_id) is not None:
        raise DuplicateEmailError(_normalize_email(email))

class SubmissionCoordinator:
    """
    Drives the final "Concluir" of a form session.

    While the write is pending a cosmetic progress value climbs by
    PROGRESS_TICK_STEP every PROGRESS_TICK_INTERVAL seconds up to 100. The
    real create/update is issued after SUBMIT_DELAY so the animation can
    finish. Failures leave the draft and the step untouched for a retry.
    """

    def __init__(
        self,
        controller: FormStateController,
        store: EmployeeStore,
        existing_records: Iterable[Employee] = (),
        employee_id: str | None = None,
        on_progress: Callable[[int], None] | None = None,
        submit_delay: float = SUBMIT_DELAY,
        tick_interval: float = PROGRESS_TICK_INTERVAL,
        tick_step: int = PROGRESS_TICK_STEP,
    ) -> None:
        self.controller = controller
        self.store = store
        self.existing_records: list[Employee] = list(existing_records)
        self.employee_id = employee_id
        self.on_progress = on_progress
        self.submit_delay = submit_delay
        self.tick_interval = tick_interval
        self.tick_step = tick_step

        self.submit_progress: int = 0
        self.error_message: str | None = None
        self.created_id: str | None = None
        self._ticker: asyncio.Task[None] | None = None
        self._closed: bool = False

    # --- Artificial progress ---

    def _emit(self) -> None:
        if self.on_progress is not None and not self._closed:
            self.on_progress(self.submit_progress)

    async def _tick(self) -> None:
        while self.submit_progress < 100:
            await asyncio.sleep(self.tick_interval)
            self.submit_progress = min(self.submit_progress + self.tick_step, 100)
            self._emit()

    def _start_ticker(self) -> None:
        self.submit_progress = 0
        self._emit()
        self._ticker = asyncio.create_task(self._tick())

    def _stop_ticker(self) -> None:
        if self._ticker is not None and not self._ticker.done():
            self._ticker.cancel()
        self._ticker = None

    @property
    def is_ticking(self) -> bool:
        return self._ticker is not None and not self._ticker.done()

    def close(self) -> None:
        """Teardown: stops the ticker, later results are not reported."""
        self._closed = True
        self._stop_ticker()

    # --- Submission ---

    def _fail(self, message: str) -> bool:
        self._stop_ticker()
        self.controller.set_submitting(False)
        self.submit_progress = 0
        self.error_message = message
        self._emit()
        return False

    async def submit(self) -> bool:
        """Returns True once the employee is saved and the draft is cleared."""
        if self.controller.is_submitting:
            return False
        if not self.controller.is_last_step or not self.controller.validate_current_step():
            return False

        form_data = self.controller.form_data
        try:
            ensure_unique_email(self.existing_records, AppSchema.EMAIL.read(dict(form_data)), self.employee_id)
        except DuplicateEmailError as e:
            logger.info(f"Rejected duplicate e-mail '{e.email}'.")
            return self._fail(e.message)

        self.error_message = None
        self.controller.set_submitting(True)
        self._start_ticker()
        saved = False
        try:
            await asyncio.sleep(self.submit_delay)
            if self.employee_id is not None:
                await self.store.update(self.employee_id, form_data)
            else:
                self.created_id = await self.store.create(form_data)
            saved = True
        except StoreError as e:
            return self._fail(e.message)
        finally:
            # Also reached by exceptions that are not StoreErrors.
            if not saved:
                self._stop_ticker()
                self.controller.set_submitting(False)
                self.submit_progress = 0

        self._stop_ticker()
        self.submit_progress = 100
        self._emit()
        self.controller.clear_form_data()
        return True
