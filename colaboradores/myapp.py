# ===================================================================
# 1. IMPORTS
# ===================================================================
import os
import logging
from typing import Any
from collections.abc import Callable

from nicegui import ui, app

# Local application imports
from .draft_storage import DraftStorage
from .employee_store import EmployeeStore, create_firestore_client
from .errors import BulkDeleteError, StoreError
from .form_state import FormStateController, step_progress
from .list_coordinator import ListCoordinator, SortField
from .models import Employee, EmployeeStatus
from .step_definitions import STEPS_BY_ID
from .submission import SubmissionCoordinator
from .utils import AppSchema, FormField, StepDefinition, EMPLOYEES_COLLECTION, LAST_STEP

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

LIST_ROUTE: str = '/'
CREATE_ROUTE: str = '/colaboradores/novo'

COLUMNS: list[tuple[SortField, str]] = [
    (SortField.FIRST_NAME, 'Nome'),
    (SortField.EMAIL, 'Email'),
    (SortField.DEPARTMENT, 'Departamento'),
    (SortField.STATUS, 'Status'),
]

def edit_route(employee_id: str) -> str:
    return f'/colaboradores/{employee_id}'

# ===================================================================
# 2. FIELD RENDERING
# ===================================================================

def _create_text_input(f: FormField, v: Any, on_change: Callable[[Any], None]) -> ui.input:
    """Creates a standard text input bound to the controller."""
    return ui.input(label=f.label, value=v or '', on_change=lambda e: on_change(e.value))

def _create_select_input(f: FormField, v: Any, on_change: Callable[[Any], None]) -> ui.select:
    """Creates a dropdown select; an empty draft value shows no selection."""
    options = f.options or {}
    return ui.select(options=options, label=f.label, value=v if v in options else None,
                     on_change=lambda e: on_change(e.value or ''))

def _create_switch_input(f: FormField, v: Any, on_change: Callable[[Any], None]) -> ui.switch:
    return ui.switch(text=f.label, value=bool(v), on_change=lambda e: on_change(bool(e.value)))

def create_field(field_definition: FormField, controller: FormStateController,
                 on_update: Callable[[], None] | None = None) -> None:
    """Creates a UI element for a FormField, wired to the matching controller section."""
    current_value = field_definition.read(dict(controller.form_data))
    error_message: str | None = controller.errors.get(field_definition.path)

    def on_change(value: Any) -> None:
        changes = {field_definition.key: value}
        if field_definition.section == AppSchema.DEPARTMENT.section:
            controller.update_professional_info(changes)
        else:
            controller.update_personal_info(changes)
        if on_update is not None:
            on_update()

    creator_map: dict[str, Callable[..., Any]] = {
        'text': _create_text_input,
        'email': _create_text_input,
        'select': _create_select_input,
        'switch': _create_switch_input,
    }
    creator = creator_map.get(field_definition.ui_type)
    if not creator: raise ValueError(f"Unsupported UI type: {field_definition.ui_type}")

    with ui.column().classes('w-full no-wrap q-mb-sm'):
        element = creator(field_definition, current_value, on_change)
        if field_definition.ui_type == 'switch':
            if error_message:
                ui.label(error_message).classes('text-negative text-caption')
            return
        props_list: list[str] = ['outlined', 'dense']
        if error_message:
            props_list.append(f"error-message='{error_message}'")
            props_list.append('error')
        element.props(' '.join(props_list)).classes('w-full')

# ===================================================================
# 3. PAGES
# ===================================================================

def build_pages(store: EmployeeStore) -> None:
    """Registers the list and form pages against an already built store."""

    @ui.page(LIST_ROUTE)
    async def list_page() -> None:
        coordinator = ListCoordinator()
        await coordinator.refresh(store)

        async def retry() -> None:
            await coordinator.refresh(store)
            render_list.refresh()

        async def confirm_delete() -> None:
            try:
                deleted = await coordinator.confirm_delete(store)
            except BulkDeleteError as e:
                ui.notify(e.message, type='negative', multi_line=True)
            else:
                ui.notify(f"{len(deleted)} colaborador(es) excluído(s).", type='positive')
            render_list.refresh()

        def on_row_click(employee_id: str) -> None:
            target = coordinator.row_click(employee_id)
            if target is not None:
                ui.navigate.to(edit_route(target))

        def render_row(employee: Employee) -> None:
            row = ui.row().classes('w-full items-center no-wrap q-py-sm cursor-pointer')
            row.on('click', lambda _, i=employee.id: on_row_click(i))
            with row:
                if coordinator.delete_mode:
                    ui.checkbox(value=employee.id in coordinator.selected_ids,
                                on_change=lambda _, i=employee.id: coordinator.toggle_selection(i))
                with ui.row().classes('col-3 items-center no-wrap'):
                    ui.label(employee.first_name[:1].upper()).classes('text-white text-center rounded-full w-8 h-8 q-pt-xs') \
                        .style(f'background-color: {employee.avatar}')
                    ui.label(employee.first_name)
                ui.label(employee.email).classes('col-3')
                ui.label(employee.department_label).classes('col-3')
                color = 'positive' if employee.status is EmployeeStatus.ACTIVE else 'grey'
                ui.badge(employee.status.label, color=color).classes('col-1')
                if not coordinator.delete_mode:
                    with ui.button(icon='more_vert').props('flat dense round').on('click.stop', lambda: None):
                        with ui.menu():
                            ui.menu_item('Excluir', on_click=lambda _, i=employee.id: (
                                coordinator.enter_delete_mode(i), render_list.refresh()))

        @ui.refreshable
        def render_list() -> None:
            with ui.row().classes('w-full items-center justify-between q-mb-md'):
                ui.label(f"Colaboradores ({coordinator.employee_count})").classes('text-h4')
                ui.button('Novo Colaborador', icon='add', on_click=lambda: ui.navigate.to(CREATE_ROUTE)) \
                    .props('color=primary unelevated')

            if coordinator.load_error:
                with ui.row().classes('w-full items-center q-mb-md'):
                    ui.label(coordinator.load_error).classes('text-negative')
                    ui.button('Tentar novamente', icon='refresh', on_click=retry).props('flat color=primary')
                    ui.spinner(size='sm').bind_visibility_from(coordinator, 'is_loading')

            if coordinator.delete_mode:
                with ui.row().classes('w-full items-center justify-end q-mb-sm'):
                    ui.label(f"{len(coordinator.selected_ids)} selecionado(s)").classes('q-mr-md')
                    ui.button('Cancelar', on_click=lambda: (coordinator.cancel_delete_mode(), render_list.refresh())) \
                        .props('flat color=grey')
                    ui.button('Excluir selecionados', icon='delete', on_click=confirm_delete) \
                        .props('color=negative unelevated')

            with ui.card().classes('w-full').props('flat bordered'):
                with ui.row().classes('w-full no-wrap text-grey-7'):
                    for field, title in COLUMNS:
                        label = f"{title} {coordinator.sort_indicator(field)}".strip()
                        ui.button(label, on_click=lambda _, f=field: (coordinator.toggle_sort(f), render_list.refresh())) \
                            .props('flat dense no-caps color=grey-8').classes('col-3' if field != SortField.STATUS else 'col-1')

                records = coordinator.sorted_records()
                if not records:
                    with ui.column().classes('w-full items-center q-pa-xl'):
                        ui.label('Nenhum colaborador encontrado').classes('text-h6')
                        ui.label('Comece adicionando seu primeiro colaborador ao sistema').classes('text-grey')
                        ui.button('Adicionar Colaborador', icon='add', on_click=lambda: ui.navigate.to(CREATE_ROUTE)) \
                            .props('outline color=primary')
                for employee in records:
                    ui.separator()
                    render_row(employee)

        render_list()

    async def render_form_page(employee: Employee | None) -> None:
        records: list[Employee] = []
        try:
            records = await store.list()
        except StoreError as e:
            # Duplicate detection then only sees what is loaded, which is nothing.
            logger.error(f"Could not load employees for duplicate check: {e.message}")

        if employee is None:
            controller = FormStateController(DraftStorage(app.storage.user))
        else:
            controller = FormStateController(initial_data=employee.to_form_data())

        @ui.refreshable
        def render_progress() -> None:
            ui.label(f"{controller.progress}% preenchido").classes('text-caption text-grey-7')

        submission = SubmissionCoordinator(
            controller, store, existing_records=records,
            employee_id=employee.id if employee else None,
        )
        ui.context.client.on_disconnect(submission.close)

        if controller.storage_error:
            ui.notify(controller.storage_error, type='warning', multi_line=True)

        def go_home() -> None:
            submission.close()
            ui.navigate.to(LIST_ROUTE)

        def go_back() -> None:
            if controller.current_step > 1:
                controller.previous_step()
                render_step.refresh()
            else:
                go_home()

        async def advance(button: ui.button) -> None:
            button.disable()
            try:
                if not controller.is_last_step:
                    if controller.next_step():
                        render_step.refresh()
                    else:
                        for error_message in controller.errors.values():
                            ui.notification(error_message, type='negative', multi_line=True)
                        render_step.refresh()
                    return

                submit_bar.set_visibility(True)
                saved = await submission.submit()
                if saved:
                    ui.notify('Colaborador salvo com sucesso!', type='positive')
                    go_home()
                    return
                submit_bar.set_visibility(False)
                if submission.error_message:
                    ui.notify(submission.error_message, type='negative', multi_line=True)
                render_step.refresh()
            finally:
                button.enable()

        with ui.column().classes('w-full q-pa-md'):
            with ui.row().classes('items-center text-grey-7'):
                ui.link('Colaboradores', LIST_ROUTE)
                ui.icon('chevron_right')
                ui.label(controller.template['name']).classes('text-weight-medium')

            @ui.refreshable
            def render_step() -> None:
                step_def: StepDefinition = STEPS_BY_ID[controller.current_step]
                percentage = step_progress(controller.current_step)
                with ui.row().classes('w-full items-center no-wrap'):
                    ui.linear_progress(value=percentage / 100, show_value=False).classes('col')
                    ui.label(f"{percentage}%").classes('text-caption')

                with ui.card().classes('w-full').props('flat bordered'):
                    with ui.row().classes('w-full no-wrap'):
                        with ui.column().classes('q-pa-md').style('min-width: 240px'):
                            for step_id, definition in STEPS_BY_ID.items():
                                active = step_id == controller.current_step
                                ui.button(f"{step_id}. {definition['title']}",
                                          on_click=lambda _, s=step_id: (controller.go_to_step(s), render_step.refresh())) \
                                    .props(f"flat no-caps {'color=primary' if active else 'color=grey'}") \
                                    .set_enabled(step_id <= controller.current_step)
                            ui.space()
                            ui.button('Voltar', on_click=go_back).props('flat color=grey')

                        with ui.column().classes('col q-pa-md'):
                            ui.label(step_def['title']).classes('text-h5')
                            ui.markdown(step_def['subtitle'])
                            for field_conf in step_def['fields']:
                                create_field(field_conf['field'], controller, render_progress.refresh)
                            render_progress()
                            with ui.row().classes('w-full justify-end q-mt-lg'):
                                label = controller.template['submit_label'] if controller.current_step == LAST_STEP else 'Próximo'
                                confirm_button = ui.button(label).props('color=primary unelevated')
                                confirm_button.on('click', lambda: advance(confirm_button))

            render_step()
            submit_bar = ui.linear_progress(value=0, show_value=False).classes('w-full q-mt-md')
            submit_bar.set_visibility(False)
            submission.on_progress = lambda value: submit_bar.set_value(value / 100)

    @ui.page(CREATE_ROUTE)
    async def create_page() -> None:
        await render_form_page(None)

    @ui.page('/colaboradores/{employee_id}')
    async def edit_page(employee_id: str) -> None:
        try:
            employee = await store.get(employee_id)
        except StoreError as e:
            ui.notify(e.message, type='negative', multi_line=True)
            ui.navigate.to(LIST_ROUTE)
            return
        if employee is None:
            ui.notify('O colaborador solicitado não existe mais.', type='warning')
            ui.navigate.to(LIST_ROUTE)
            return
        await render_form_page(employee)

# ===================================================================
# 4. ENTRY POINT
# ===================================================================

def main() -> None:
    client = create_firestore_client(os.environ.get('FIREBASE_PROJECT_ID'))
    store = EmployeeStore(client, collection=os.environ.get('FIRESTORE_COLLECTION', EMPLOYEES_COLLECTION))
    build_pages(store)

    port = int(os.environ.get('PORT', 8080))
    ui.run(
        host='0.0.0.0',
        port=port,
        title='Colaboradores',
        storage_secret=os.environ.get('STORAGE_SECRET', 'a_very_secure_secret_key_for_local_dev'),
        reload=False,
    )

if __name__ in {"__main__", "__mp_main__"}:
    main()
