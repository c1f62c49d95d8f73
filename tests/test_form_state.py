# tests/test_form_state.py
from __future__ import annotations

import itertools
import json
from typing import Any

import pytest

from colaboradores.draft_storage import DraftStorage, DraftCorruptedError
from colaboradores.form_data_builder import FormMode
from colaboradores.form_state import FormStateController, calculate_progress
from colaboradores.utils import DRAFT_CORRUPTED_MESSAGE, DRAFT_STORAGE_KEY, default_form_data
from conftest import make_form_data

# ===================================================================
# PROGRESS
# ===================================================================

def test_progress_of_default_draft_counts_the_flag() -> None:
    assert calculate_progress(default_form_data()) == 25, "The defaulted flag is already set"

def test_progress_of_complete_draft() -> None:
    assert calculate_progress(make_form_data(activate=False)) == 100

def test_progress_of_empty_mapping() -> None:
    assert calculate_progress({}) == 0

def test_progress_only_takes_quarter_values() -> None:
    names = ['', '  ', 'Ana']
    emails = ['', 'ana@x.com', 'not-an-email']
    flags = [None, False, True]
    departments = ['', 'ti']
    for name, email, flag, dept in itertools.product(names, emails, flags, departments):
        form_data = make_form_data(first_name=name, email=email, activate=flag, department=dept)
        value = calculate_progress(form_data)
        assert value in {0, 25, 50, 75, 100}
        all_filled = bool(name.strip()) and bool(email.strip()) and flag is not None and bool(dept)
        assert (value == 100) == all_filled

def test_progress_follows_every_mutation() -> None:
    controller = FormStateController()
    assert controller.progress == 25
    controller.update_personal_info({'firstName': 'Ana'})
    assert controller.progress == 50
    controller.update_professional_info({'department': 'design'})
    assert controller.progress == 75
    controller.update_personal_info({'email': 'ana@x.com'})
    assert controller.progress == 100
    controller.update_personal_info({'email': ' '})
    assert controller.progress == 75

def test_progress_is_independent_of_step() -> None:
    controller = FormStateController()
    controller.update_personal_info({'firstName': 'Ana', 'email': 'ana@x.com'})
    before = controller.progress
    controller.next_step()
    assert controller.current_step == 2
    assert controller.progress == before

# ===================================================================
# MUTATIONS
# ===================================================================

def test_updates_shallow_merge_into_section() -> None:
    controller = FormStateController()
    controller.update_personal_info({'firstName': 'Ana'})
    controller.update_personal_info({'email': 'ana@x.com'})
    assert controller.form_data['personalInfo'] == {
        'firstName': 'Ana', 'email': 'ana@x.com', 'activateOnCreate': False,
    }

def test_updates_do_not_validate() -> None:
    controller = FormStateController()
    controller.update_personal_info({'email': 'nope'})
    assert controller.errors == {}

def test_update_form_data_merges_sections() -> None:
    controller = FormStateController()
    controller.update_form_data({'professionalInfo': {'department': 'rh'}})
    assert controller.form_data['professionalInfo'] == {'department': 'rh'}
    assert controller.form_data['personalInfo']['activateOnCreate'] is False

def test_form_data_is_a_copy() -> None:
    controller = FormStateController()
    snapshot = controller.form_data
    snapshot['personalInfo']['firstName'] = 'Changed'
    assert controller.form_data['personalInfo']['firstName'] == ''

def test_activation_rule_cannot_fire_with_default() -> None:
    controller = FormStateController()
    controller.validate_current_step()
    assert 'personalInfo.activateOnCreate' not in controller.errors

# ===================================================================
# DRAFT PERSISTENCE
# ===================================================================

def test_create_mode_mirrors_every_mutation(browser_storage: dict[str, Any], draft_storage: DraftStorage) -> None:
    controller = FormStateController(draft_storage)
    assert controller.mode is FormMode.CREATE
    controller.update_personal_info({'firstName': 'Ana'})
    saved = json.loads(browser_storage[DRAFT_STORAGE_KEY])
    assert saved['personalInfo']['firstName'] == 'Ana'

    controller.update_professional_info({'department': 'ti'})
    saved = json.loads(browser_storage[DRAFT_STORAGE_KEY])
    assert saved == controller.form_data

def test_draft_round_trip(draft_storage: DraftStorage) -> None:
    first = FormStateController(draft_storage)
    first.update_personal_info({'firstName': 'Ana', 'email': 'ana@x.com', 'activateOnCreate': True})
    first.update_professional_info({'department': 'design'})

    restored = FormStateController(draft_storage)
    assert restored.form_data == first.form_data
    assert restored.storage_error is None
    assert restored.current_step == 1
    assert restored.progress == 100

def test_partial_draft_is_merged_over_defaults(browser_storage: dict[str, Any], draft_storage: DraftStorage) -> None:
    browser_storage[DRAFT_STORAGE_KEY] = json.dumps({'personalInfo': {'firstName': 'Bia'}})
    controller = FormStateController(draft_storage)
    assert controller.form_data == {
        'personalInfo': {'firstName': 'Bia', 'email': '', 'activateOnCreate': False},
        'professionalInfo': {'department': ''},
    }

@pytest.mark.parametrize('raw', ['{not json', '[1, 2, 3]', '"just a string"', '42'])
def test_corrupt_draft_falls_back_to_defaults(raw: str, browser_storage: dict[str, Any],
                                              draft_storage: DraftStorage) -> None:
    browser_storage[DRAFT_STORAGE_KEY] = raw
    controller = FormStateController(draft_storage)
    assert controller.form_data == default_form_data()
    assert controller.storage_error == DRAFT_CORRUPTED_MESSAGE

def test_draft_storage_load_raises_on_corruption(browser_storage: dict[str, Any],
                                                  draft_storage: DraftStorage) -> None:
    browser_storage[DRAFT_STORAGE_KEY] = '{oops'
    with pytest.raises(DraftCorruptedError):
        draft_storage.load()

def test_clear_form_data_resets_everything(browser_storage: dict[str, Any], draft_storage: DraftStorage) -> None:
    browser_storage[DRAFT_STORAGE_KEY] = 'garbage'
    controller = FormStateController(draft_storage)
    controller.update_personal_info({'firstName': 'Ana', 'email': 'ana@x.com'})
    controller.next_step()
    controller.set_submitting(True)

    controller.clear_form_data()
    assert DRAFT_STORAGE_KEY not in browser_storage
    assert controller.current_step == 1
    assert controller.form_data == default_form_data()
    assert controller.errors == {}
    assert controller.is_submitting is False
    assert controller.storage_error is None

def test_edit_mode_never_touches_draft(browser_storage: dict[str, Any], draft_storage: DraftStorage) -> None:
    browser_storage[DRAFT_STORAGE_KEY] = json.dumps(make_form_data(first_name='Draft'))
    controller = FormStateController(draft_storage, initial_data=make_form_data(first_name='Ana'))
    assert controller.mode is FormMode.EDIT
    assert controller.form_data['personalInfo']['firstName'] == 'Ana', "Seeded from the record, not the draft"

    controller.update_personal_info({'firstName': 'Ana Maria'})
    controller.clear_form_data()
    saved = json.loads(browser_storage[DRAFT_STORAGE_KEY])
    assert saved['personalInfo']['firstName'] == 'Draft'

def test_no_storage_read_when_slot_is_empty(draft_storage: DraftStorage) -> None:
    controller = FormStateController(draft_storage)
    assert controller.form_data == default_form_data()
    assert controller.storage_error is None
