"""Tests for the category registry and per-category behaviour."""

from __future__ import annotations

from rich.table import Table

from servicelog.categories import (
    AccessTier,
    FormHelpers,
    get_category_config,
    get_category_display_label,
    get_category_options,
    list_categories,
)
from servicelog.categories.simple import normalize_tag_numbers
from servicelog.categories.stack import symptom_label
from servicelog.models import Note


# =============================================================================
# Registry
# =============================================================================


def test_registration_order():
    assert list_categories() == [
        "Calibration",
        "Software update",
        "Settings change",
        "Stack replacements",
        "Stack inspection",
        "Stack tensioning",
        "Stack installs",
        "Other",
    ]


def test_basic_access_hides_internal_categories():
    values = [o.value for o in get_category_options(AccessTier.BASIC)]
    assert values == ["Calibration", "Software update", "Settings change", "Other"]


def test_elevated_access_sees_everything():
    options = get_category_options(AccessTier.ELEVATED)
    assert [o.value for o in options] == list_categories()
    assert options[4].label == "Stack visual inspection"


def test_access_tier_accepts_plain_strings():
    assert len(get_category_options("elevated")) == len(list_categories())


def test_lookup_is_exact_match():
    assert get_category_config("Calibration") is not None
    assert get_category_config("calibration") is None
    assert get_category_config(None) is None


def test_display_label_fallbacks():
    assert get_category_display_label("Stack inspection") == "Stack visual inspection"
    assert get_category_display_label("Legacy category") == "Legacy category"
    assert get_category_display_label(None) == "Uncategorized"
    assert get_category_display_label("") == "Uncategorized"


# =============================================================================
# Flat categories
# =============================================================================


def test_normalize_tag_numbers():
    assert normalize_tag_numbers(["PT-101", {"tag_number": "TT-7"}, {"other": 1}, 42]) == ["PT-101", "TT-7", "42"]
    assert normalize_tag_numbers(None) is None


def test_tag_list_round_trip(helpers: FormHelpers):
    config = get_category_config("Settings change")
    patch = config.serialize({"tag_numbers": [{"tag_number": "PT-101"}]}, helpers)
    assert patch == {"tag_numbers": ["PT-101"]}
    note = Note(id="n1", note_category="Settings change", tag_numbers=["PT-101"])
    assert config.build_edit_initial_value(note, helpers) == {"tag_numbers": ["PT-101"]}
    assert [f.key for f in config.build_read_only_fields(note)] == ["current_tag_numbers"]


def test_software_update_serializes_blanks_as_null(helpers: FormHelpers):
    config = get_category_config("Software update")
    assert config.serialize({"software_type": "", "version": ""}, helpers) == {
        "software_type": None,
        "version": None,
    }
    assert config.validate({}, helpers) is None


def test_other_has_no_fields(helpers: FormHelpers):
    config = get_category_config("Other")
    assert config.build_form_inputs(helpers) == []
    assert config.serialize({"text": "x"}, helpers) == {}


# =============================================================================
# Stack categories
# =============================================================================


def test_stack_form_has_one_group_per_stack(helpers: FormHelpers):
    inputs = get_category_config("Stack installs").build_form_inputs(helpers)
    assert [spec.key for spec in inputs] == ["stack_group_installs_a", "stack_group_installs_b"]
    assert [spec.label for spec in inputs] == ["Stack A", "Stack B"]
    assert inputs[1].children[0].key == "stack_serial_number_b"


def test_stack_replacements_form_starts_with_workorder(helpers: FormHelpers):
    inputs = get_category_config("Stack replacements").build_form_inputs(helpers)
    assert [spec.key for spec in inputs] == ["workorder_id", "stack_group_a", "stack_group_b"]
    symptom = inputs[1].children[2]
    assert symptom.type == "Selection"
    assert symptom.options[0].value == ""


def test_stack_validation_requires_one_record(helpers: FormHelpers):
    assert (
        get_category_config("Stack installs").validate({}, helpers)
        == "At least one stack install must be filled in."
    )
    assert (
        get_category_config("Stack inspection").validate({}, helpers)
        == "At least one stack inspection must be filled in."
    )


def test_stack_validation_rejects_forbidden_characters(helpers: FormHelpers):
    value = {"stack_group_b": {"added_serial_number_b": "SN;2"}}
    assert get_category_config("Stack replacements").validate(value, helpers) == (
        "Stack B: values may not contain ' or ;."
    )
    value = {"stack_group_a": {"added_serial_number_a": "SN-2"}, "workorder_id": "WO-'1"}
    assert get_category_config("Stack replacements").validate(value, helpers) == (
        "Workorder ID may not contain ' or ;."
    )


def test_stack_replacements_serialize(helpers: FormHelpers):
    value = {
        "workorder_id": "WO-002527",
        "stack_group_a": {
            "removed_serial_number_a": "SN-1",
            "added_serial_number_a": "SN-2",
            "stack_symptom_a": "Coolant leak",
            "stack_symptom_confirmed_a": True,
        },
    }
    assert get_category_config("Stack replacements").serialize(value, helpers) == {
        "stack_replacements": "('a','SN-1','SN-2','Coolant leak','true');",
        "workorder_id": "WO-002527",
    }


def test_inspection_prefills_latest_serials():
    helpers = FormHelpers(stack_count=2, latest_serials=lambda: {"a": "SN-100"})
    inputs = get_category_config("Stack inspection").build_form_inputs(helpers)
    assert inputs[0].children[0].default == "SN-100"
    assert inputs[1].children[0].default == ""

    edit_inputs = get_category_config("Stack inspection").build_form_inputs(helpers.for_edit())
    assert edit_inputs[0].children[0].default == ""


def test_installs_do_not_consult_history():
    def fail() -> dict[str, str]:
        raise AssertionError("history should not be read")

    helpers = FormHelpers(stack_count=1, latest_serials=fail)
    get_category_config("Stack installs").build_form_inputs(helpers)


def test_stack_edit_initial_value(helpers: FormHelpers):
    note = Note(id="n1", note_category="Stack tensioning", stack_tensioning="('b','SN-2','torqued','true');")
    initial = get_category_config("Stack tensioning").build_edit_initial_value(note, helpers)
    assert initial == {
        "stack_group_tensioning_b": {
            "stack_serial_number_b": "SN-2",
            "insight_b": "torqued",
            "stack_completed_b": True,
        }
    }


def test_stack_read_only_fields():
    note = Note(id="n1", note_category="Stack inspection", stack_inspections="('a','SN-1','ok','true');")
    groups = get_category_config("Stack inspection").build_read_only_fields(note)
    assert [g.key for g in groups] == ["current_stack_inspection_a"]
    assert groups[0].disabled
    assert [(c.key, c.default) for c in groups[0].children] == [
        ("current_serial_a", "SN-1"),
        ("current_insight_a", "ok"),
        ("current_completed_a", "Yes"),
    ]


def test_stack_render_view():
    config = get_category_config("Stack installs")
    assert isinstance(config.render_view(Note(id="n1", stack_installs="('a','SN-1');")), Table)
    assert config.render_view(Note(id="n2")) is None


def test_symptom_label():
    assert symptom_label("") == "None"
    assert symptom_label("Broken MEA") == "Broken MEA (Membrane Electrode Assembly)"
    assert symptom_label("Unlisted") == "Unlisted"


def test_history_is_read_once_per_form():
    calls: list[int] = []

    def serials() -> dict[str, str]:
        calls.append(1)
        return {"a": "SN-A", "e": "SN-E"}

    helpers = FormHelpers(stack_count=5, latest_serials=serials)
    for category in ("Stack inspection", "Stack tensioning"):
        calls.clear()
        inputs = get_category_config(category).build_form_inputs(helpers)
        assert len(inputs) == 5
        assert inputs[4].children[0].default == "SN-E"
        assert len(calls) == 1
