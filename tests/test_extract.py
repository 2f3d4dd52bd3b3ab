"""Tests for extracting stack sub-records from form values."""

from __future__ import annotations

from servicelog.stacks import clamp_stack_count, stack_identifiers, stack_label
from servicelog.stacks.codec import StackInspection, StackInstall, StackReplacement
from servicelog.stacks.extract import INSPECTION_LAYOUT, INSTALL_LAYOUT, REPLACEMENT_LAYOUT


def test_stack_identifiers_are_clamped():
    assert stack_identifiers(2) == ["a", "b"]
    assert stack_identifiers(0) == ["a"]
    assert stack_identifiers(9) == ["a", "b", "c", "d", "e"]
    assert clamp_stack_count(3) == 3
    assert stack_label("c") == "Stack C"


def test_extract_skips_empty_groups():
    value = {
        "stack_group_inspection_a": {
            "stack_serial_number_a": "SN-100",
            "insight_a": "looks fine",
            "stack_completed_a": True,
        },
        "stack_group_inspection_b": {"stack_serial_number_b": "", "insight_b": ""},
    }
    assert INSPECTION_LAYOUT.extract(value, ["a", "b"]) == [StackInspection("a", "SN-100", "looks fine", True)]


def test_extract_flag_alone_is_not_presence():
    value = {"stack_group_inspection_a": {"stack_completed_a": True}}
    assert INSPECTION_LAYOUT.extract(value, ["a"]) == []


def test_extract_missing_groups_and_children():
    assert INSPECTION_LAYOUT.extract({}, ["a", "b"]) == []
    assert INSPECTION_LAYOUT.extract(None, ["a"]) == []
    value = {"stack_group_inspection_a": {"insight_a": "hairline crack"}}
    assert INSPECTION_LAYOUT.extract(value, ["a"]) == [StackInspection("a", "", "hairline crack", False)]


def test_extract_only_reads_requested_identifiers():
    value = {
        "stack_group_installs_a": {"stack_serial_number_a": "SN-1"},
        "stack_group_installs_c": {"stack_serial_number_c": "SN-3"},
    }
    assert INSTALL_LAYOUT.extract(value, ["a", "b"]) == [StackInstall("a", "SN-1")]


def test_extract_replacement_with_removed_serial_only():
    value = {"stack_group_b": {"removed_serial_number_b": "SN-OLD", "stack_symptom_b": "H2 leak"}}
    assert REPLACEMENT_LAYOUT.extract(value, ["a", "b"]) == [StackReplacement("b", "SN-OLD", "", "H2 leak", False)]


def test_extract_coerces_non_string_values():
    value = {"stack_group_installs_a": {"stack_serial_number_a": 12345}}
    assert INSTALL_LAYOUT.extract(value, ["a"]) == [StackInstall("a", "12345")]


def test_expand_builds_group_values():
    initial = REPLACEMENT_LAYOUT.expand([StackReplacement("a", "SN-1", "SN-2", "Coolant leak", True)])
    assert initial == {
        "stack_group_a": {
            "removed_serial_number_a": "SN-1",
            "added_serial_number_a": "SN-2",
            "stack_symptom_a": "Coolant leak",
            "stack_symptom_confirmed_a": True,
        }
    }
    assert REPLACEMENT_LAYOUT.extract(initial, ["a"]) == [StackReplacement("a", "SN-1", "SN-2", "Coolant leak", True)]
