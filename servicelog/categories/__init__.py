"""
Note category registry.

Every category is one CategoryConfig in CATEGORY_CONFIGS. Forms, edit
pre-fill, views and recategorization all dispatch through this table, so
adding a category means adding one entry here (and its record fields to
models.Note).
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from ..models import CATEGORY_OWNED_FIELDS
from .base import AccessTier, CategoryConfig, CategoryOption, FormHelpers
from .simple import OtherCategory, SoftwareUpdateCategory, TagListCategory
from .stack import (
    StackCategory,
    StackInspectionCategory,
    StackInstallsCategory,
    StackReplacementsCategory,
    StackTensioningCategory,
)

UNCATEGORIZED_LABEL = "Uncategorized"
FALLBACK_CATEGORY = "Other"


# ============================================================================
# REGISTRY (display order)
# ============================================================================

CATEGORY_CONFIGS: tuple[CategoryConfig, ...] = (
    TagListCategory("Calibration"),
    SoftwareUpdateCategory(),
    TagListCategory("Settings change"),
    StackReplacementsCategory(),
    StackInspectionCategory(),
    StackTensioningCategory(),
    StackInstallsCategory(),
    OtherCategory(),
)

_CONFIGS_BY_VALUE: Mapping[str, CategoryConfig] = MappingProxyType(
    {config.value: config for config in CATEGORY_CONFIGS}
)


# ============================================================================
# REGISTRY QUERY FUNCTIONS
# ============================================================================


def get_category_config(note_category: str | None) -> CategoryConfig | None:
    """Exact-match lookup; None for unknown or missing categories."""
    if not note_category:
        return None
    return _CONFIGS_BY_VALUE.get(note_category)


def get_category_display_label(note_category: str | None) -> str:
    """Config label, else the raw category value, else "Uncategorized"."""
    config = get_category_config(note_category)
    if config is not None:
        return config.label
    return note_category or UNCATEGORIZED_LABEL


def get_category_options(access: AccessTier) -> list[CategoryOption]:
    """Category choices for a selection input, hiding internal-only ones from basic access."""
    return [
        config.option()
        for config in CATEGORY_CONFIGS
        if access == AccessTier.ELEVATED or not config.internal_only
    ]


def list_categories() -> list[str]:
    """All category values in registration order."""
    return [config.value for config in CATEGORY_CONFIGS]


__all__ = [
    "AccessTier",
    "CATEGORY_CONFIGS",
    "CATEGORY_OWNED_FIELDS",
    "CategoryConfig",
    "CategoryOption",
    "FALLBACK_CATEGORY",
    "FormHelpers",
    "StackCategory",
    "UNCATEGORIZED_LABEL",
    "get_category_config",
    "get_category_display_label",
    "get_category_options",
    "list_categories",
]
