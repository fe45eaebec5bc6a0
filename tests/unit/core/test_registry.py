"""Unit tests for core/markup/registry.py"""

import pytest

from mdreview.core.markup.registry import DiffNodeRegistry
from mdreview.core.models import DiffNodeType
from mdreview.errors import DiffNodeNotFoundError


@pytest.fixture(name="registry")
def registry_fixture():
    return DiffNodeRegistry.from_markup("The {--cat--}{++dog++} sat{++ down++}.")


def test_registry_counts(registry):
    assert registry.count() == 3
    assert registry.count("ins") == 2
    assert registry.count(DiffNodeType.deletion) == 1
    assert len(registry) == 3


def test_registry_change_count_merges_substitutions(registry):
    """An adjacent deletion + insertion counts as one logical change."""
    assert registry.substitutions() == [("diff-1", "diff-2")]
    assert registry.change_count() == 2


def test_registry_lookup(registry):
    assert registry.keys_in_order() == ["diff-1", "diff-2", "diff-3"]
    assert registry.get("diff-3") == " down"
    assert registry.type_of("diff-1") == DiffNodeType.deletion
    assert "diff-2" in registry


def test_registry_missing_key(registry):
    with pytest.raises(DiffNodeNotFoundError):
        registry.get("diff-4")


def test_registry_decodes_breaks():
    registry = DiffNodeRegistry.from_markup("- a{++<nl>- b++}", break_token="<nl>")
    assert registry.get("diff-1") == "\n- b"


def test_empty_registry():
    registry = DiffNodeRegistry()
    assert registry.count() == 0
    assert registry.keys_in_order() == []
