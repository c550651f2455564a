"""Tests for the per-column filter engine."""

import pytest

from datagrid.core.errors import ColumnCapabilityError, UnknownColumnError
from datagrid.models.column import ColumnModel
from datagrid.models.row import RowEntry
from datagrid.services.grid.filter_engine import FilterEngine


@pytest.fixture
def columns():
    """Create a column model for filtering."""
    return ColumnModel(
        [
            {"key": "status", "title": "Status", "type": "select", "options": ["Active", "Inactive"]},
            {"key": "team", "title": "Team"},
            {"key": "users", "title": "Users", "type": "number"},
            {"key": "memo", "title": "Memo", "filterable": False},
        ]
    )


@pytest.fixture
def rows():
    """Create rows with a mix of values."""
    records = [
        {"status": "Active", "team": "Red", "users": 5},
        {"status": "Inactive", "team": "Red", "users": 7},
        {"status": "Active", "team": "Blue", "users": 5},
        {"status": "Pending", "team": None, "users": 3},
        {"status": "", "team": "blue-green", "users": 3.0},
    ]
    return [RowEntry(key=i, record=r) for i, r in enumerate(records)]


@pytest.fixture
def filter_engine(columns):
    """Create a filter engine for testing."""
    return FilterEngine(columns)


def _keys(rows):
    return [r.key for r in rows]


def test_available_values_are_distinct_and_skip_empty(filter_engine, rows):
    """Test the distinct value universe of a column."""
    assert filter_engine.available_values("status", rows) == ["Active", "Inactive", "Pending"]
    assert filter_engine.available_values("team", rows) == ["Blue", "Red", "blue-green"]
    assert filter_engine.available_values("users", rows) == ["3", "5", "7"]


def test_available_values_search_is_case_insensitive(filter_engine, rows):
    """Test narrowing the offered values with a search term."""
    assert filter_engine.available_values("team", rows, "BLUE") == ["Blue", "blue-green"]

    filter_engine.set_search_term("team", "re")
    assert filter_engine.available_values("team", rows) == ["Red", "blue-green"]
    assert filter_engine.search_term("team") == "re"


def test_empty_filter_passes_everything(filter_engine, rows):
    """Test that an empty accepted set does not hide rows."""
    filter_engine.toggle("status", "Active")
    filter_engine.toggle("status", "Active")

    assert filter_engine.selected_values("status") == []
    assert not filter_engine.is_active("status")
    assert _keys(filter_engine.apply(rows)) == [0, 1, 2, 3, 4]


def test_filters_combine_with_and(filter_engine, rows):
    """Test conjunction across columns and re-admission after clearing."""
    filter_engine.toggle("status", "Active")
    filter_engine.toggle("status", "Inactive")
    filter_engine.toggle("team", "Red")

    assert _keys(filter_engine.apply(rows)) == [0, 1]

    filter_engine.clear("team")
    assert _keys(filter_engine.apply(rows)) == [0, 1, 2]

    filter_engine.clear("status")
    assert _keys(filter_engine.apply(rows)) == [0, 1, 2, 3, 4]


def test_numeric_values_match_as_text(filter_engine, rows):
    """Test that number cells match their stringified form."""
    filter_engine.toggle("users", "3")

    assert _keys(filter_engine.apply(rows)) == [3, 4]


def test_select_all_uses_current_search_term(filter_engine, rows):
    """Test select-all sets the filter to the currently offered values."""
    filter_engine.set_search_term("team", "blue")

    selected = filter_engine.select_all("team", rows)

    assert selected == ["Blue", "blue-green"]
    assert _keys(filter_engine.apply(rows)) == [2, 4]


def test_clear_all_and_state(filter_engine, rows):
    """Test the exposed filter state and clearing every column."""
    filter_engine.toggle("status", "Active")
    filter_engine.toggle("team", "Red")
    filter_engine.toggle("team", "Red")

    assert filter_engine.state == {"status": ["Active"]}

    filter_engine.clear_all()
    assert filter_engine.state == {}


def test_rejects_unknown_and_unfilterable_columns(filter_engine, rows):
    """Test filtering columns that cannot be filtered."""
    with pytest.raises(UnknownColumnError):
        filter_engine.toggle("missing", "x")
    with pytest.raises(ColumnCapabilityError):
        filter_engine.toggle("memo", "x")
    with pytest.raises(UnknownColumnError):
        filter_engine.available_values("missing", rows)
