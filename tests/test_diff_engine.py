import random

import pytest

from src.diff_engine import diff_catalogs
from src.models import Catalog

# =============================================================================
# 1. CATALOG CONTAINER
# =============================================================================

def test_catalog_dedupes_in_first_seen_order():
    catalog = Catalog(["b", "a", "b", "c", "a"])
    assert catalog.to_list() == ["b", "a", "c"]
    assert len(catalog) == 3
    assert "a" in catalog and "z" not in catalog


def test_catalog_equality_is_ordered():
    assert Catalog(["a", "b"]) == Catalog(["a", "b"])
    assert Catalog(["a", "b"]) != Catalog(["b", "a"])
    assert Catalog(["a", "b"]) == ["a", "b"]

# =============================================================================
# 2. DIFF
# =============================================================================

def test_added_and_removed_scenario():
    diff = diff_catalogs(Catalog(["a", "b", "c"]), Catalog(["b", "c", "d"]))
    assert diff.added == ("d",)
    assert diff.removed == ("a",)
    assert diff.has_changes


def test_identical_catalogs_have_no_changes():
    diff = diff_catalogs(["x", "y"], ["x", "y"])
    assert diff.added == () and diff.removed == ()
    assert not diff.has_changes


def test_reordering_is_not_a_change():
    assert not diff_catalogs(["x", "y"], ["y", "x"]).has_changes


def test_first_run_reports_everything_added():
    diff = diff_catalogs(Catalog(), ["a", "b"])
    assert diff.added == ("a", "b")
    assert diff.removed == ()


def test_output_follows_input_order():
    diff = diff_catalogs(["z", "y", "x", "keep"], ["keep", "c", "a", "b"])
    assert diff.added == ("c", "a", "b")
    assert diff.removed == ("z", "y", "x")


def test_inputs_not_modified():
    previous = ["a", "b"]
    current = ["b", "c"]
    diff_catalogs(previous, current)
    assert previous == ["a", "b"] and current == ["b", "c"]


@pytest.mark.parametrize("seed", range(25))
def test_set_identities_hold(seed):
    rng = random.Random(seed)
    universe = [f"https://shop.example/product/{i}" for i in range(30)]
    previous = rng.sample(universe, rng.randint(0, 30))
    current = rng.sample(universe, rng.randint(0, 30))

    diff = diff_catalogs(previous, current)
    added, removed = set(diff.added), set(diff.removed)
    common = set(previous) & set(current)

    assert added.isdisjoint(removed)
    assert added | common == set(current)
    assert removed | common == set(previous)
