import numpy as np
import pandas as pd
import pytest

from timber.data_processing import (
    add_height_class,
    add_random_group,
    describe_table,
    load_table,
    load_trees,
    split_by_group,
    validate_columns,
)
from timber.schema import TREES


def test_load_trees_shape_and_columns():
    df = load_trees()
    assert df.shape == (31, 3)
    assert list(df.columns) == [TREES.girth, TREES.height, TREES.volume]
    assert df[TREES.girth].iloc[0] == pytest.approx(8.3)
    assert df[TREES.volume].iloc[-1] == pytest.approx(77.0)


def test_load_trees_returns_fresh_copy():
    first = load_trees()
    first.loc[0, TREES.volume] = -1.0
    assert load_trees().loc[0, TREES.volume] == pytest.approx(10.3)


def test_load_table_reads_any_csv(tmp_path):
    path = tmp_path / "small.csv"
    pd.DataFrame({"a": [1, 2], "b": [3.0, 4.0]}).to_csv(path, index=False)
    df = load_table(str(path))
    assert list(df.columns) == ["a", "b"]
    assert len(df) == 2


def test_validate_columns_names_missing():
    df = pd.DataFrame({"Girth": [1.0]})
    with pytest.raises(KeyError, match="Volume"):
        validate_columns(df, ["Girth", "Volume"])


def test_add_height_class_equal_count_bins(trees):
    out = add_height_class(trees)
    assert TREES.height_class not in trees.columns
    counts = out[TREES.height_class].value_counts()
    assert counts["short"] == 11
    assert counts["medium"] == 13
    assert counts["tall"] == 7
    assert list(out[TREES.height_class].cat.categories) == ["short", "medium", "tall"]


def test_add_height_class_default_labels_for_other_counts(trees):
    out = add_height_class(trees, n_classes=4)
    assert list(out[TREES.height_class].cat.categories) == ["Q1", "Q2", "Q3", "Q4"]


def test_add_height_class_rejects_bad_arguments(trees):
    with pytest.raises(ValueError, match="at least 2"):
        add_height_class(trees, n_classes=1)
    with pytest.raises(ValueError, match="labels"):
        add_height_class(trees, n_classes=3, labels=["low", "high"])


def test_add_random_group_is_seeded(trees):
    a = add_random_group(trees, seed=7)
    b = add_random_group(trees, seed=7)
    assert a[TREES.group].tolist() == b[TREES.group].tolist()
    assert list(a[TREES.group].cat.categories) == ["A", "B", "C"]
    assert set(a[TREES.group].unique()) <= {"A", "B", "C"}


def test_add_random_group_rejects_empty_labels(trees):
    with pytest.raises(ValueError):
        add_random_group(trees, labels=[])


def test_split_by_group_keeps_index_and_order(classed_trees):
    parts = split_by_group(classed_trees, TREES.height_class)
    assert list(parts) == ["short", "medium", "tall"]
    assert sum(len(part) for part in parts.values()) == 31
    recombined = pd.concat(parts.values()).sort_index()
    assert recombined.index.tolist() == classed_trees.index.tolist()


def test_describe_table_summarizes_numeric_columns(trees):
    desc = describe_table(trees)
    assert desc["variable"].tolist() == [TREES.girth, TREES.height, TREES.volume]
    girth = desc.set_index("variable").loc[TREES.girth]
    assert girth["n"] == 31
    assert girth["mean"] == pytest.approx(np.mean(trees[TREES.girth]))
    assert girth["min"] == pytest.approx(8.3)
    assert girth["max"] == pytest.approx(20.6)


def test_add_height_class_too_many_classes_for_tied_heights(trees):
    with pytest.raises(ValueError, match="n_classes=12") as excinfo:
        add_height_class(trees, n_classes=12)
    distinct = trees[TREES.height].nunique()
    assert f"only {distinct} distinct values" in str(excinfo.value)


def test_split_by_group_drops_unused_levels(trees):
    df = trees.copy()
    df["kind"] = pd.Categorical(
        ["oak"] * 20 + ["ash"] * 11, categories=["oak", "ash", "elm"]
    )
    parts = split_by_group(df, "kind")
    assert list(parts) == ["oak", "ash"]
    assert "elm" not in parts
