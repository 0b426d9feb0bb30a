import numpy as np
import pandas as pd
import pytest

from timber.reporting import (
    format_pvalue,
    format_tidy,
    generate_caption_texts,
    significance_stars,
    summary_text,
    write_caption_files,
)
from timber.stats.formula import fit_lm
from timber.stats.tidy import tidy


@pytest.mark.parametrize(
    "value, expected",
    [(0.0004, "<0.001"), (0.01234, "0.012"), (0.5, "0.500"), (np.nan, "NaN")],
)
def test_format_pvalue(value, expected):
    assert format_pvalue(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [(0.0005, "***"), (0.005, "**"), (0.03, "*"), (0.07, "."), (0.4, ""), (np.nan, "")],
)
def test_significance_stars(value, expected):
    assert significance_stars(value) == expected


def test_format_tidy_renders_rows(trees):
    text = format_tidy(tidy(fit_lm("Volume ~ Girth", trees)))
    assert "Intercept" in text
    assert "Girth" in text
    assert "<0.001" in text
    assert "5.0659" in text


def test_format_tidy_empty():
    assert format_tidy(pd.DataFrame()) == "(no rows)"


def test_summary_text_sections(trees):
    text = summary_text(fit_lm("Volume ~ Girth", trees))
    assert text.startswith("Formula: Volume ~ Girth")
    assert "Residuals:" in text
    assert "Coefficients:" in text
    assert "***" in text
    assert "on 29 degrees of freedom" in text
    assert "Multiple R-squared: 0.9353" in text
    assert "F-statistic: 419.3" in text
    assert "on 1 and 29 DF" in text


def test_generate_caption_texts_keys():
    captions = generate_caption_texts(
        n_obs=31,
        model_names=["girth_only", "girth_height"],
        group_column="height_class",
        group_levels=["short", "medium", "tall"],
    )
    assert set(captions) == {
        "scatter_matrix",
        "fit_line",
        "diagnostics_girth_only",
        "diagnostics_girth_height",
        "fit_by_group",
        "coefficients_by_group",
    }
    assert "n=31" in captions["scatter_matrix"]
    assert "short, medium, tall" in captions["fit_by_group"]


def test_write_caption_files(tmp_path):
    paths = write_caption_files({"fit_line": "A caption.  "}, str(tmp_path))
    assert paths == [str(tmp_path / "fit_line_caption.txt")]
    assert (tmp_path / "fit_line_caption.txt").read_text(encoding="utf-8") == (
        "A caption.\n"
    )
