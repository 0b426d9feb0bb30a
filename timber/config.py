"""Run configuration for the walkthrough pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Tuple

DEFAULT_OUTPUT_DIR = Path("output")
DEFAULT_CONF_LEVEL = 0.95
DEFAULT_N_CLASSES = 3
DEFAULT_SEED = 42
LOG_FILENAME = "timber_walkthrough.log"

CHAPTER_FORMULAS: Tuple[Tuple[str, str], ...] = (
    ("girth_only", "Volume ~ Girth"),
    ("girth_height", "Volume ~ Girth + Height"),
    ("interaction", "Volume ~ Girth * Height"),
    ("log_log", "np.log(Volume) ~ np.log(Girth) + np.log(Height)"),
)
GROUP_FORMULA = "Volume ~ Girth"


@dataclass(frozen=True)
class WalkthroughConfig:
    """Settings for one walkthrough run.

    Attributes:
        output_dir: Root directory for CSV tables, captions, figures and log.
        conf_level: Coverage of coefficient confidence intervals.
        n_classes: Number of quantile height classes used for subgroup fits.
        seed: Seed for the synthetic ``group`` column.
        make_plots: Render figures when ``True``.
        formulas: ``(name, formula)`` pairs fitted to the full table. Every
            model with the same response as the first is compared as a
            nested sequence, in this order.
        group_formula: Formula fitted within each height class.
    """

    output_dir: Path = DEFAULT_OUTPUT_DIR
    conf_level: float = DEFAULT_CONF_LEVEL
    n_classes: int = DEFAULT_N_CLASSES
    seed: int = DEFAULT_SEED
    make_plots: bool = True
    formulas: Tuple[Tuple[str, str], ...] = field(default=CHAPTER_FORMULAS)
    group_formula: str = GROUP_FORMULA

    def __post_init__(self) -> None:
        if not (0.0 < float(self.conf_level) < 1.0):
            raise ValueError(
                f"conf_level must be between 0 and 1, got {self.conf_level!r}"
            )
        if int(self.n_classes) < 2:
            raise ValueError(f"n_classes must be at least 2, got {self.n_classes!r}")
        object.__setattr__(self, "output_dir", Path(self.output_dir))

    @property
    def tables_dir(self) -> Path:
        return self.output_dir / "tables"

    @property
    def figures_dir(self) -> Path:
        return self.output_dir / "figures"

    @property
    def log_path(self) -> Path:
        return self.output_dir / LOG_FILENAME
