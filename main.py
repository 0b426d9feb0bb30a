#!/usr/bin/env python3
"""
Main script for running the trees linear-regression walkthrough.
"""

# Pipeline overview (README-style):
# 1) Load the bundled trees table and add a quantile height class plus a
#    seeded synthetic group column.
# 2) Fit Volume ~ Girth, Volume ~ Girth + Height, Volume ~ Girth * Height and
#    the log-log model, and summarize each as tidy / glance / ANOVA tables.
# 3) Compare the nested models, check residual assumptions and predict for
#    new trees.
# 4) Fit Volume ~ Girth within each height class.
# 5) Export CSV tables, diagnostic and data figures, captions and the log.

import os
import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from timber.cli import main

if __name__ == "__main__":
    sys.exit(main())
