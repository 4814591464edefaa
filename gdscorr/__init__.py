#!/usr/bin/env python
# Copyright (C) 2019 Emanuel Goncalves

import sys
import logging
import seaborn as sns
from gdscorr.GDSCorrPlot import GDSCorrPlot

# - Version
__version__ = "0.1.0"

# - Plot main default aesthetics
sns.set(
    style="ticks",
    context="paper",
    font_scale=0.75,
    font="sans-serif",
    rc=GDSCorrPlot.SNS_RC,
)

# - Logger
logger = logging.getLogger("GDSCorr")

if not logger.handlers:
    ch = logging.StreamHandler(sys.stdout)
    ch.setFormatter(logging.Formatter("[%(asctime)s - %(levelname)s]: %(message)s"))
    logger.addHandler(ch)
    logger.setLevel(logging.INFO)
    logger.propagate = False


# - GDSCorr handlers
__all__ = ["__version__", "logger"]
