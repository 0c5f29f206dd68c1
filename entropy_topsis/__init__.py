"""
Entropy-weighted TOPSIS
=======================

Ranks alternatives scored on several criteria by closeness to an ideal
profile and distance from a worst profile, with criterion weights
derived from the entropy of the data.

Modules:
    core: Configuration, logging and utilities
    data_io: Decision matrix loading and schema mapping
    decision: Labeled tables, the TOPSIS pipeline and sensitivity analysis
    reporting: Diagnostic trace rendering and plotting
"""

__version__ = "1.0.0"

from . import core
from . import data_io
from . import decision
from . import reporting
