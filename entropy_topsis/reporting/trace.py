"""
Diagnostic rendering of intermediate pipeline tables.

Sinks in this module can be passed as ``run_topsis(trace=...)``. They
only observe tables and never affect the computed ranking.
"""
import logging
import sys
from typing import TextIO, Optional

import numpy as np

from ..decision.table import LabeledTable


def _format_value(value: float) -> str:
    if np.isnan(value):
        return ''
    rounded = round(float(value), 3)
    if rounded == int(rounded):
        return str(int(rounded))
    return str(rounded)


def render_table(table: LabeledTable, title: str) -> str:
    """
    Render a table as tab-separated text.

    Layout: a blank line, the title, a header row of column labels after
    a leading tab, then one line per row label with values rounded to 3
    decimals.
    """
    wide = table.to_wide()

    lines = ["", title, ""]
    lines.append("\t" + "".join(f"{col}\t" for col in wide.columns))
    for row_label, row in wide.iterrows():
        lines.append(f"{row_label}\t" + "".join(f"{_format_value(v)}\t" for v in row))

    return "\n".join(lines) + "\n"


class TraceWriter:
    """Trace sink writing renderings to a text stream (stdout by default)."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream if stream is not None else sys.stdout

    def __call__(self, title: str, table: LabeledTable) -> None:
        self.stream.write(render_table(table, title))
        self.stream.flush()


class TraceLogger:
    """Trace sink sending renderings to a logger at DEBUG level."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def __call__(self, title: str, table: LabeledTable) -> None:
        self.logger.debug(render_table(table, title))
