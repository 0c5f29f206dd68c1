"""
Long-format labeled tables shared by every pipeline stage.

A table is an ordered collection of ``(row, column, value)`` triples.
Matrices (alternative x criterion), per-criterion vectors and
per-alternative vectors all use the same representation, so stages are
written as group-by/reduce operations over labels instead of index
arithmetic.
"""
import math
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, Optional, Union

import numpy as np
import pandas as pd

from .errors import InvalidInputError

ROW = 'row'
COLUMN = 'column'
VALUE = 'value'


@dataclass(frozen=True)
class LabeledEntry:
    """A single labeled cell."""
    row: str
    column: str
    value: float


class LabeledTable:
    """
    Immutable ordered table of labeled entries.

    The backing DataFrame is copied on construction and on every export,
    so no two tables share mutable state.
    """

    def __init__(self, frame: pd.DataFrame):
        missing = [c for c in (ROW, COLUMN, VALUE) if c not in frame.columns]
        if missing:
            raise ValueError(f"Table frame is missing columns: {missing}")

        frame = frame[[ROW, COLUMN, VALUE]].reset_index(drop=True).copy()
        frame[VALUE] = frame[VALUE].astype(float)

        duplicated = frame.duplicated(subset=[ROW, COLUMN])
        if duplicated.any():
            first = frame[duplicated].iloc[0]
            raise InvalidInputError(
                f"Duplicate cell ({first[ROW]}, {first[COLUMN]})",
                stage='table', label=f"{first[ROW]}/{first[COLUMN]}"
            )

        self._frame = frame

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_entries(cls, entries: Iterable[LabeledEntry]) -> 'LabeledTable':
        records = [(e.row, e.column, e.value) for e in entries]
        return cls(pd.DataFrame(records, columns=[ROW, COLUMN, VALUE]))

    @classmethod
    def from_wide(cls, df: pd.DataFrame) -> 'LabeledTable':
        """Build a table from a frame indexed by row label with one column per column label."""
        records = []
        for row_label, row in df.iterrows():
            for column_label, value in row.items():
                records.append((row_label, column_label, value))
        return cls(pd.DataFrame(records, columns=[ROW, COLUMN, VALUE]))

    @classmethod
    def from_series(
        cls,
        series: pd.Series,
        row: Optional[str] = None,
        column: Optional[str] = None
    ) -> 'LabeledTable':
        """
        Build a one-axis table from a label-indexed series.

        Pass ``row`` to key every entry under a fixed row label (the index
        becomes the column labels), or ``column`` for the transpose.
        """
        if (row is None) == (column is None):
            raise ValueError("Exactly one of row/column must be given")

        labels = list(series.index)
        frame = pd.DataFrame({
            ROW: [row] * len(labels) if row is not None else labels,
            COLUMN: labels if row is not None else [column] * len(labels),
            VALUE: series.to_numpy(dtype=float),
        })
        return cls(frame)

    @classmethod
    def concat(cls, tables: Iterable['LabeledTable']) -> 'LabeledTable':
        return cls(pd.concat([t._frame for t in tables], ignore_index=True))

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    @property
    def rows(self) -> List[str]:
        """Distinct row labels in order of first appearance."""
        return list(pd.unique(self._frame[ROW]))

    @property
    def columns(self) -> List[str]:
        """Distinct column labels in order of first appearance."""
        return list(pd.unique(self._frame[COLUMN]))

    @property
    def values(self) -> np.ndarray:
        return self._frame[VALUE].to_numpy(copy=True)

    def entries(self) -> List[LabeledEntry]:
        return [LabeledEntry(r, c, float(v))
                for r, c, v in self._frame.itertuples(index=False, name=None)]

    def value(self, row: str, column: str) -> float:
        match = self._frame[(self._frame[ROW] == row) & (self._frame[COLUMN] == column)]
        if match.empty:
            raise KeyError((row, column))
        return float(match[VALUE].iloc[0])

    def column_values(self, column: str) -> pd.Series:
        """Values of one column, indexed by row label."""
        part = self._frame[self._frame[COLUMN] == column]
        return pd.Series(part[VALUE].to_numpy(), index=part[ROW].to_numpy(), name=column)

    def row_values(self, row: str) -> pd.Series:
        """Values of one row, indexed by column label."""
        part = self._frame[self._frame[ROW] == row]
        return pd.Series(part[VALUE].to_numpy(), index=part[COLUMN].to_numpy(), name=row)

    # ------------------------------------------------------------------
    # Derivation
    # ------------------------------------------------------------------

    def reduce(self, by: str, func: Union[str, Callable] = 'sum') -> pd.Series:
        """
        Group entries by ``'row'`` or ``'column'`` and reduce their values.

        ``'sum'`` uses ``math.fsum`` so the result does not depend on the
        order of entries inside a group.
        """
        if by not in (ROW, COLUMN):
            raise ValueError(f"Cannot group by {by!r}")
        if func == 'sum':
            func = math.fsum
        grouped = self._frame.groupby(by, sort=False)[VALUE]
        result = grouped.agg(func).astype(float)
        result.index.name = None
        return result

    def with_values(self, values: Union[np.ndarray, pd.Series, List[float]]) -> 'LabeledTable':
        """New table with the same labels and replaced values."""
        values = np.asarray(values, dtype=float)
        if len(values) != len(self._frame):
            raise ValueError(
                f"Expected {len(self._frame)} values, got {len(values)}"
            )
        frame = self._frame.copy()
        frame[VALUE] = values
        return LabeledTable(frame)

    def map_by(self, by: str, mapping: pd.Series) -> np.ndarray:
        """Look up ``mapping`` by each entry's row or column label."""
        return self._frame[by].map(mapping).to_numpy(dtype=float)

    def drop_columns(self, columns: Iterable[str]) -> 'LabeledTable':
        columns = set(columns)
        return LabeledTable(self._frame[~self._frame[COLUMN].isin(columns)])

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def to_frame(self) -> pd.DataFrame:
        return self._frame.copy()

    def to_wide(self) -> pd.DataFrame:
        """Rows x columns frame, labels kept in order of first appearance."""
        wide = self._frame.pivot(index=ROW, columns=COLUMN, values=VALUE)
        wide = wide.reindex(index=self.rows, columns=self.columns)
        wide.index.name = None
        wide.columns.name = None
        return wide

    def equals(self, other: 'LabeledTable') -> bool:
        return isinstance(other, LabeledTable) and self._frame.equals(other._frame)

    def __len__(self) -> int:
        return len(self._frame)

    def __iter__(self) -> Iterator[LabeledEntry]:
        return iter(self.entries())

    def __repr__(self):
        return f"LabeledTable(rows={len(self.rows)}, columns={len(self.columns)}, entries={len(self)})"
