"""
Entropy-weighted TOPSIS (Technique for Order Preference by Similarity to
Ideal Solution).

The pipeline is a forward pass of pure stages over ``LabeledTable``s:

    decision matrix
      -> vector-normalized matrix     (Euclidean norm per criterion)
      -> sum-normalized matrix        (share of column total, feeds entropy)
      -> entropy vector               (row "e")
      -> criteria weights             (row "w", from 1 - entropy)
      -> weighted normalized matrix
      -> ideal / worst profiles       (rows "A+" / "A-")
      -> distances to the profiles    (columns "S+" / "S-")
      -> closeness coefficient        (column "C")
      -> rank                         (column "Rank", 1 = best)

Every criterion is treated as "higher is better".
"""
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple, Union, Any

import numpy as np
import pandas as pd

from .errors import InvalidInputError, DegenerateWeightsError, DegenerateDistanceError
from .table import LabeledTable, ROW, COLUMN
from ..core.logging_utils import get_logger

# Synthetic labels
ENTROPY_ROW = 'e'
WEIGHT_ROW = 'w'
IDEAL_ROW = 'A+'
WORST_ROW = 'A-'
DISTANCE_TO_IDEAL = 'S+'
DISTANCE_TO_WORST = 'S-'
CLOSENESS = 'C'
RANK = 'Rank'

# Stage titles, in pipeline order
DECISION_MATRIX = "Decision matrix"
VECTOR_NORMALIZED = "Normalized Vector Decision Matrix"
SUM_NORMALIZED = "Normalized Decision Matrix"
ENTROPY_VECTOR = "Entropy Vector"
CRITERIA_WEIGHTS = "Evaluation Criteria Weights"
APPLIED_WEIGHTS = "Applied Criteria Weights"
WEIGHTED_MATRIX = "Weighted Normalized Decision Matrix"
IDEAL_SOLUTION = "Ideal Solution"
WORST_SOLUTION = "Worst Solution"
RESULT = "Relative proximity to the ideal solution and alternative options rating"

# Entropy within this of 1 is rounding noise of the entropy sum (a few ulps)
DEGENERACY_TOLERANCE = 1e-14

TraceCallback = Callable[[str, LabeledTable], None]
WeightsLike = Union[LabeledTable, pd.Series, Dict[str, float]]


def _per_column(table: LabeledTable) -> pd.Series:
    """Single value per column label (for one-row tables)."""
    return table.reduce(COLUMN, 'first')


def _per_row(table: LabeledTable) -> pd.Series:
    """Single value per row label (for one-column tables)."""
    return table.reduce(ROW, 'first')


def _euclidean(values) -> float:
    return math.sqrt(math.fsum(v * v for v in values))


# ----------------------------------------------------------------------
# Input validation
# ----------------------------------------------------------------------

def validate_decision_matrix(matrix: LabeledTable) -> None:
    """
    Check the decision matrix before any stage runs.

    Requires at least two alternatives, at least one criterion, a value
    for every (alternative, criterion) pair and strictly positive finite
    values.

    Raises:
        InvalidInputError: naming the offending alternative/criterion
    """
    alternatives = matrix.rows
    criteria = matrix.columns

    if len(criteria) < 1:
        raise InvalidInputError("At least one criterion is required", stage='input')
    if len(alternatives) < 2:
        raise InvalidInputError(
            f"At least two alternatives are required, got {len(alternatives)}",
            stage='input', label=alternatives[0] if alternatives else None
        )

    if len(matrix) != len(alternatives) * len(criteria):
        wide = matrix.to_wide()
        for alternative in wide.index:
            for criterion in wide.columns:
                if pd.isna(wide.at[alternative, criterion]):
                    raise InvalidInputError(
                        f"Missing value for alternative {alternative!r}, criterion {criterion!r}",
                        stage='input', label=f"{alternative}/{criterion}"
                    )

    for entry in matrix.entries():
        if not math.isfinite(entry.value):
            raise InvalidInputError(
                f"Non-finite value {entry.value} for alternative {entry.row!r}, "
                f"criterion {entry.column!r}",
                stage='input', label=f"{entry.row}/{entry.column}"
            )
        if entry.value <= 0:
            raise InvalidInputError(
                f"Value must be strictly positive, got {entry.value} for alternative "
                f"{entry.row!r}, criterion {entry.column!r}",
                stage='input', label=f"{entry.row}/{entry.column}"
            )


def _reject_negative(matrix: LabeledTable, stage: str) -> None:
    for entry in matrix.entries():
        if entry.value < 0:
            raise InvalidInputError(
                f"Negative value {entry.value} for alternative {entry.row!r}",
                stage=stage, label=entry.column
            )


# ----------------------------------------------------------------------
# Stages
# ----------------------------------------------------------------------

def vector_normalize(matrix: LabeledTable) -> LabeledTable:
    """
    Divide each value by the Euclidean norm of its criterion column.

    Individual zero cells are allowed and normalize to 0; a column whose
    norm is zero is not.
    """
    _reject_negative(matrix, 'vector_normalization')

    norms = matrix.reduce(COLUMN, _euclidean)
    for criterion, norm in norms.items():
        if not norm > 0:
            raise InvalidInputError(
                "Column norm is zero", stage='vector_normalization', label=criterion
            )

    return matrix.with_values(matrix.values / matrix.map_by(COLUMN, norms))


def sum_normalize(matrix: LabeledTable) -> LabeledTable:
    """Divide each value by its criterion column total so every column sums to 1."""
    _reject_negative(matrix, 'sum_normalization')

    totals = matrix.reduce(COLUMN, 'sum')
    for criterion, total in totals.items():
        if not total > 0:
            raise InvalidInputError(
                "Column total is zero", stage='sum_normalization', label=criterion
            )

    return matrix.with_values(matrix.values / matrix.map_by(COLUMN, totals))


def entropy_vector(sum_normalized: LabeledTable) -> LabeledTable:
    """
    Shannon entropy of each criterion, scaled to [0, 1] by ln(n).

    Returns one entry per criterion under row label ``"e"``.
    """
    n = len(sum_normalized.rows)
    if n < 2:
        raise InvalidInputError(
            f"Entropy needs at least two alternatives, got {n}", stage='entropy'
        )

    for entry in sum_normalized.entries():
        if not entry.value > 0:
            raise InvalidInputError(
                f"Cannot take the logarithm of {entry.value} "
                f"(alternative {entry.row!r})",
                stage='entropy', label=entry.column
            )

    p = sum_normalized.values
    terms = sum_normalized.with_values(p * np.log(p))
    entropy = -terms.reduce(COLUMN, 'sum') / math.log(n)

    return LabeledTable.from_series(entropy, row=ENTROPY_ROW)


def criteria_weights(entropy: LabeledTable) -> LabeledTable:
    """
    Weights proportional to divergence ``1 - entropy``; they sum to 1.

    A divergence within ``DEGENERACY_TOLERANCE`` of zero counts as exactly
    zero, so a criterion that barely discriminates still gets its weight.

    Raises:
        DegenerateWeightsError: if every criterion has entropy 1
    """
    divergence = 1.0 - _per_column(entropy)
    divergence = divergence.where(divergence.abs() > DEGENERACY_TOLERANCE, 0.0)
    total = math.fsum(divergence)

    if total == 0.0:
        raise DegenerateWeightsError(
            "Every criterion has entropy 1; no criterion discriminates "
            "between the alternatives",
            stage='weights'
        )

    return LabeledTable.from_series(divergence / total, row=WEIGHT_ROW)


def weighted_normalize(vector_normalized: LabeledTable, weights: LabeledTable) -> LabeledTable:
    """Scale each vector-normalized value by its criterion weight."""
    w = _per_column(weights)

    for criterion in vector_normalized.columns:
        if criterion not in w.index:
            raise InvalidInputError(
                "No weight for criterion", stage='weighting', label=criterion
            )

    return vector_normalized.with_values(
        vector_normalized.values * vector_normalized.map_by(COLUMN, w)
    )


def ideal_profile(weighted: LabeledTable) -> LabeledTable:
    """Per-criterion maximum of the weighted matrix, row label ``"A+"``."""
    return LabeledTable.from_series(weighted.reduce(COLUMN, 'max'), row=IDEAL_ROW)


def worst_profile(weighted: LabeledTable) -> LabeledTable:
    """Per-criterion minimum of the weighted matrix, row label ``"A-"``."""
    return LabeledTable.from_series(weighted.reduce(COLUMN, 'min'), row=WORST_ROW)


def distance_to_profile(
    weighted: LabeledTable,
    profile: LabeledTable,
    label: str
) -> LabeledTable:
    """
    Euclidean distance of each alternative's weighted row to a profile.

    Args:
        weighted: Weighted normalized matrix
        profile: Ideal or worst profile (one entry per criterion)
        label: Column label of the result (``"S+"`` or ``"S-"``)
    """
    target = _per_column(profile)

    for criterion in weighted.columns:
        if criterion not in target.index:
            raise InvalidInputError(
                "Profile has no value for criterion", stage='distance', label=criterion
            )

    squared = weighted.with_values((weighted.map_by(COLUMN, target) - weighted.values) ** 2)
    distance = squared.reduce(ROW, lambda v: math.sqrt(math.fsum(v)))

    return LabeledTable.from_series(distance, column=label)


def closeness_coefficient(to_ideal: LabeledTable, to_worst: LabeledTable) -> LabeledTable:
    """
    ``C = S- / (S- + S+)`` per alternative, column label ``"C"``.

    Raises:
        DegenerateDistanceError: if an alternative is at zero distance
            from both profiles
    """
    s_plus = _per_row(to_ideal)
    s_minus = _per_row(to_worst)

    if set(s_plus.index) != set(s_minus.index):
        raise InvalidInputError(
            "Distance tables cover different alternatives", stage='closeness'
        )
    s_minus = s_minus.reindex(s_plus.index)

    total = s_minus + s_plus
    for alternative, value in total.items():
        if not value > 0:
            raise DegenerateDistanceError(
                "Alternative coincides with both the ideal and the worst profile",
                stage='closeness', label=alternative
            )

    return LabeledTable.from_series(s_minus / total, column=CLOSENESS)


def rank_alternatives(closeness: LabeledTable) -> LabeledTable:
    """
    Rank alternatives by closeness, 1 = highest.

    Alternatives are sorted ascending with a stable sort and numbered
    from n down to 1, so among equal closeness values the one given
    later in the input receives the better rank.
    """
    c = _per_row(closeness)
    ordered = c.sort_values(kind='mergesort')
    ranks = pd.Series(np.arange(len(ordered), 0, -1, dtype=float), index=ordered.index)

    return LabeledTable.from_series(ranks.reindex(c.index), column=RANK)


# ----------------------------------------------------------------------
# Full pass
# ----------------------------------------------------------------------

@dataclass
class TopsisResult:
    """Outcome of a single pipeline run."""
    best_alternative: str
    best_closeness: float
    closeness: LabeledTable
    ranks: LabeledTable
    stages: Dict[str, LabeledTable] = field(default_factory=dict)

    @property
    def weights(self) -> LabeledTable:
        """Weights actually applied to the normalized matrix."""
        if APPLIED_WEIGHTS in self.stages:
            return self.stages[APPLIED_WEIGHTS]
        return self.stages[CRITERIA_WEIGHTS]

    def weights_dict(self) -> Dict[str, float]:
        return {k: float(v) for k, v in _per_column(self.weights).items()}

    @property
    def ranking(self) -> pd.DataFrame:
        """``alternative, closeness, rank`` in input order."""
        c = _per_row(self.closeness)
        r = _per_row(self.ranks).reindex(c.index)
        return pd.DataFrame({
            'alternative': list(c.index),
            'closeness': c.to_numpy(),
            'rank': r.to_numpy().astype(int),
        })

    def summary(self) -> Dict[str, Any]:
        return {
            'best_alternative': self.best_alternative,
            'best_closeness': self.best_closeness,
            'weights': self.weights_dict(),
            'ranking': self.ranking.sort_values('rank').to_dict(orient='records'),
        }


def _resolve_weights(weights: WeightsLike, criteria: List[str]) -> LabeledTable:
    """Validate and renormalize caller-supplied weights."""
    if isinstance(weights, LabeledTable):
        w = _per_column(weights)
    else:
        w = pd.Series(weights, dtype=float)

    for criterion in criteria:
        if criterion not in w.index:
            raise InvalidInputError("No weight for criterion", stage='weights', label=criterion)
        value = w[criterion]
        if not math.isfinite(value) or value < 0:
            raise InvalidInputError(
                f"Weight must be a non-negative finite number, got {value}",
                stage='weights', label=criterion
            )

    w = w.reindex(criteria)
    total = math.fsum(w)
    if not total > 0:
        raise DegenerateWeightsError("Supplied weights sum to zero", stage='weights')

    return LabeledTable.from_series(w / total, row=WEIGHT_ROW)


def run_topsis(
    matrix: LabeledTable,
    trace: Optional[TraceCallback] = None,
    weights: Optional[WeightsLike] = None
) -> TopsisResult:
    """
    Run the full pipeline on a decision matrix.

    Args:
        matrix: Decision matrix (alternative x criterion, strictly positive)
        trace: Optional callback ``(title, table)`` invoked at every stage
            boundary; it has no effect on the result
        weights: Optional weights overriding the entropy-derived ones
            (renormalized to sum to 1)

    Returns:
        TopsisResult with the best alternative, closeness and rank tables
        and every intermediate table keyed by stage title

    Raises:
        InvalidInputError, DegenerateWeightsError, DegenerateDistanceError
    """
    logger = get_logger()
    validate_decision_matrix(matrix)

    stages: Dict[str, LabeledTable] = {}

    def emit(title: str, table: LabeledTable) -> LabeledTable:
        stages[title] = table
        logger.debug(f"{title}: {table!r}")
        if trace is not None:
            trace(title, table)
        return table

    emit(DECISION_MATRIX, matrix)
    normalized = emit(VECTOR_NORMALIZED, vector_normalize(matrix))
    shares = emit(SUM_NORMALIZED, sum_normalize(matrix))
    entropy = emit(ENTROPY_VECTOR, entropy_vector(shares))

    if weights is None:
        applied = emit(CRITERIA_WEIGHTS, criteria_weights(entropy))
    else:
        try:
            emit(CRITERIA_WEIGHTS, criteria_weights(entropy))
        except DegenerateWeightsError:
            logger.debug("Entropy weights are degenerate; using supplied weights")
        applied = emit(APPLIED_WEIGHTS, _resolve_weights(weights, matrix.columns))

    weighted = emit(WEIGHTED_MATRIX, weighted_normalize(normalized, applied))
    ideal = emit(IDEAL_SOLUTION, ideal_profile(weighted))
    worst = emit(WORST_SOLUTION, worst_profile(weighted))

    s_plus = distance_to_profile(weighted, ideal, DISTANCE_TO_IDEAL)
    s_minus = distance_to_profile(weighted, worst, DISTANCE_TO_WORST)
    closeness = closeness_coefficient(s_plus, s_minus)
    ranks = rank_alternatives(closeness)

    emit(RESULT, LabeledTable.concat([s_plus, s_minus, closeness, ranks]))

    rank_by_alternative = _per_row(ranks)
    best = rank_by_alternative.idxmin()
    best_closeness = float(_per_row(closeness)[best])

    logger.info(f"TOPSIS ranking complete. Best: {best} (C={best_closeness:.4f})")

    return TopsisResult(
        best_alternative=best,
        best_closeness=best_closeness,
        closeness=closeness,
        ranks=ranks,
        stages=stages
    )


# ----------------------------------------------------------------------
# DataFrame front ends
# ----------------------------------------------------------------------

def _matrix_from_frame(
    df: pd.DataFrame,
    criteria: List[str],
    name_col: Optional[str]
) -> LabeledTable:
    frame = df.set_index(name_col) if name_col is not None else df
    return LabeledTable.from_wide(frame[list(criteria)])


def topsis(
    df: pd.DataFrame,
    criteria: List[str],
    name_col: Optional[str] = None,
    trace: Optional[TraceCallback] = None
) -> pd.DataFrame:
    """
    Entropy-weighted TOPSIS over a wide DataFrame.

    Args:
        df: DataFrame with one row per alternative
        criteria: List of criteria column names (all "higher is better")
        name_col: Column holding alternative names (index if None)
        trace: Optional stage trace callback

    Returns:
        Copy of ``df`` with topsis_d_plus, topsis_d_minus, topsis_score
        and topsis_rank columns, sorted by rank
    """
    result = run_topsis(_matrix_from_frame(df, criteria, name_col), trace=trace)

    final = result.stages[RESULT]
    names = df[name_col] if name_col is not None else pd.Series(df.index, index=df.index)

    result_df = df.copy()
    result_df['topsis_d_plus'] = names.map(final.column_values(DISTANCE_TO_IDEAL)).to_numpy()
    result_df['topsis_d_minus'] = names.map(final.column_values(DISTANCE_TO_WORST)).to_numpy()
    result_df['topsis_score'] = names.map(final.column_values(CLOSENESS)).to_numpy()
    result_df['topsis_rank'] = names.map(final.column_values(RANK)).astype(int).to_numpy()

    return result_df.sort_values('topsis_rank')


def select_best_alternative(
    matrix: LabeledTable,
    config: 'Config',
    trace: Optional[TraceCallback] = None
) -> Tuple[str, pd.DataFrame, Dict[str, Any]]:
    """
    Rank a decision matrix and package the outcome for reporting.

    Args:
        matrix: Decision matrix
        config: Configuration
        trace: Optional stage trace callback

    Returns:
        Tuple of (best alternative, ranking DataFrame, selection details)
    """
    logger = get_logger()
    logger.info("Selecting best alternative with entropy-weighted TOPSIS...")

    criteria = list(config.data.criteria) or matrix.columns
    unknown = [c for c in criteria if c not in matrix.columns]
    if unknown:
        raise InvalidInputError(f"Unknown criteria: {unknown}", stage='input')

    dropped = [c for c in matrix.columns if c not in criteria]
    if dropped:
        logger.info(f"Ignoring criteria not selected in config: {dropped}")
        matrix = matrix.drop_columns(dropped)

    result = run_topsis(matrix, trace=trace)
    ranking_df = result.ranking.sort_values('rank').reset_index(drop=True)

    selection_details = {
        'method': 'entropy_topsis',
        'criteria': criteria,
        'n_alternatives': len(matrix.rows),
        'weights': result.weights_dict(),
        'best_alternative': result.best_alternative,
        'best_score': result.best_closeness,
        'ranking': ranking_df.to_dict(orient='records')
    }

    logger.info(f"Best alternative: {result.best_alternative}")

    return result.best_alternative, ranking_df, selection_details
