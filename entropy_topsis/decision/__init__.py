"""
Decision module: entropy-weighted TOPSIS over labeled tables,
with sensitivity analysis.
"""
from .errors import (
    TopsisError,
    InvalidInputError,
    DegenerateWeightsError,
    DegenerateDistanceError
)
from .table import LabeledEntry, LabeledTable
from .topsis import (
    validate_decision_matrix,
    vector_normalize,
    sum_normalize,
    entropy_vector,
    criteria_weights,
    weighted_normalize,
    ideal_profile,
    worst_profile,
    distance_to_profile,
    closeness_coefficient,
    rank_alternatives,
    run_topsis,
    TopsisResult,
    topsis,
    select_best_alternative
)
from .sensitivity import (
    criterion_removal_sensitivity,
    weight_sensitivity,
    compute_rank_stability_score
)

__all__ = [
    'TopsisError', 'InvalidInputError', 'DegenerateWeightsError',
    'DegenerateDistanceError',
    'LabeledEntry', 'LabeledTable',
    'validate_decision_matrix',
    'vector_normalize',
    'sum_normalize',
    'entropy_vector',
    'criteria_weights',
    'weighted_normalize',
    'ideal_profile',
    'worst_profile',
    'distance_to_profile',
    'closeness_coefficient',
    'rank_alternatives',
    'run_topsis',
    'TopsisResult',
    'topsis',
    'select_best_alternative',
    # Sensitivity analysis
    'criterion_removal_sensitivity',
    'weight_sensitivity',
    'compute_rank_stability_score'
]
