"""
Sensitivity analysis for entropy-weighted TOPSIS.

Provides functions to analyze ranking stability under criterion removal
and weight perturbation.
"""
import pandas as pd
from typing import Dict

from .errors import TopsisError
from .table import LabeledTable
from .topsis import run_topsis, TopsisResult
from ..core.logging_utils import get_logger


def _rank_map(result: TopsisResult) -> Dict[str, int]:
    return {row['alternative']: int(row['rank']) for _, row in result.ranking.iterrows()}


def criterion_removal_sensitivity(matrix: LabeledTable) -> pd.DataFrame:
    """
    Analyze ranking sensitivity to removing individual criteria.

    Entropy weights are recomputed over the remaining criteria each time.
    A failure of the base ranking propagates; a failure of a reduced
    ranking is logged and that scenario skipped.

    Args:
        matrix: Decision matrix

    Returns:
        DataFrame with columns: removed_criterion, alternative, base_rank,
        new_rank, rank_change, rank_reversed
    """
    logger = get_logger()
    logger.info("Running criterion removal sensitivity analysis")

    base_ranks = _rank_map(run_topsis(matrix))
    results = []

    for removed_criterion in matrix.columns:
        reduced = matrix.drop_columns([removed_criterion])

        try:
            reduced_ranks = _rank_map(run_topsis(reduced))
        except TopsisError as e:
            logger.warning(f"Removal analysis failed for {removed_criterion}: {e}")
            continue

        for alt, base_rank in base_ranks.items():
            new_rank = reduced_ranks[alt]
            results.append({
                'removed_criterion': removed_criterion,
                'alternative': alt,
                'base_rank': base_rank,
                'new_rank': new_rank,
                'rank_change': new_rank - base_rank,
                'rank_reversed': (base_rank == 1) != (new_rank == 1)
            })

    result_df = pd.DataFrame(results)
    logger.info(f"Criterion removal sensitivity complete: {len(result_df)} records")
    return result_df


def weight_sensitivity(matrix: LabeledTable, perturbation: float = 0.2) -> pd.DataFrame:
    """
    Analyze ranking sensitivity to weight perturbations.

    Each entropy-derived weight is increased and decreased by the
    perturbation percentage, the weights renormalized to sum to 1 and
    the ranking recomputed.

    Args:
        matrix: Decision matrix
        perturbation: Percentage perturbation (0.2 = +/-20%)

    Returns:
        DataFrame with perturbation analysis results
    """
    logger = get_logger()
    logger.info(f"Running weight sensitivity analysis (perturbation={perturbation*100}%)")

    if not 0 < perturbation < 1:
        raise ValueError(f"perturbation must be in (0, 1), got {perturbation}")

    base = run_topsis(matrix)
    base_weights = base.weights_dict()
    base_ranks = _rank_map(base)
    results = []

    for criterion in base_weights:
        for direction in ['increase', 'decrease']:
            perturbed_weights = base_weights.copy()

            if direction == 'increase':
                perturbed_weights[criterion] *= (1 + perturbation)
            else:
                perturbed_weights[criterion] *= (1 - perturbation)

            try:
                perturbed_ranks = _rank_map(run_topsis(matrix, weights=perturbed_weights))
            except TopsisError as e:
                logger.warning(f"Perturbation failed for {criterion}/{direction}: {e}")
                continue

            for alt, base_rank in base_ranks.items():
                new_rank = perturbed_ranks[alt]
                results.append({
                    'criterion': criterion,
                    'perturbation': direction,
                    'perturbation_pct': f"{'+' if direction == 'increase' else '-'}{int(round(perturbation*100))}%",
                    'alternative': alt,
                    'base_rank': base_rank,
                    'new_rank': new_rank,
                    'rank_change': new_rank - base_rank
                })

    result_df = pd.DataFrame(results)
    logger.info(f"Weight sensitivity complete: {len(result_df)} records")
    return result_df


def compute_rank_stability_score(sensitivity_df: pd.DataFrame) -> Dict[str, float]:
    """
    Compute overall rank stability scores from sensitivity analysis.

    Args:
        sensitivity_df: DataFrame from weight_sensitivity() or
            criterion_removal_sensitivity()

    Returns:
        Dict mapping alternative to stability score (0-1, higher is more stable)
    """
    if 'rank_change' not in sensitivity_df.columns:
        return {}

    stability_scores = {}
    for alt in sensitivity_df['alternative'].unique():
        alt_data = sensitivity_df[sensitivity_df['alternative'] == alt]
        # Stability = proportion of scenarios with no rank change
        no_change = (alt_data['rank_change'] == 0).sum()
        total = len(alt_data)
        stability_scores[alt] = float(no_change / total) if total > 0 else 0.0

    return stability_scores
