"""
Tests for the entropy-weighted TOPSIS pipeline.
"""
import math

import pytest
import numpy as np
import pandas as pd

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from entropy_topsis.core import Config
from entropy_topsis.decision import (
    LabeledEntry, LabeledTable,
    InvalidInputError, DegenerateWeightsError, DegenerateDistanceError, TopsisError,
    validate_decision_matrix, vector_normalize, sum_normalize, entropy_vector,
    criteria_weights, weighted_normalize, ideal_profile, worst_profile,
    distance_to_profile, closeness_coefficient, rank_alternatives,
    run_topsis, topsis, select_best_alternative
)
from entropy_topsis.decision.topsis import (
    DECISION_MATRIX, VECTOR_NORMALIZED, SUM_NORMALIZED, ENTROPY_VECTOR,
    CRITERIA_WEIGHTS, APPLIED_WEIGHTS, WEIGHTED_MATRIX, IDEAL_SOLUTION,
    WORST_SOLUTION, RESULT
)


def make_matrix(values, alternatives=None, criteria=None):
    """Decision matrix from a 2-D array."""
    values = np.asarray(values, dtype=float)
    alternatives = alternatives or [f'A{i + 1}' for i in range(values.shape[0])]
    criteria = criteria or [f'c{j + 1}' for j in range(values.shape[1])]
    return LabeledTable.from_wide(pd.DataFrame(values, index=alternatives, columns=criteria))


def dense_reference(values):
    """Straight numpy rendition used to cross-check the labeled pipeline."""
    X = np.asarray(values, dtype=float)
    n = X.shape[0]
    R = X / np.sqrt((X ** 2).sum(axis=0))
    P = X / X.sum(axis=0)
    E = -(P * np.log(P)).sum(axis=0) / np.log(n)
    d = 1 - E
    w = d / d.sum()
    V = R * w
    s_plus = np.sqrt(((V.max(axis=0) - V) ** 2).sum(axis=1))
    s_minus = np.sqrt(((V.min(axis=0) - V) ** 2).sum(axis=1))
    return E, w, s_minus / (s_minus + s_plus)


@pytest.fixture
def symmetric_matrix():
    """3 alternatives x 2 criteria, mirror-symmetric across criteria."""
    return make_matrix([[1, 9], [5, 5], [9, 1]], alternatives=['A', 'B', 'C'])


@pytest.fixture
def supplier_matrix():
    """4 alternatives x 4 criteria with distinct dispersion per criterion."""
    return make_matrix(
        [[7, 9, 6, 8],
         [8, 7, 8, 6],
         [9, 6, 7, 7],
         [6, 8, 9, 9]],
        alternatives=['Supplier A', 'Supplier B', 'Supplier C', 'Supplier D'],
        criteria=['price_score', 'quality', 'delivery', 'support']
    )


@pytest.fixture
def random_matrices():
    """Random strictly positive matrices of varying shapes."""
    np.random.seed(42)
    shapes = [(2, 1), (3, 2), (5, 3), (8, 4), (12, 6)]
    return [np.random.uniform(1, 10, size=shape) for shape in shapes]


class TestStages:
    """Tests for individual pipeline stages."""

    def test_vector_normalize(self):
        matrix = make_matrix([[3, 1], [4, 1]])
        normalized = vector_normalize(matrix)
        assert normalized.value('A1', 'c1') == pytest.approx(0.6)
        assert normalized.value('A2', 'c1') == pytest.approx(0.8)
        assert normalized.value('A1', 'c2') == pytest.approx(1 / math.sqrt(2))

    def test_vector_normalize_unit_columns(self, supplier_matrix):
        normalized = vector_normalize(supplier_matrix)
        norms = normalized.reduce('column', lambda v: math.sqrt(sum(x * x for x in v)))
        np.testing.assert_allclose(norms.values, 1.0)

    def test_vector_normalize_zero_cell(self):
        matrix = make_matrix([[0, 2], [3, 4]])
        normalized = vector_normalize(matrix)
        assert normalized.value('A1', 'c1') == 0.0
        assert normalized.value('A2', 'c1') == 1.0

    def test_vector_normalize_zero_column(self):
        matrix = make_matrix([[0, 2], [0, 4]])
        with pytest.raises(InvalidInputError) as exc_info:
            vector_normalize(matrix)
        assert exc_info.value.label == 'c1'
        assert exc_info.value.stage == 'vector_normalization'

    def test_vector_normalize_keeps_labels(self, supplier_matrix):
        normalized = vector_normalize(supplier_matrix)
        assert normalized.rows == supplier_matrix.rows
        assert normalized.columns == supplier_matrix.columns
        assert len(normalized) == len(supplier_matrix)

    def test_sum_normalize_columns_sum_to_one(self, supplier_matrix):
        shares = sum_normalize(supplier_matrix)
        np.testing.assert_allclose(shares.reduce('column', 'sum').values, 1.0)

    def test_entropy_of_uniform_column_is_one(self):
        shares = sum_normalize(make_matrix([[2, 1], [2, 5], [2, 9]]))
        entropy = entropy_vector(shares)
        assert entropy.rows == ['e']
        assert entropy.value('e', 'c1') == pytest.approx(1.0)
        assert 0 <= entropy.value('e', 'c2') < 1

    def test_entropy_matches_reference(self, supplier_matrix):
        E, _, _ = dense_reference(supplier_matrix.to_wide().values)
        entropy = entropy_vector(sum_normalize(supplier_matrix))
        np.testing.assert_allclose(
            [entropy.value('e', c) for c in supplier_matrix.columns], E
        )

    def test_entropy_requires_two_alternatives(self):
        shares = LabeledTable.from_entries([LabeledEntry('A', 'c1', 1.0)])
        with pytest.raises(InvalidInputError) as exc_info:
            entropy_vector(shares)
        assert exc_info.value.stage == 'entropy'

    def test_entropy_rejects_zero_share(self):
        shares = sum_normalize(make_matrix([[0, 1], [1, 2]]))
        with pytest.raises(InvalidInputError) as exc_info:
            entropy_vector(shares)
        assert exc_info.value.label == 'c1'

    def test_weights_favor_low_entropy(self):
        entropy = LabeledTable.from_series(pd.Series([0.9, 0.6], index=['c1', 'c2']), row='e')
        weights = criteria_weights(entropy)
        assert weights.rows == ['w']
        assert weights.value('w', 'c1') == pytest.approx(0.2)
        assert weights.value('w', 'c2') == pytest.approx(0.8)

    def test_weights_degenerate(self):
        entropy = LabeledTable.from_series(pd.Series([1.0, 1.0], index=['c1', 'c2']), row='e')
        with pytest.raises(DegenerateWeightsError) as exc_info:
            criteria_weights(entropy)
        assert exc_info.value.stage == 'weights'

    def test_weights_barely_discriminating_criterion(self):
        matrix = make_matrix([[1e6, 1], [1e6 + 1, 1], [1e6 + 2, 1]])
        weights = criteria_weights(entropy_vector(sum_normalize(matrix)))
        assert weights.value('w', 'c1') == pytest.approx(1.0)
        assert weights.value('w', 'c2') == 0.0

    def test_weighted_normalize(self):
        normalized = make_matrix([[0.6, 0.5], [0.8, 0.5]])
        weights = LabeledTable.from_series(pd.Series([0.25, 0.75], index=['c1', 'c2']), row='w')
        weighted = weighted_normalize(normalized, weights)
        assert weighted.value('A2', 'c1') == pytest.approx(0.2)
        assert weighted.value('A1', 'c2') == pytest.approx(0.375)

    def test_weighted_normalize_missing_weight(self):
        normalized = make_matrix([[0.6, 0.5], [0.8, 0.5]])
        weights = LabeledTable.from_series(pd.Series([1.0], index=['c1']), row='w')
        with pytest.raises(InvalidInputError) as exc_info:
            weighted_normalize(normalized, weights)
        assert exc_info.value.label == 'c2'

    def test_profiles_have_distinct_labels(self):
        weighted = make_matrix([[0.1, 0.4], [0.3, 0.2]])
        ideal = ideal_profile(weighted)
        worst = worst_profile(weighted)
        assert ideal.rows == ['A+']
        assert worst.rows == ['A-']
        assert ideal.value('A+', 'c1') == 0.3
        assert ideal.value('A+', 'c2') == 0.4
        assert worst.value('A-', 'c1') == 0.1
        assert worst.value('A-', 'c2') == 0.2

    def test_distance_to_profile(self):
        weighted = make_matrix([[0.0, 0.0], [3.0, 4.0]])
        ideal = ideal_profile(weighted)
        distance = distance_to_profile(weighted, ideal, 'S+')
        assert distance.columns == ['S+']
        assert distance.value('A1', 'S+') == pytest.approx(5.0)
        assert distance.value('A2', 'S+') == 0.0

    def test_distance_profile_missing_criterion(self):
        weighted = make_matrix([[0.1, 0.2], [0.3, 0.4]])
        profile = LabeledTable.from_series(pd.Series([0.3], index=['c1']), row='A+')
        with pytest.raises(InvalidInputError):
            distance_to_profile(weighted, profile, 'S+')

    def test_closeness_coefficient(self):
        s_plus = LabeledTable.from_series(pd.Series([1.0, 3.0], index=['a', 'b']), column='S+')
        s_minus = LabeledTable.from_series(pd.Series([3.0, 1.0], index=['a', 'b']), column='S-')
        closeness = closeness_coefficient(s_plus, s_minus)
        assert closeness.value('a', 'C') == pytest.approx(0.75)
        assert closeness.value('b', 'C') == pytest.approx(0.25)

    def test_closeness_degenerate(self):
        s_plus = LabeledTable.from_series(pd.Series([0.0, 1.0], index=['a', 'b']), column='S+')
        s_minus = LabeledTable.from_series(pd.Series([0.0, 1.0], index=['a', 'b']), column='S-')
        with pytest.raises(DegenerateDistanceError) as exc_info:
            closeness_coefficient(s_plus, s_minus)
        assert exc_info.value.label == 'a'

    def test_closeness_mismatched_alternatives(self):
        s_plus = LabeledTable.from_series(pd.Series([1.0], index=['a']), column='S+')
        s_minus = LabeledTable.from_series(pd.Series([1.0], index=['b']), column='S-')
        with pytest.raises(InvalidInputError):
            closeness_coefficient(s_plus, s_minus)

    def test_rank_highest_closeness_first(self):
        closeness = LabeledTable.from_series(
            pd.Series([0.2, 0.9, 0.5], index=['a', 'b', 'c']), column='C'
        )
        ranks = rank_alternatives(closeness)
        assert ranks.rows == ['a', 'b', 'c']
        assert ranks.value('b', 'Rank') == 1
        assert ranks.value('c', 'Rank') == 2
        assert ranks.value('a', 'Rank') == 3

    def test_rank_ties_follow_input_order(self):
        closeness = LabeledTable.from_series(
            pd.Series([0.5, 0.9, 0.5], index=['a', 'b', 'c']), column='C'
        )
        ranks = rank_alternatives(closeness)
        # Stable ascending sort numbered n..1: the later of two ties ranks better
        assert ranks.value('b', 'Rank') == 1
        assert ranks.value('c', 'Rank') == 2
        assert ranks.value('a', 'Rank') == 3


class TestValidation:
    """Tests for input validation and the error taxonomy."""

    def test_single_alternative(self):
        matrix = make_matrix([[1, 2, 3]])
        with pytest.raises(InvalidInputError) as exc_info:
            run_topsis(matrix)
        assert exc_info.value.stage == 'input'

    def test_no_criteria(self):
        matrix = LabeledTable(pd.DataFrame(columns=['row', 'column', 'value']))
        with pytest.raises(InvalidInputError):
            validate_decision_matrix(matrix)

    def test_missing_cell(self):
        matrix = LabeledTable.from_entries([
            LabeledEntry('A', 'c1', 1.0),
            LabeledEntry('A', 'c2', 2.0),
            LabeledEntry('B', 'c1', 3.0),
        ])
        with pytest.raises(InvalidInputError) as exc_info:
            run_topsis(matrix)
        assert exc_info.value.label == 'B/c2'

    def test_zero_value(self):
        matrix = make_matrix([[0, 2], [3, 4]])
        with pytest.raises(InvalidInputError) as exc_info:
            run_topsis(matrix)
        assert exc_info.value.label == 'A1/c1'

    def test_negative_value(self):
        matrix = make_matrix([[1, 2], [-3, 4]])
        with pytest.raises(InvalidInputError):
            run_topsis(matrix)

    def test_non_finite_value(self):
        matrix = make_matrix([[1, np.nan], [3, 4]])
        with pytest.raises(InvalidInputError):
            run_topsis(matrix)

    def test_invalid_input_is_value_error(self):
        with pytest.raises(ValueError):
            run_topsis(make_matrix([[1, 2]]))

    def test_all_criteria_uninformative(self):
        matrix = make_matrix([[4, 7], [4, 7], [4, 7]])
        with pytest.raises(DegenerateWeightsError):
            run_topsis(matrix)

    def test_identical_alternatives_with_fixed_weights(self):
        matrix = make_matrix([[4, 7], [4, 7]])
        with pytest.raises(DegenerateDistanceError):
            run_topsis(matrix, weights={'c1': 1.0, 'c2': 1.0})

    def test_errors_share_base_class(self):
        for error in (InvalidInputError, DegenerateWeightsError, DegenerateDistanceError):
            assert issubclass(error, TopsisError)


class TestPipelineProperties:
    """Tests for invariants that hold on every valid input."""

    def test_weights_sum_to_one(self, random_matrices):
        for values in random_matrices:
            result = run_topsis(make_matrix(values))
            assert sum(result.weights_dict().values()) == pytest.approx(1.0)

    def test_closeness_within_unit_interval(self, random_matrices):
        for values in random_matrices:
            result = run_topsis(make_matrix(values))
            closeness = result.ranking['closeness']
            assert (closeness >= 0).all() and (closeness <= 1).all()

    def test_ranks_are_permutation(self, random_matrices):
        for values in random_matrices:
            result = run_topsis(make_matrix(values))
            assert sorted(result.ranking['rank']) == list(range(1, len(values) + 1))

    def test_matches_dense_reference(self, random_matrices):
        for values in random_matrices:
            _, w, closeness = dense_reference(values)
            result = run_topsis(make_matrix(values))
            np.testing.assert_allclose(list(result.weights_dict().values()), w)
            np.testing.assert_allclose(result.ranking['closeness'].values, closeness)

    def test_idempotent(self, supplier_matrix):
        first = run_topsis(supplier_matrix)
        second = run_topsis(supplier_matrix)
        assert first.best_alternative == second.best_alternative
        assert first.closeness.equals(second.closeness)
        assert first.ranks.equals(second.ranks)

    def test_input_not_mutated(self, supplier_matrix):
        before = supplier_matrix.to_frame()
        run_topsis(supplier_matrix)
        pd.testing.assert_frame_equal(supplier_matrix.to_frame(), before)

    def test_best_has_rank_one_and_max_closeness(self, supplier_matrix):
        result = run_topsis(supplier_matrix)
        ranking = result.ranking.set_index('alternative')
        assert ranking.loc[result.best_alternative, 'rank'] == 1
        assert result.best_closeness == ranking['closeness'].max()

    def test_monotonic_in_own_value_with_fixed_weights(self):
        base = np.array([[5.0, 8.0, 5.0],
                         [6.0, 2.0, 7.0],
                         [9.0, 5.0, 1.0],
                         [3.0, 6.0, 9.0]])
        weights = run_topsis(make_matrix(base)).weights_dict()

        bumped = base.copy()
        bumped[0, 0] = 5.5  # still neither max nor min of c1

        before = run_topsis(make_matrix(base), weights=weights)
        after = run_topsis(make_matrix(bumped), weights=weights)

        c_before = before.ranking.set_index('alternative').loc['A1', 'closeness']
        c_after = after.ranking.set_index('alternative').loc['A1', 'closeness']
        assert c_after >= c_before

    def test_symmetric_scenario(self, symmetric_matrix):
        result = run_topsis(symmetric_matrix)
        weights = result.weights_dict()
        assert weights['c1'] == pytest.approx(0.5)
        assert weights['c2'] == pytest.approx(0.5)

        closeness = result.ranking.set_index('alternative')['closeness']
        # Mirror images of each other: exactly tied
        assert closeness['A'] == closeness['C']
        assert closeness['A'] == pytest.approx(0.5)
        assert closeness['B'] == pytest.approx(0.5)

        # All three are 0.5 in exact arithmetic. The weights are exactly
        # equal, so B's rounded closeness is deterministic and lands one ulp
        # above the A/C tie.
        assert closeness['B'] > closeness['A']

        ranks = result.ranking.set_index('alternative')['rank']
        assert ranks['B'] == 1
        assert ranks['C'] == 2
        assert ranks['A'] == 3


class TestRunTopsis:
    """Tests for the full pass and its outputs."""

    def test_stage_tables_in_order(self, supplier_matrix):
        result = run_topsis(supplier_matrix)
        assert list(result.stages) == [
            DECISION_MATRIX, VECTOR_NORMALIZED, SUM_NORMALIZED, ENTROPY_VECTOR,
            CRITERIA_WEIGHTS, WEIGHTED_MATRIX, IDEAL_SOLUTION, WORST_SOLUTION, RESULT
        ]

    def test_result_table_columns(self, supplier_matrix):
        result = run_topsis(supplier_matrix)
        final = result.stages[RESULT]
        assert final.rows == supplier_matrix.rows
        assert final.columns == ['S+', 'S-', 'C', 'Rank']

    def test_trace_receives_every_stage(self, supplier_matrix):
        seen = []
        result = run_topsis(supplier_matrix, trace=lambda title, table: seen.append(title))
        assert seen == list(result.stages)

    def test_trace_does_not_change_result(self, supplier_matrix):
        traced = run_topsis(supplier_matrix, trace=lambda title, table: None)
        plain = run_topsis(supplier_matrix)
        assert traced.closeness.equals(plain.closeness)

    def test_override_weights(self, supplier_matrix):
        weights = {'price_score': 2.0, 'quality': 1.0, 'delivery': 1.0, 'support': 0.0}
        result = run_topsis(supplier_matrix, weights=weights)
        applied = result.weights_dict()
        assert applied['price_score'] == pytest.approx(0.5)
        assert applied['support'] == 0.0
        assert APPLIED_WEIGHTS in result.stages
        assert CRITERIA_WEIGHTS in result.stages

    def test_override_weights_missing_criterion(self, supplier_matrix):
        with pytest.raises(InvalidInputError):
            run_topsis(supplier_matrix, weights={'price_score': 1.0})

    def test_override_weights_negative(self, supplier_matrix):
        weights = {'price_score': -1.0, 'quality': 1.0, 'delivery': 1.0, 'support': 1.0}
        with pytest.raises(InvalidInputError):
            run_topsis(supplier_matrix, weights=weights)

    def test_override_weights_all_zero(self, supplier_matrix):
        weights = {c: 0.0 for c in supplier_matrix.columns}
        with pytest.raises(DegenerateWeightsError):
            run_topsis(supplier_matrix, weights=weights)

    def test_summary(self, supplier_matrix):
        summary = run_topsis(supplier_matrix).summary()
        assert summary['best_alternative'] == summary['ranking'][0]['alternative']
        assert set(summary['weights']) == set(supplier_matrix.columns)


class TestDataFrameFrontEnds:
    """Tests for the DataFrame-based entry points."""

    @pytest.fixture
    def candidates(self):
        return pd.DataFrame({
            'name': ['north', 'south', 'east', 'west'],
            'throughput': [120.0, 95.0, 130.0, 80.0],
            'uptime': [0.99, 0.97, 0.95, 0.999],
            'capacity': [40.0, 55.0, 35.0, 60.0],
        })

    def test_topsis_adds_score_columns(self, candidates):
        ranked = topsis(candidates, ['throughput', 'uptime', 'capacity'], name_col='name')
        for col in ['topsis_d_plus', 'topsis_d_minus', 'topsis_score', 'topsis_rank']:
            assert col in ranked.columns
        assert list(ranked['topsis_rank']) == [1, 2, 3, 4]
        assert ranked['topsis_score'].is_monotonic_decreasing

    def test_topsis_matches_run_topsis(self, candidates):
        criteria = ['throughput', 'uptime', 'capacity']
        ranked = topsis(candidates, criteria, name_col='name')
        result = run_topsis(LabeledTable.from_wide(candidates.set_index('name')[criteria]))
        assert ranked.iloc[0]['name'] == result.best_alternative

    def test_topsis_does_not_modify_input(self, candidates):
        before = candidates.copy()
        topsis(candidates, ['throughput', 'uptime'], name_col='name')
        pd.testing.assert_frame_equal(candidates, before)

    def test_topsis_uses_index_without_name_col(self, candidates):
        indexed = candidates.set_index('name')
        ranked = topsis(indexed, ['throughput', 'uptime', 'capacity'])
        assert ranked.index[0] == topsis(candidates, ['throughput', 'uptime', 'capacity'],
                                         name_col='name').iloc[0]['name']

    def test_select_best_alternative(self, supplier_matrix):
        best, ranking_df, details = select_best_alternative(supplier_matrix, Config())
        assert best == ranking_df.iloc[0]['alternative']
        assert details['best_alternative'] == best
        assert details['n_alternatives'] == 4
        assert details['criteria'] == supplier_matrix.columns

    def test_select_best_alternative_criteria_subset(self, supplier_matrix):
        config = Config()
        config.data.criteria = ['quality', 'delivery']
        _, _, details = select_best_alternative(supplier_matrix, config)
        assert set(details['weights']) == {'quality', 'delivery'}

    def test_select_best_alternative_unknown_criterion(self, supplier_matrix):
        config = Config()
        config.data.criteria = ['quality', 'colour']
        with pytest.raises(InvalidInputError):
            select_best_alternative(supplier_matrix, config)
