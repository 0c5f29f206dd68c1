#!/usr/bin/env python
"""
Script 01: Rank Alternatives
============================
Load a decision matrix, rank the alternatives with entropy-weighted
TOPSIS and save the results.

Usage:
    python scripts/01_rank_alternatives.py [--config CONFIG_PATH] [--input PATH]
                                           [--run-id RUN_ID] [--trace]

Outputs:
    - outputs/runs/<run_id>/tables/stage_*.csv
    - outputs/runs/<run_id>/tables/topsis_ranking.csv
    - outputs/runs/<run_id>/tables/selection_details.json
    - outputs/runs/<run_id>/figures/topsis_ranking.<fmt>
    - outputs/runs/<run_id>/figures/criteria_weights.<fmt>
"""
import argparse
import logging
import re
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from entropy_topsis.core import (
    Config, create_run_directories, setup_logging, save_json_numpy
)
from entropy_topsis.data_io import load_from_config, save_matrix
from entropy_topsis.decision import (
    TopsisError, select_best_alternative
)
from entropy_topsis.reporting import (
    TraceWriter, TraceLogger, plot_closeness_ranking, plot_criteria_weights,
    set_plot_style
)


def parse_args():
    parser = argparse.ArgumentParser(description='Rank alternatives with entropy-weighted TOPSIS')
    parser.add_argument('--config', type=str, default=None,
                        help='Path to configuration file')
    parser.add_argument('--input', type=str, default=None,
                        help='Decision matrix file (overrides config)')
    parser.add_argument('--run-id', type=str, default=None)
    parser.add_argument('--trace', action='store_true',
                        help='Print every intermediate table')
    return parser.parse_args()


def _slug(title: str) -> str:
    return re.sub(r'[^a-z0-9]+', '_', title.lower()).strip('_')


def main():
    args = parse_args()

    if args.config and Path(args.config).exists():
        config = Config.load(args.config)
    else:
        config = Config()

    if args.run_id:
        config.run_id = args.run_id
    if args.input:
        config.data.input_path = args.input
    if args.trace:
        config.trace.enabled = True

    dirs = create_run_directories(config)
    level = logging.DEBUG if config.trace.enabled and config.trace.to_log else logging.INFO
    logger = setup_logging(log_dir=dirs['logs'], run_id=config.run_id, level=level)
    config.save()

    logger.info("=" * 60)
    logger.info("Script 01: Rank Alternatives")
    logger.info("=" * 60)

    sink = None
    if config.trace.enabled:
        sink = TraceLogger(logger) if config.trace.to_log else TraceWriter()

    stage_tables = {}

    def collect(title, table):
        stage_tables[title] = table
        if sink is not None:
            sink(title, table)

    try:
        matrix = load_from_config(config.data)
        best, ranking_df, selection_details = select_best_alternative(matrix, config, trace=collect)
    except (TopsisError, ValueError, FileNotFoundError) as e:
        logger.error(f"Ranking failed: {e}")
        return 1

    # =========================================
    # Save tables
    # =========================================
    for i, (title, table) in enumerate(stage_tables.items()):
        save_matrix(table, dirs['tables'] / f'stage_{i:02d}_{_slug(title)}.csv')

    ranking_df.to_csv(dirs['tables'] / 'topsis_ranking.csv', index=False)
    save_json_numpy(selection_details, dirs['tables'] / 'selection_details.json')

    logger.info(f"Ranking:\n{ranking_df.to_string(index=False)}")

    # =========================================
    # Generate Plots
    # =========================================
    if config.output.save_figures:
        logger.info("-" * 40)
        logger.info("Generating plots...")
        set_plot_style()
        fmt = config.output.figure_format

        plot_closeness_ranking(
            ranking_df,
            output_path=dirs['figures'] / f'topsis_ranking.{fmt}',
            dpi=config.output.figure_dpi
        )
        plot_criteria_weights(
            selection_details['weights'],
            output_path=dirs['figures'] / f'criteria_weights.{fmt}',
            dpi=config.output.figure_dpi
        )

    # =========================================
    # Summary
    # =========================================
    logger.info("=" * 60)
    logger.info("Ranking Complete!")
    logger.info(f"  Best alternative: {best}")
    logger.info(f"  Closeness: {selection_details['best_score']:.4f}")
    logger.info(f"  Results saved to: {dirs['tables']}")
    logger.info("=" * 60)

    return 0


if __name__ == '__main__':
    sys.exit(main())
