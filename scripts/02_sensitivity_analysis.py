#!/usr/bin/env python
"""
Script 02: Sensitivity Analysis
===============================
Check how stable the TOPSIS ranking is when criteria are removed or the
entropy weights are perturbed.

Usage:
    python scripts/02_sensitivity_analysis.py [--config CONFIG_PATH] [--input PATH]
                                              [--run-id RUN_ID]

Outputs:
    - outputs/runs/<run_id>/tables/criterion_removal_sensitivity.csv
    - outputs/runs/<run_id>/tables/weight_sensitivity.csv
    - outputs/runs/<run_id>/tables/rank_stability.json
    - outputs/runs/<run_id>/figures/*_heatmap.<fmt>
"""
import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from entropy_topsis.core import (
    Config, create_run_directories, setup_logging, save_json_numpy,
    get_latest_run_id, LogContext
)
from entropy_topsis.data_io import load_from_config
from entropy_topsis.decision import (
    TopsisError, criterion_removal_sensitivity, weight_sensitivity,
    compute_rank_stability_score
)
from entropy_topsis.reporting import plot_rank_stability_heatmap, set_plot_style


def parse_args():
    parser = argparse.ArgumentParser(description='Sensitivity analysis of the TOPSIS ranking')
    parser.add_argument('--config', type=str, default=None)
    parser.add_argument('--input', type=str, default=None,
                        help='Decision matrix file (overrides config)')
    parser.add_argument('--run-id', type=str, default=None)
    return parser.parse_args()


def main():
    args = parse_args()

    if args.config and Path(args.config).exists():
        config = Config.load(args.config)
    else:
        config = Config()

    if args.run_id:
        config.run_id = args.run_id
    else:
        # Reuse the latest run directory so outputs land next to the ranking
        latest = get_latest_run_id(config.output.base_dir)
        if latest:
            config.run_id = latest
    if args.input:
        config.data.input_path = args.input

    dirs = create_run_directories(config)
    logger = setup_logging(log_dir=dirs['logs'], run_id=config.run_id)

    logger.info("=" * 60)
    logger.info("Script 02: Sensitivity Analysis")
    logger.info("=" * 60)

    try:
        matrix = load_from_config(config.data)
    except (TopsisError, ValueError, FileNotFoundError) as e:
        logger.error(f"Could not load decision matrix: {e}")
        return 1

    fmt = config.output.figure_format
    stability = {}
    if config.output.save_figures:
        set_plot_style()

    try:
        if config.sensitivity.run_criterion_removal:
            with LogContext(logger, "Criterion removal"):
                removal_df = criterion_removal_sensitivity(matrix)
                removal_df.to_csv(dirs['tables'] / 'criterion_removal_sensitivity.csv', index=False)
                stability['criterion_removal'] = compute_rank_stability_score(removal_df)

                if config.output.save_figures:
                    plot_rank_stability_heatmap(
                        removal_df,
                        scenario_cols=('removed_criterion',),
                        title="Rank Change After Removing a Criterion",
                        output_path=dirs['figures'] / f'criterion_removal_heatmap.{fmt}',
                        dpi=config.output.figure_dpi
                    )

        if config.sensitivity.run_weight_perturbation:
            with LogContext(logger, "Weight perturbation"):
                weight_df = weight_sensitivity(matrix, perturbation=config.sensitivity.perturbation)
                weight_df.to_csv(dirs['tables'] / 'weight_sensitivity.csv', index=False)
                stability['weight_perturbation'] = compute_rank_stability_score(weight_df)

                if config.output.save_figures:
                    plot_rank_stability_heatmap(
                        weight_df,
                        output_path=dirs['figures'] / f'weight_sensitivity_heatmap.{fmt}',
                        dpi=config.output.figure_dpi
                    )
    except TopsisError as e:
        logger.error(f"Sensitivity analysis failed: {e}")
        return 1

    save_json_numpy(stability, dirs['tables'] / 'rank_stability.json')

    logger.info("=" * 60)
    logger.info("Sensitivity Analysis Complete!")
    for analysis, scores in stability.items():
        logger.info(f"  {analysis}: {scores}")
    logger.info(f"  Results saved to: {dirs['tables']}")
    logger.info("=" * 60)

    return 0


if __name__ == '__main__':
    sys.exit(main())
