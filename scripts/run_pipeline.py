#!/usr/bin/env python
"""
Run Full Pipeline
=================
Execute all pipeline scripts in sequence.

Usage:
    python scripts/run_pipeline.py [--config CONFIG_PATH] [--steps STEPS]

Examples:
    # Run full pipeline
    python scripts/run_pipeline.py

    # Run only specific steps
    python scripts/run_pipeline.py --steps 1

    # Use custom config
    python scripts/run_pipeline.py --config configs/custom.yaml
"""
import argparse
import subprocess
import sys
from pathlib import Path
from datetime import datetime


SCRIPTS = [
    ("01_rank_alternatives.py", "Rank alternatives with entropy-weighted TOPSIS"),
    ("02_sensitivity_analysis.py", "Sensitivity analysis of the ranking"),
]


def parse_args():
    parser = argparse.ArgumentParser(description='Run the entropy-weighted TOPSIS pipeline')
    parser.add_argument('--config', type=str, default=None,
                       help='Path to configuration file')
    parser.add_argument('--steps', type=int, nargs='+', default=None,
                       help='Steps to run (1-2). Default: all')
    parser.add_argument('--run-id', type=str, default=None,
                       help='Run ID to use')
    parser.add_argument('--input', type=str, default=None,
                       help='Decision matrix file (overrides config)')
    return parser.parse_args()


def run_script(script_name: str, config: str = None, run_id: str = None,
               input_path: str = None) -> int:
    """Run a single script."""
    scripts_dir = Path(__file__).parent
    script_path = scripts_dir / script_name

    cmd = [sys.executable, str(script_path)]

    if config:
        cmd.extend(['--config', config])

    if run_id:
        cmd.extend(['--run-id', run_id])

    if input_path:
        cmd.extend(['--input', input_path])

    print(f"\n{'='*60}")
    print(f"Running: {script_name}")
    print(f"{'='*60}\n")

    result = subprocess.run(cmd)

    if result.returncode != 0:
        print(f"\nError: {script_name} failed with return code {result.returncode}")
        return result.returncode

    return 0


def main():
    args = parse_args()

    print("=" * 60)
    print("Entropy-Weighted TOPSIS Pipeline")
    print("=" * 60)

    # Determine which steps to run
    if args.steps is not None:
        steps_to_run = args.steps
    else:
        steps_to_run = list(range(1, len(SCRIPTS) + 1))

    print(f"\nSteps to run: {steps_to_run}")
    print(f"Config: {args.config or 'default'}")
    print(f"Run ID: {args.run_id or 'auto-generated'}")

    # Single run_id shared by all steps
    run_id = args.run_id or datetime.now().strftime("run_%Y%m%d_%H%M")

    for step in steps_to_run:
        if step < 1 or step > len(SCRIPTS):
            print(f"Warning: Step {step} is invalid, skipping")
            continue

        script_name, description = SCRIPTS[step - 1]

        print(f"\nStep {step}: {description}")

        result = run_script(script_name, args.config, run_id, args.input)

        if result != 0:
            print(f"\nPipeline stopped at step {step}")
            return result

    print("\n" + "=" * 60)
    print("Pipeline Complete!")
    print("=" * 60)
    print("\nCheck outputs/ directory for results.")

    return 0


if __name__ == '__main__':
    sys.exit(main())
