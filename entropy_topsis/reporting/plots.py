"""
Plotting for entropy-weighted TOPSIS results.
"""
import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import seaborn as sns
from typing import Dict, Tuple, Optional
from pathlib import Path

plt.rcParams['figure.dpi'] = 100
plt.rcParams['savefig.dpi'] = 300
plt.rcParams['font.size'] = 12
plt.rcParams['axes.labelsize'] = 14
plt.rcParams['axes.titlesize'] = 16
plt.rcParams['axes.titleweight'] = 'bold'
plt.rcParams['axes.grid'] = True
plt.rcParams['grid.alpha'] = 0.3


def set_plot_style(style: str = 'seaborn-v0_8-whitegrid'):
    """Set matplotlib style, falling back to the default one."""
    if style in plt.style.available:
        plt.style.use(style)
    else:
        plt.style.use('default')


def plot_closeness_ranking(
    ranking_df: pd.DataFrame,
    title: str = "TOPSIS Ranking (entropy weights)",
    output_path: Optional[Path] = None,
    figsize: Tuple[int, int] = (12, 6),
    dpi: int = 300
) -> plt.Figure:
    """
    Plot closeness coefficients as horizontal bars, best on top.

    Args:
        ranking_df: DataFrame with 'alternative', 'closeness', 'rank' columns
        title: Plot title
        output_path: Path to save figure
        figsize: Figure size
        dpi: Resolution of the saved figure

    Returns:
        Matplotlib figure
    """
    fig, ax = plt.subplots(figsize=figsize)

    df = ranking_df.sort_values('rank', ascending=False)
    names = df['alternative'].astype(str).values
    scores = df['closeness'].values
    ranks = df['rank'].values

    # Best = green, worst = red
    colors = plt.cm.RdYlGn(np.linspace(0.2, 0.8, len(names)))

    bars = ax.barh(names, scores, color=colors, edgecolor='black', alpha=0.8)

    for bar, score, rank in zip(bars, scores, ranks):
        ax.text(bar.get_width() + 0.01, bar.get_y() + bar.get_height()/2,
                f'#{rank} ({score:.4f})', ha='left', va='center', fontsize=10)

    ax.set_xlabel('Closeness coefficient (higher is better)')
    ax.set_xlim(0, 1.15)
    ax.set_title(title, fontweight='bold')

    ax.axvline(x=scores.max(), color='green', linestyle='--', alpha=0.5, linewidth=2)

    plt.tight_layout()

    if output_path:
        plt.savefig(output_path, dpi=dpi, bbox_inches='tight', facecolor='white')

    return fig


def plot_criteria_weights(
    weights: Dict[str, float],
    title: str = "Entropy Criteria Weights",
    output_path: Optional[Path] = None,
    figsize: Tuple[int, int] = (10, 6),
    dpi: int = 300
) -> plt.Figure:
    """
    Plot criteria weights as vertical bars.

    Args:
        weights: Dict mapping criterion to weight
        title: Plot title
        output_path: Path to save figure
        figsize: Figure size
        dpi: Resolution of the saved figure

    Returns:
        Matplotlib figure
    """
    fig, ax = plt.subplots(figsize=figsize)

    names = [str(k) for k in weights.keys()]
    values = list(weights.values())

    bars = ax.bar(names, values, color='steelblue', edgecolor='black', alpha=0.8)
    for bar, value in zip(bars, values):
        ax.text(bar.get_x() + bar.get_width()/2, bar.get_height(),
                f'{value:.3f}', ha='center', va='bottom', fontsize=10)

    ax.set_ylabel('Weight')
    ax.set_title(title, fontweight='bold')
    plt.xticks(rotation=45, ha='right')

    plt.tight_layout()

    if output_path:
        plt.savefig(output_path, dpi=dpi, bbox_inches='tight', facecolor='white')

    return fig


def plot_rank_stability_heatmap(
    sensitivity_df: pd.DataFrame,
    scenario_cols=('criterion', 'perturbation'),
    title: str = "Rank Stability Under Weight Perturbations",
    output_path: Optional[Path] = None,
    figsize: Tuple[int, int] = (14, 8),
    dpi: int = 300
) -> Optional[plt.Figure]:
    """
    Plot heatmap of rank changes per alternative and scenario.

    Args:
        sensitivity_df: DataFrame from a sensitivity analysis
        scenario_cols: Columns identifying a scenario
            (('removed_criterion',) for criterion removal)
        title: Plot title
        output_path: Path to save figure
        figsize: Figure size
        dpi: Resolution of the saved figure

    Returns:
        Matplotlib figure, or None if there is nothing to plot
    """
    if sensitivity_df.empty:
        return None

    pivot = sensitivity_df.pivot_table(
        index='alternative',
        columns=list(scenario_cols),
        values='rank_change',
        aggfunc='mean'
    )

    fig, ax = plt.subplots(figsize=figsize)

    sns.heatmap(pivot, annot=True, fmt='.0f', cmap='RdYlGn_r',
                center=0, ax=ax, cbar_kws={'label': 'Rank Change'},
                annot_kws={'size': 11, 'weight': 'bold'},
                linewidths=0.5, linecolor='white')

    ax.set_title(title, fontweight='bold', pad=15)
    ax.set_xlabel('Scenario', fontweight='bold')
    ax.set_ylabel('Alternative', fontweight='bold')
    plt.xticks(rotation=45, ha='right')

    plt.tight_layout()

    if output_path:
        plt.savefig(output_path, dpi=dpi, bbox_inches='tight', facecolor='white')

    return fig
