"""
Reporting module: diagnostic trace rendering and plots.
"""
from .trace import render_table, TraceWriter, TraceLogger
from .plots import (
    set_plot_style,
    plot_closeness_ranking,
    plot_criteria_weights,
    plot_rank_stability_heatmap
)

__all__ = [
    'render_table',
    'TraceWriter',
    'TraceLogger',
    'set_plot_style',
    'plot_closeness_ranking',
    'plot_criteria_weights',
    'plot_rank_stability_heatmap'
]
