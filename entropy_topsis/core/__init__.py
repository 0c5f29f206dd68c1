"""
Core module for the entropy-weighted TOPSIS toolkit.
"""
from .config import (
    Config,
    DataConfig,
    TraceConfig,
    SensitivityConfig,
    OutputConfig,
    create_run_directories,
    get_default_config,
    get_latest_run_id
)
from .logging_utils import setup_logging, get_logger, LogContext
from .utils import save_json_numpy

__all__ = [
    'Config', 'DataConfig', 'TraceConfig', 'SensitivityConfig', 'OutputConfig',
    'create_run_directories', 'get_default_config', 'get_latest_run_id',
    'setup_logging', 'get_logger', 'LogContext',
    'save_json_numpy'
]
