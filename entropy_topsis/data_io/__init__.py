"""
Data I/O module for decision matrices.
"""
from .schema import MatrixSchema, create_schema_from_config, validate_schema
from .loader import (
    load_table,
    matrix_from_frame,
    load_decision_matrix,
    load_from_config,
    save_matrix
)

__all__ = [
    'MatrixSchema', 'create_schema_from_config', 'validate_schema',
    'load_table', 'matrix_from_frame', 'load_decision_matrix',
    'load_from_config', 'save_matrix'
]
