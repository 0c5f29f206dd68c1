"""
Data loading utilities for decision matrices.
"""
import pandas as pd
from pathlib import Path
from typing import Optional, List

from ..core.config import DataConfig
from ..core.logging_utils import get_logger
from ..decision.errors import InvalidInputError
from ..decision.table import LabeledTable
from .schema import MatrixSchema, validate_schema, create_schema_from_config

EXCEL_SUFFIXES = ('.xlsx', '.xls')


def load_table(path: str, sheet_name: Optional[str] = None) -> pd.DataFrame:
    """
    Load a raw table from CSV or Excel.

    Args:
        path: File path (.csv, .xlsx or .xls)
        sheet_name: Excel sheet (first sheet if None)

    Returns:
        Raw DataFrame
    """
    logger = get_logger()
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    logger.info(f"Loading data from: {path}")

    if path.suffix.lower() in EXCEL_SUFFIXES:
        df = pd.read_excel(path, sheet_name=sheet_name if sheet_name is not None else 0)
    elif path.suffix.lower() == '.csv':
        df = pd.read_csv(path)
    else:
        raise ValueError(f"Unsupported file type: {path.suffix}")

    logger.info(f"Loaded {len(df)} rows, {len(df.columns)} columns")
    logger.info(f"Columns: {list(df.columns)}")

    return df


def _numeric(values: pd.Series, context: str) -> pd.Series:
    converted = pd.to_numeric(values, errors='coerce')
    bad = converted.isna() & values.notna()
    if bad.any():
        first = values[bad].iloc[0]
        raise InvalidInputError(f"Non-numeric value {first!r}", stage='load', label=context)
    if converted.isna().any():
        raise InvalidInputError("Missing value", stage='load', label=context)
    return converted.astype(float)


def matrix_from_frame(
    df: pd.DataFrame,
    schema: MatrixSchema,
    criteria: Optional[List[str]] = None
) -> LabeledTable:
    """
    Convert a raw DataFrame to a decision matrix according to the schema.

    Args:
        df: Raw DataFrame in wide or long layout
        schema: Matrix schema
        criteria: Optional subset of criteria to keep (all if None/empty)

    Returns:
        Decision matrix as a LabeledTable
    """
    logger = get_logger()

    validation = validate_schema(df, schema)
    if not validation['valid']:
        raise ValueError(f"Schema validation failed: {validation['errors']}")

    for w in validation['warnings']:
        logger.warning(w)

    mappings = validation['mappings']
    alt_col = mappings['alternative']

    if schema.layout == 'wide':
        frame = df.set_index(alt_col)
        available = mappings['criteria']
        selected = list(criteria) if criteria else available
        missing = [c for c in selected if c not in available]
        if missing:
            raise ValueError(f"Criteria not found in data: {missing}")

        wide = pd.DataFrame(index=frame.index)
        for c in selected:
            wide[c] = _numeric(frame[c], str(c)).to_numpy()
        matrix = LabeledTable.from_wide(wide)
    else:
        long = df[[alt_col, mappings['criterion'], mappings['value']]].copy()
        long.columns = ['row', 'column', 'value']
        if criteria:
            long = long[long['column'].isin(criteria)]
        long['value'] = _numeric(long['value'], mappings['value']).to_numpy()
        matrix = LabeledTable(long)

    logger.info(f"Decision matrix: {len(matrix.rows)} alternatives x {len(matrix.columns)} criteria")
    return matrix


def load_decision_matrix(
    path: str,
    schema: Optional[MatrixSchema] = None,
    criteria: Optional[List[str]] = None,
    sheet_name: Optional[str] = None
) -> LabeledTable:
    """
    Load a decision matrix from CSV or Excel.

    Args:
        path: File path
        schema: Matrix schema (wide layout with default names if None)
        criteria: Optional subset of criteria to keep
        sheet_name: Excel sheet name

    Returns:
        Decision matrix as a LabeledTable
    """
    if schema is None:
        schema = MatrixSchema()
    df = load_table(path, sheet_name=sheet_name)
    return matrix_from_frame(df, schema, criteria)


def load_from_config(config: DataConfig) -> LabeledTable:
    """Load the decision matrix described by the data configuration."""
    return load_decision_matrix(
        config.input_path,
        schema=create_schema_from_config(config),
        criteria=config.criteria,
        sheet_name=config.sheet_name
    )


def save_matrix(matrix: LabeledTable, path: Path) -> Path:
    """Save a table in wide layout to CSV."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    matrix.to_wide().to_csv(path, index_label='alternative')
    get_logger().info(f"Saved table to: {path}")
    return path
