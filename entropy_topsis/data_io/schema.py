"""
Schema mapping for decision matrix files.
Provides flexible column name mapping for wide and long layouts.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any
import json
from pathlib import Path

LAYOUTS = ('wide', 'long')


@dataclass
class MatrixSchema:
    """
    Schema definition for a decision matrix file.
    Maps logical column names to actual column names in the dataset.

    Wide layout: one row per alternative, one column per criterion.
    Long layout: one row per (alternative, criterion, value) cell.
    """
    layout: str = "wide"
    alternative_column: str = "alternative"
    criterion_column: str = "criterion"
    value_column: str = "value"

    # Column name aliases (for flexible mapping)
    aliases: Dict[str, List[str]] = field(default_factory=lambda: {
        "alternative": ["alternative", "option", "name", "candidate", "id"],
        "criterion": ["criterion", "criteria", "attribute", "indicator"],
        "value": ["value", "score", "rating"],
    })

    def __post_init__(self):
        if self.layout not in LAYOUTS:
            raise ValueError(f"Unknown layout {self.layout!r}; expected one of {LAYOUTS}")

    def find_column(self, df_columns: List[str], logical_name: str) -> Optional[str]:
        """
        Find actual column name in dataframe for a logical name.

        The configured column name is tried first, then the aliases,
        both case-insensitively.
        """
        configured = getattr(self, f"{logical_name}_column", logical_name)
        for col in df_columns:
            if str(col).lower() == configured.lower():
                return col

        for alias in self.aliases.get(logical_name, []):
            for col in df_columns:
                if str(col).lower() == alias.lower():
                    return col

        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert schema to dictionary."""
        return {
            'layout': self.layout,
            'alternative_column': self.alternative_column,
            'criterion_column': self.criterion_column,
            'value_column': self.value_column,
            'aliases': self.aliases
        }

    def save(self, path: str):
        """Save schema to JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: str) -> 'MatrixSchema':
        """Load schema from JSON file."""
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return cls(**data)


def create_schema_from_config(config: 'DataConfig') -> MatrixSchema:
    """Build a schema from the data section of the configuration."""
    return MatrixSchema(
        layout=config.layout,
        alternative_column=config.alternative_column,
        criterion_column=config.criterion_column,
        value_column=config.value_column
    )


def validate_schema(df, schema: MatrixSchema) -> Dict[str, Any]:
    """
    Validate a dataframe against a schema.

    Args:
        df: pandas DataFrame
        schema: MatrixSchema instance

    Returns:
        Validation results dictionary
    """
    results = {
        'valid': True,
        'errors': [],
        'warnings': [],
        'mappings': {}
    }

    df_columns = list(df.columns)

    required = ['alternative'] if schema.layout == 'wide' else ['alternative', 'criterion', 'value']
    for logical_name in required:
        actual = schema.find_column(df_columns, logical_name)
        if actual is not None:
            results['mappings'][logical_name] = actual
        else:
            expected = [getattr(schema, f"{logical_name}_column")] + schema.aliases.get(logical_name, [])
            results['errors'].append(
                f"{logical_name.capitalize()} column not found. Expected one of: {expected}"
            )
            results['valid'] = False

    if schema.layout == 'wide':
        criteria = [c for c in df_columns if c != results['mappings'].get('alternative')]
        if not criteria:
            results['errors'].append("No criterion columns found")
            results['valid'] = False
        results['mappings']['criteria'] = criteria
    else:
        mapped_cols = list(results['mappings'].values())
        extra = [c for c in df_columns if c not in mapped_cols]
        if extra:
            results['warnings'].append(f"Additional columns ignored: {extra[:5]}")

    return results
