"""
Configuration management for the entropy-weighted TOPSIS toolkit.
"""
import yaml
from dataclasses import dataclass, field, asdict
from typing import List, Dict, Any, Optional
from pathlib import Path
from datetime import datetime


@dataclass
class DataConfig:
    """Decision matrix input configuration."""
    input_path: str = "data/decision_matrix.csv"
    sheet_name: Optional[str] = None
    layout: str = "wide"  # "wide" (one row per alternative) or "long" (one row per cell)
    alternative_column: str = "alternative"
    criterion_column: str = "criterion"  # long layout only
    value_column: str = "value"  # long layout only
    criteria: List[str] = field(default_factory=list)  # empty = all non-alternative columns


@dataclass
class TraceConfig:
    """Diagnostic trace of intermediate tables."""
    enabled: bool = False
    to_log: bool = False  # send renderings to the logger instead of stdout


@dataclass
class SensitivityConfig:
    """Sensitivity analysis configuration."""
    run_criterion_removal: bool = True
    run_weight_perturbation: bool = True
    perturbation: float = 0.2  # +/-20% on each entropy weight


@dataclass
class OutputConfig:
    """Output configuration."""
    base_dir: str = "outputs"
    figure_dpi: int = 300
    figure_format: str = "png"
    save_figures: bool = True


@dataclass
class Config:
    """Main configuration container."""
    data: DataConfig = field(default_factory=DataConfig)
    trace: TraceConfig = field(default_factory=TraceConfig)
    sensitivity: SensitivityConfig = field(default_factory=SensitivityConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    run_id: Optional[str] = None

    def __post_init__(self):
        if self.run_id is None:
            self.run_id = datetime.now().strftime("run_%Y%m%d_%H%M")

    @property
    def run_dir(self) -> Path:
        return Path(self.output.base_dir) / "runs" / self.run_id

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def save(self, path: Optional[str] = None):
        if path is None:
            path = self.run_dir / "configs_snapshot" / "config.yaml"
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False)

    @classmethod
    def load(cls, path: str) -> 'Config':
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
        return cls(
            data=DataConfig(**data.get('data', {})),
            trace=TraceConfig(**data.get('trace', {})),
            sensitivity=SensitivityConfig(**data.get('sensitivity', {})),
            output=OutputConfig(**data.get('output', {})),
            run_id=data.get('run_id')
        )


def create_run_directories(config: Config) -> Dict[str, Path]:
    """Create all output directories for a run."""
    run_dir = config.run_dir
    dirs = {
        'root': run_dir,
        'logs': run_dir / 'logs',
        'tables': run_dir / 'tables',
        'figures': run_dir / 'figures',
        'configs_snapshot': run_dir / 'configs_snapshot'
    }
    for d in dirs.values():
        d.mkdir(parents=True, exist_ok=True)
    return dirs


def get_latest_run_id(base_dir: str = "outputs") -> Optional[str]:
    """Find the most recent run_id by sorting run directories."""
    runs_dir = Path(base_dir) / "runs"
    if not runs_dir.exists():
        return None
    run_dirs = sorted(
        [d for d in runs_dir.iterdir() if d.is_dir() and d.name.startswith("run_")],
        key=lambda d: d.name,
        reverse=True,
    )
    if run_dirs:
        return run_dirs[0].name
    return None


def get_default_config() -> Config:
    """Get default configuration."""
    return Config()
