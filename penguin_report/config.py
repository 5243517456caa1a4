"""Configuration: column names, constants and the run configuration."""
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
import hashlib
import json

TARGET = "sex"
POSITIVE_LABEL = "male"
DROP_COLUMNS = ("year", "island")
CATEGORICAL_FEATURES = ("species",)
NUMERIC_FEATURES = (
    "bill_length_mm",
    "bill_depth_mm",
    "flipper_length_mm",
    "body_mass_g",
)
RANDOM_STATE = 123
N_BOOTSTRAPS = 25
TEST_SIZE = 0.25


@dataclass(frozen=True)
class ReportConfig:
    """Everything one report run needs, passed explicitly to every stage."""

    data_path: Path
    output_dir: Path = Path("report")
    tracking_uri: str = "sqlite:///mlflow.db"
    artifact_location: Optional[str] = None
    experiment_name: str = "penguin_report"
    model_name: str = "penguin_sex_classifier"
    target: str = TARGET
    positive_label: str = POSITIVE_LABEL
    drop_columns: Tuple[str, ...] = DROP_COLUMNS
    categorical_features: Tuple[str, ...] = CATEGORICAL_FEATURES
    numeric_features: Tuple[str, ...] = NUMERIC_FEATURES
    seed: int = RANDOM_STATE
    n_bootstraps: int = N_BOOTSTRAPS
    test_size: float = TEST_SIZE
    n_jobs: int = 1
    register_model: bool = True

    def __post_init__(self):
        if not 0.0 < self.test_size < 1.0:
            raise ValueError(f"test_size must be in (0, 1), got {self.test_size}")
        if self.n_bootstraps < 1:
            raise ValueError(f"n_bootstraps must be positive, got {self.n_bootstraps}")

    @property
    def features(self) -> Tuple[str, ...]:
        return self.categorical_features + self.numeric_features

    def as_params(self) -> Dict[str, Any]:
        """Flat, MLflow-friendly view of the analytical settings."""
        return {
            "target": self.target,
            "positive_label": self.positive_label,
            "drop_columns": ",".join(self.drop_columns),
            "features": ",".join(self.features),
            "seed": self.seed,
            "n_bootstraps": self.n_bootstraps,
            "test_size": self.test_size,
        }

    def fingerprint(self) -> str:
        """Generate deterministic run fingerprint from the analytical settings."""
        param_str = json.dumps(self.as_params(), sort_keys=True)
        return hashlib.md5(param_str.encode()).hexdigest()[:8]
