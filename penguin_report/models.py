"""Model specifications and fitting."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Sequence

import numpy as np
import pandas as pd
from sklearn.compose import ColumnTransformer
from sklearn.ensemble import RandomForestClassifier
from sklearn.linear_model import LogisticRegression
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder, StandardScaler

from .config import (
    CATEGORICAL_FEATURES,
    NUMERIC_FEATURES,
    POSITIVE_LABEL,
    RANDOM_STATE,
    TARGET,
)
from .data import require_columns, require_complete
from .errors import DegenerateSplitError, EmptyDatasetError, SchemaMismatchError


class ModelKind(Enum):
    LINEAR = "linear"
    ENSEMBLE_TREE = "ensemble_tree"


@dataclass(frozen=True)
class ModelSpec:
    """A named algorithm plus the hyperparameters it is built with."""

    name: str
    kind: ModelKind
    params: Mapping[str, Any] = field(default_factory=dict)


LOGISTIC_REGRESSION = ModelSpec(
    name="logistic_regression",
    kind=ModelKind.LINEAR,
    params={"max_iter": 1000},
)
RANDOM_FOREST = ModelSpec(
    name="random_forest",
    kind=ModelKind.ENSEMBLE_TREE,
    params={},
)
MODEL_SPECS = (LOGISTIC_REGRESSION, RANDOM_FOREST)


def build_estimator(
    spec: ModelSpec,
    categorical: Sequence[str] = CATEGORICAL_FEATURES,
    numeric: Sequence[str] = NUMERIC_FEATURES,
    seed: int = RANDOM_STATE,
) -> Pipeline:
    """Build an unfitted preprocessing + classifier pipeline for ``spec``."""
    encoder = OneHotEncoder(handle_unknown="ignore", sparse_output=False)
    if spec.kind is ModelKind.LINEAR:
        preprocessor = ColumnTransformer(
            [("cat", encoder, list(categorical)), ("num", StandardScaler(), list(numeric))]
        )
        classifier = LogisticRegression(**spec.params)
    elif spec.kind is ModelKind.ENSEMBLE_TREE:
        preprocessor = ColumnTransformer(
            [("cat", encoder, list(categorical)), ("num", "passthrough", list(numeric))]
        )
        classifier = RandomForestClassifier(**spec.params, random_state=seed)
    else:
        raise ValueError(f"Unknown model kind: {spec.kind!r}")

    return Pipeline([("preprocess", preprocessor), ("model", classifier)])


@dataclass
class FittedModel:
    """A ModelSpec bound to a pipeline fitted on one dataset."""

    spec: ModelSpec
    estimator: Pipeline
    features: List[str]
    positive_label: str

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def classes(self) -> List[Any]:
        return list(self.estimator.classes_)

    def _check_features(self, df: pd.DataFrame) -> pd.DataFrame:
        require_columns(df, self.features, f"{self.name} predict")
        require_complete(df, self.features, f"{self.name} predict")
        return df[self.features]

    def predict_class(self, df: pd.DataFrame) -> np.ndarray:
        return self.estimator.predict(self._check_features(df))

    def predict_probability(self, df: pd.DataFrame) -> np.ndarray:
        """Probability of ``positive_label`` for every row."""
        proba = self.estimator.predict_proba(self._check_features(df))
        return proba[:, self.classes.index(self.positive_label)]


def fit_model(
    spec: ModelSpec,
    df: pd.DataFrame,
    target: str = TARGET,
    categorical: Sequence[str] = CATEGORICAL_FEATURES,
    numeric: Sequence[str] = NUMERIC_FEATURES,
    positive_label: str = POSITIVE_LABEL,
    seed: int = RANDOM_STATE,
) -> FittedModel:
    """Fit ``spec`` on ``df`` once; no retries."""
    features = [*categorical, *numeric]
    require_columns(df, [*features, target], f"fit {spec.name}")
    if df.empty:
        raise EmptyDatasetError(f"fit {spec.name}: training frame is empty")
    require_complete(df, features, f"fit {spec.name}")

    y = df[target]
    classes = set(y.unique())
    if len(classes) < 2:
        raise DegenerateSplitError(
            f"fit {spec.name}: training data holds a single class {sorted(classes)}"
        )
    if positive_label not in classes:
        raise SchemaMismatchError(
            f"fit {spec.name}: positive label {positive_label!r} not in {sorted(classes)}"
        )

    estimator = build_estimator(spec, categorical, numeric, seed)
    estimator.fit(df[features], y)
    return FittedModel(
        spec=spec,
        estimator=estimator,
        features=features,
        positive_label=positive_label,
    )


def logistic_coefficients(fitted: FittedModel) -> pd.DataFrame:
    """Coefficients and odds ratios of a fitted linear model, largest effect first.

    Numeric terms are on the standardized scale, so odds ratios are per
    standard deviation.
    """
    if fitted.spec.kind is not ModelKind.LINEAR:
        raise ValueError(f"{fitted.name} is not a linear model")

    names = fitted.estimator.named_steps["preprocess"].get_feature_names_out()
    model = fitted.estimator.named_steps["model"]
    # coef_ is oriented towards classes_[1]; flip when the positive label is the first class
    sign = 1.0 if model.classes_[1] == fitted.positive_label else -1.0
    coef = sign * model.coef_[0]
    table = pd.DataFrame(
        {
            "term": [str(name) for name in names],
            "estimate": coef,
            "odds_ratio": np.exp(coef),
        }
    )
    return table.reindex(table["estimate"].abs().sort_values(ascending=False).index).reset_index(drop=True)


def feature_importances(fitted: FittedModel) -> pd.DataFrame:
    """Impurity-based importances of a fitted forest."""
    if fitted.spec.kind is not ModelKind.ENSEMBLE_TREE:
        raise ValueError(f"{fitted.name} is not a tree ensemble")

    names = fitted.estimator.named_steps["preprocess"].get_feature_names_out()
    model = fitted.estimator.named_steps["model"]
    table = pd.DataFrame(
        {"term": [str(name) for name in names], "importance": model.feature_importances_}
    )
    return table.sort_values("importance", ascending=False).reset_index(drop=True)


def describe_spec(spec: ModelSpec, seed: int = RANDOM_STATE) -> Dict[str, Any]:
    """Flat params for tracking, including the library defaults in effect."""
    classifier = build_estimator(spec, seed=seed).named_steps["model"]
    params = {f"model__{k}": v for k, v in classifier.get_params().items()}
    params["model_kind"] = spec.kind.value
    return params
