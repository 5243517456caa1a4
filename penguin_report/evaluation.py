"""Metrics, ROC curves and confusion matrices."""
from dataclasses import dataclass
from typing import Iterator, List, NamedTuple, Optional, Sequence
import warnings

import numpy as np
import pandas as pd
from sklearn.metrics import accuracy_score, confusion_matrix, roc_auc_score, roc_curve

from .config import TARGET
from .errors import DegenerateResampleWarning, DegenerateSplitError, EmptyDatasetError
from .models import FittedModel

METRICS = ("accuracy", "roc_auc")


class RocPoint(NamedTuple):
    threshold: float
    false_positive_rate: float
    true_positive_rate: float


class RocCurve:
    """Restartable ROC curve over stored (probability, truth) pairs.

    Each iteration recomputes the points from the stored pairs, sweeping the
    decision threshold from 0 up to 1, so the curve runs from (1, 1) to (0, 0).
    """

    def __init__(self, truth: Sequence, probability: Sequence[float], positive_label):
        self._truth = np.asarray(truth)
        self._probability = np.asarray(probability, dtype=float)
        self.positive_label = positive_label

    def __iter__(self) -> Iterator[RocPoint]:
        fpr, tpr, thresholds = roc_curve(
            self._truth, self._probability, pos_label=self.positive_label
        )
        # roc_curve reports the sweep from the top threshold down
        for fp, tp, th in zip(fpr[::-1], tpr[::-1], thresholds[::-1]):
            yield RocPoint(float(min(th, 1.0)), float(fp), float(tp))

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(list(self), columns=RocPoint._fields)


@dataclass(frozen=True)
class MetricResult:
    """Accuracy and AUC of one model on one evaluation set."""

    model: str
    resample: str
    accuracy: float
    auc: float
    truth: np.ndarray
    probability: np.ndarray
    predicted: np.ndarray
    positive_label: str

    @property
    def n_records(self) -> int:
        return len(self.truth)

    @property
    def degenerate(self) -> bool:
        return bool(np.isnan(self.auc))

    def roc_curve(self) -> RocCurve:
        return RocCurve(self.truth, self.probability, self.positive_label)

    def as_row(self) -> dict:
        return {
            "model": self.model,
            "resample": self.resample,
            "accuracy": self.accuracy,
            "roc_auc": self.auc,
            "n": self.n_records,
        }


def score_predictions(
    truth: Sequence,
    probability: Sequence[float],
    predicted: Sequence,
    positive_label: str,
    model: str = "",
    resample: str = "",
) -> MetricResult:
    """Score predictions against the true labels.

    AUC is NaN, with a DegenerateResampleWarning, when ``truth`` holds a
    single class.
    """
    truth = np.asarray(truth)
    probability = np.asarray(probability, dtype=float)
    predicted = np.asarray(predicted)
    if len(truth) == 0:
        raise EmptyDatasetError(f"{model} {resample}: evaluation set is empty")

    if len(np.unique(truth)) < 2:
        warnings.warn(
            f"{model} {resample}: evaluation set holds a single class; AUC undefined",
            DegenerateResampleWarning,
            stacklevel=2,
        )
        auc = float("nan")
    else:
        auc = float(roc_auc_score(truth == positive_label, probability))

    return MetricResult(
        model=model,
        resample=resample,
        accuracy=float(accuracy_score(truth, predicted)),
        auc=auc,
        truth=truth,
        probability=probability,
        predicted=predicted,
        positive_label=positive_label,
    )


def evaluate(
    fitted: FittedModel,
    df: pd.DataFrame,
    target: str = TARGET,
    resample: str = "test",
) -> MetricResult:
    """Predict every row of ``df`` with ``fitted`` and score the predictions."""
    return score_predictions(
        truth=df[target].to_numpy(),
        probability=fitted.predict_probability(df),
        predicted=fitted.predict_class(df),
        positive_label=fitted.positive_label,
        model=fitted.name,
        resample=resample,
    )


def metrics_frame(results: Sequence[MetricResult]) -> pd.DataFrame:
    """One row per (model, resample)."""
    return pd.DataFrame([r.as_row() for r in results])


def aggregate_metrics(results: Sequence[MetricResult]) -> pd.DataFrame:
    """Mean and spread of each metric per model across resamples.

    Degenerate resamples (NaN AUC) are left out of that metric's mean and
    counted in ``n_degenerate``.
    """
    long = metrics_frame(results).melt(
        id_vars=["model", "resample"], value_vars=list(METRICS), var_name="metric"
    )
    grouped = long.groupby(["model", "metric"], sort=False)["value"]
    summary = grouped.agg(
        mean="mean",
        std="std",
        n="count",
        n_degenerate=lambda s: int(s.isna().sum()),
    ).reset_index()
    summary["std_err"] = summary["std"] / np.sqrt(summary["n"])
    return summary[["model", "metric", "mean", "std", "std_err", "n", "n_degenerate"]]


def confusion_table(result: MetricResult, labels: Optional[List] = None) -> pd.DataFrame:
    """Counts of predicted (rows) vs true (columns) class."""
    if labels is None:
        labels = sorted(set(result.truth.tolist()) | set(result.predicted.tolist()))
    # sklearn puts truth on rows; transpose to predicted-by-truth
    counts = confusion_matrix(result.truth, result.predicted, labels=labels).T
    return pd.DataFrame(
        counts,
        index=pd.Index(labels, name="predicted"),
        columns=pd.Index(labels, name="truth"),
    )


@dataclass(frozen=True)
class FinalEvaluation:
    """Test-set result of a model fitted on the full training set."""

    fitted: FittedModel
    metrics: MetricResult
    confusion: pd.DataFrame

    @property
    def name(self) -> str:
        return self.fitted.name


def last_fit_evaluation(
    fitted: FittedModel,
    test: pd.DataFrame,
    target: str = TARGET,
) -> FinalEvaluation:
    result = evaluate(fitted, test, target=target, resample="test")
    return FinalEvaluation(
        fitted=fitted,
        metrics=result,
        confusion=confusion_table(result, labels=fitted.classes),
    )


def choose_best_model(comparison: pd.DataFrame) -> str:
    """Model with the highest mean resample AUC.

    Falls back to mean accuracy, with a DegenerateResampleWarning, when no
    model has a defined AUC on any resample.
    """
    means = comparison.set_index(["metric", "model"])["mean"]
    auc_means = means.loc["roc_auc"].dropna()
    if not auc_means.empty:
        return str(auc_means.idxmax())

    warnings.warn(
        "No resample produced a defined AUC; choosing the best model on accuracy",
        DegenerateResampleWarning,
        stacklevel=2,
    )
    accuracy_means = means.loc["accuracy"].dropna()
    if accuracy_means.empty:
        raise DegenerateSplitError("No resample produced a usable metric to compare models")
    return str(accuracy_means.idxmax())
