"""
Orchestrates the report run with MLflow tracking.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import mlflow
import pandas as pd
from joblib import Parallel, delayed

from .config import ReportConfig
from .data import load_dataset
from .evaluation import (
    FinalEvaluation,
    MetricResult,
    aggregate_metrics,
    choose_best_model,
    evaluate,
    last_fit_evaluation,
)
from .models import MODEL_SPECS, FittedModel, ModelSpec, describe_spec, fit_model
from .preprocessing import preprocess
from .reporting import ReportWriter
from .resampling import BootstrapSample, bootstraps
from .splitting import Split, stratified_split


def fit_and_score_sample(
    spec: ModelSpec,
    train: pd.DataFrame,
    sample: BootstrapSample,
    config: ReportConfig,
) -> MetricResult:
    """Fit ``spec`` on one bootstrap draw and score it on the out-of-bag rows."""
    fitted = fit_model(
        spec,
        sample.analysis(train),
        target=config.target,
        categorical=config.categorical_features,
        numeric=config.numeric_features,
        positive_label=config.positive_label,
        seed=config.seed,
    )
    return evaluate(fitted, sample.assessment(train), target=config.target, resample=sample.label)


@dataclass
class ReportResult:
    raw: pd.DataFrame
    data: pd.DataFrame
    split: Split
    samples: List[BootstrapSample]
    resample_results: Dict[str, List[MetricResult]]
    comparison: pd.DataFrame
    final: Dict[str, FinalEvaluation]
    best_model: str
    report_path: Optional[Path] = None


class PenguinReportPipeline:
    """Runs split, bootstrap validation and last fit, tracked in MLflow."""

    def __init__(self, config: ReportConfig, specs: Sequence[ModelSpec] = MODEL_SPECS):
        self.config = config
        self.specs = tuple(specs)
        mlflow.set_tracking_uri(config.tracking_uri)
        if mlflow.get_experiment_by_name(config.experiment_name) is None:
            mlflow.create_experiment(
                config.experiment_name, artifact_location=config.artifact_location
            )
        mlflow.set_experiment(config.experiment_name)

    def fit_resamples(
        self, spec: ModelSpec, train: pd.DataFrame, samples: Sequence[BootstrapSample]
    ) -> List[MetricResult]:
        """Fit and score ``spec`` on every sample, logging one nested run each."""
        # Workers get their own copy of train; results come back indexed by sample
        results = Parallel(n_jobs=self.config.n_jobs)(
            delayed(fit_and_score_sample)(spec, train, sample, self.config)
            for sample in samples
        )
        by_id = {sample.sample_id: result for sample, result in zip(samples, results)}

        for sample in samples:
            result = by_id[sample.sample_id]
            with mlflow.start_run(run_name=f"{spec.name}_{sample.label}", nested=True):
                mlflow.set_tags({"model": spec.name, "resample": sample.label})
                mlflow.log_metrics(
                    {
                        "accuracy": result.accuracy,
                        "roc_auc": result.auc,
                        "n_in_bag": sample.n_records,
                        "n_out_of_bag": len(sample.out_of_bag),
                    }
                )
            auc = "undefined" if result.degenerate else f"{result.auc:.4f}"
            print(f"Completed {spec.name} {sample.label} - ROC AUC: {auc}")

        return [by_id[sample.sample_id] for sample in samples]

    def last_fit(self, spec: ModelSpec, split: Split) -> FinalEvaluation:
        """Fit ``spec`` on the full training set and evaluate it on the test set."""
        fitted = fit_model(
            spec,
            split.train,
            target=self.config.target,
            categorical=self.config.categorical_features,
            numeric=self.config.numeric_features,
            positive_label=self.config.positive_label,
            seed=self.config.seed,
        )
        final = last_fit_evaluation(fitted, split.test, target=self.config.target)

        with mlflow.start_run(run_name=f"{spec.name}_last_fit", nested=True):
            mlflow.set_tags({"model": spec.name, "resample": "test"})
            mlflow.log_params(describe_spec(spec, seed=self.config.seed))
            mlflow.log_metrics(
                {"test_accuracy": final.metrics.accuracy, "test_roc_auc": final.metrics.auc}
            )
        return final

    def register_best_model(self, fitted: FittedModel, example: pd.DataFrame):
        """Log the chosen final model and register it."""
        from mlflow.models import infer_signature

        input_example = example[fitted.features].head(1)
        signature = infer_signature(
            example[fitted.features].head(5), fitted.predict_class(example.head(5))
        )
        with mlflow.start_run(run_name="best_model_registration", nested=True):
            mlflow.sklearn.log_model(
                fitted.estimator,
                "model",
                signature=signature,
                input_example=input_example,
                registered_model_name=self.config.model_name,
            )
            mlflow.log_params(describe_spec(fitted.spec, seed=self.config.seed))

        print(f"Best model '{fitted.name}' registered as '{self.config.model_name}'")

    def run(self) -> ReportResult:
        """Execute the whole report, start to finish."""
        config = self.config
        writer = ReportWriter(config.output_dir)

        raw = load_dataset(config.data_path)
        data = preprocess(raw, target=config.target, drop_columns=config.drop_columns)
        print(f"Loaded {len(raw)} rows, {len(data)} with a known '{config.target}'")

        split = stratified_split(
            data, target=config.target, test_size=config.test_size, seed=config.seed
        )
        samples = bootstraps(split.train, n_samples=config.n_bootstraps, seed=config.seed)
        print(f"Split: {len(split.train)} train / {len(split.test)} test; "
              f"{len(samples)} bootstrap samples")

        with mlflow.start_run(run_name="penguin_report"):
            mlflow.set_tags({"config_fingerprint": config.fingerprint()})
            mlflow.log_params(config.as_params())
            mlflow.log_metrics({"n_train": len(split.train), "n_test": len(split.test)})

            resample_results = {}
            for spec in self.specs:
                print(f"Fitting {spec.name} on {len(samples)} bootstrap samples...")
                resample_results[spec.name] = self.fit_resamples(spec, split.train, samples)

            comparison = aggregate_metrics(
                [r for results in resample_results.values() for r in results]
            )
            best_model = choose_best_model(comparison)
            for row in comparison.itertuples():
                mlflow.log_metric(f"{row.model}_mean_{row.metric}", row.mean)

            final = {spec.name: self.last_fit(spec, split) for spec in self.specs}

            result = ReportResult(
                raw=raw,
                data=data,
                split=split,
                samples=samples,
                resample_results=resample_results,
                comparison=comparison,
                final=final,
                best_model=best_model,
            )
            result.report_path = writer.write(result, config)
            for artifact in writer.artifacts:
                mlflow.log_artifact(str(artifact))

            if config.register_model:
                self.register_best_model(final[best_model].fitted, split.train)

        return result
