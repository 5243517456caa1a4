#!/usr/bin/env python3
"""
CLI for the penguin sex classification report
"""
from pathlib import Path

import click

from .config import N_BOOTSTRAPS, RANDOM_STATE, TEST_SIZE, ReportConfig
from .errors import ReportError
from .pipeline import PenguinReportPipeline


@click.command()
@click.option('--data-path', required=True, type=click.Path(path_type=Path),
              help='Path to the penguins CSV')
@click.option('--output-dir', default='report', type=click.Path(path_type=Path),
              help='Directory for the rendered report')
@click.option('--tracking-uri', default='sqlite:///mlflow.db', show_default=True,
              help='MLflow tracking URI')
@click.option('--artifact-location', default=None,
              help='Artifact root for a newly created MLflow experiment')
@click.option('--experiment-name', default='penguin_report', help='MLflow experiment name')
@click.option('--model-name', default='penguin_sex_classifier', help='Registered model name')
@click.option('--seed', default=RANDOM_STATE, show_default=True, type=int,
              help='Seed for the split, the bootstrap draws and the forest')
@click.option('--n-bootstraps', default=N_BOOTSTRAPS, show_default=True,
              type=click.IntRange(min=1), help='Number of bootstrap samples')
@click.option('--test-size', default=TEST_SIZE, show_default=True,
              type=click.FloatRange(0, 1, min_open=True, max_open=True),
              help='Fraction of records held out for the test set')
@click.option('--n-jobs', default=1, show_default=True, type=int,
              help='Parallel workers for the bootstrap fits (-1 for all cores)')
@click.option('--register/--no-register', default=True, show_default=True,
              help='Log and register the best final model in MLflow')
def main(data_path: Path, output_dir: Path, tracking_uri: str, artifact_location: str,
         experiment_name: str, model_name: str, seed: int, n_bootstraps: int,
         test_size: float, n_jobs: int, register: bool):
    """Render the penguin sex classification report."""
    config = ReportConfig(
        data_path=data_path,
        output_dir=output_dir,
        tracking_uri=tracking_uri,
        artifact_location=artifact_location,
        experiment_name=experiment_name,
        model_name=model_name,
        seed=seed,
        n_bootstraps=n_bootstraps,
        test_size=test_size,
        n_jobs=n_jobs,
        register_model=register,
    )

    print("Starting bootstrap validation of logistic regression and random forest...")
    try:
        pipeline = PenguinReportPipeline(config)
        result = pipeline.run()
    except ReportError as e:
        raise click.ClickException(str(e)) from e

    print("\n=== Resample comparison ===")
    print(result.comparison.to_string(index=False))
    print("\n=== Test set ===")
    for name, evaluation in result.final.items():
        print(f"{name}: accuracy={evaluation.metrics.accuracy:.4f} "
              f"roc_auc={evaluation.metrics.auc:.4f}")
        print(evaluation.confusion.to_string())

    print(f"\nReport written to {result.report_path}")


if __name__ == '__main__':
    main()
