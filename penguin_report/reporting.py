"""Figures, tables and the HTML report. Presentation only."""
from pathlib import Path
from typing import List

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402
import seaborn as sns  # noqa: E402
from jinja2 import Template  # noqa: E402

from .config import ReportConfig  # noqa: E402
from .evaluation import metrics_frame  # noqa: E402
from .models import ModelKind, feature_importances, logistic_coefficients  # noqa: E402


REPORT_TEMPLATE = """<!DOCTYPE html>
<html><head><meta charset="utf-8"><title>Penguin sex report</title></head>
<body>
<h1>Predicting penguin sex</h1>
<h2>Data</h2>
<p>{{ n_raw }} penguins loaded; {{ n_data }} have a recorded {{ config.target }} and are used
for modelling. Columns dropped: {{ config.drop_columns | join(', ') }}.</p>
<img src="{{ figures.exploration }}" alt="exploration">
<img src="{{ figures.class_balance }}" alt="class_balance">
<h2>Resampling</h2>
<p>Stratified split with seed {{ config.seed }}: {{ n_train }} training and {{ n_test }} test
records. {{ n_samples }} bootstrap samples of the training set; each model is validated on the
out-of-bag records.</p>
{{ comparison | safe }}
<img src="{{ figures.roc_resamples }}" alt="roc_resamples">
<h2>Test set</h2>
<p>Both models were refitted on the full training set. {{ best_model }} was chosen on the
resample comparison and scores accuracy {{ '%.3f' | format(best.accuracy) }}, AUC {{ '%.3f' | format(best.auc) }}
on the test set.</p>
{{ test_metrics | safe }}
<img src="{{ figures.roc_test }}" alt="roc_test">
{% for name, matrix in confusion.items() %}
<h3>{{ name }}</h3>
{{ matrix | safe }}
<img src="{{ figures['confusion_' ~ name] }}" alt="confusion_{{ name }}">
{% endfor %}
{% for title, model_table in model_tables.items() %}
<h3>{{ title }}</h3>
{{ model_table | safe }}
{% endfor %}
{% if 'odds_ratios' in figures %}
<img src="{{ figures.odds_ratios }}" alt="odds_ratios">
{% endif %}
</body></html>
"""


class ReportWriter:
    """Writes every report artifact under ``output_dir`` and remembers the paths."""

    def __init__(self, output_dir):
        self.output_dir = Path(output_dir)
        self.artifacts: List[Path] = []

    def _path(self, name: str) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        path = self.output_dir / name
        self.artifacts.append(path)
        return path

    def _savefig(self, fig, name: str) -> Path:
        filepath = self._path(name)
        fig.savefig(filepath, dpi=100, bbox_inches="tight")
        plt.close(fig)
        return filepath

    def _save_csv(self, df: pd.DataFrame, name: str, index: bool = False) -> Path:
        filepath = self._path(name)
        df.to_csv(filepath, index=index)
        return filepath

    def plot_exploration(self, df: pd.DataFrame, target: str) -> Path:
        """Flipper vs bill length by sex, one panel per species."""
        grid = sns.relplot(
            data=df.dropna(subset=[target]),
            x="flipper_length_mm",
            y="bill_length_mm",
            hue=target,
            size="body_mass_g",
            col="species",
            alpha=0.7,
            height=4,
        )
        grid.set_axis_labels("Flipper length (mm)", "Bill length (mm)")
        return self._savefig(grid.figure, "exploration.png")

    def plot_class_balance(self, df: pd.DataFrame, target: str) -> Path:
        fig, ax = plt.subplots(figsize=(8, 5))
        sns.countplot(data=df, x="species", hue=target, ax=ax)
        ax.set_title(f"Records per species and {target}")
        return self._savefig(fig, "class_balance.png")

    def plot_resample_roc(self, resample_results) -> Path:
        """Out-of-bag ROC curve of every bootstrap sample, one panel per model."""
        fig, axes = plt.subplots(
            1, len(resample_results), figsize=(6 * len(resample_results), 5), squeeze=False
        )
        for ax, (model, results) in zip(axes[0], resample_results.items()):
            for result in results:
                if result.degenerate:
                    continue
                curve = result.roc_curve().to_frame()
                ax.plot(curve["false_positive_rate"], curve["true_positive_rate"], alpha=0.5)
            ax.plot([0, 1], [0, 1], "k--", label="Random")
            ax.set_xlabel("1 - specificity")
            ax.set_ylabel("Sensitivity")
            ax.set_title(f"{model}: out-of-bag ROC curves")
            ax.grid(True, alpha=0.3)
        return self._savefig(fig, "roc_resamples.png")

    def plot_test_roc(self, final) -> Path:
        fig, ax = plt.subplots(figsize=(8, 6))
        for name, evaluation in final.items():
            curve = evaluation.metrics.roc_curve().to_frame()
            ax.plot(
                curve["false_positive_rate"],
                curve["true_positive_rate"],
                label=f"{name} (AUC = {evaluation.metrics.auc:.3f})",
            )
        ax.plot([0, 1], [0, 1], "k--", label="Random")
        ax.set_xlabel("1 - specificity")
        ax.set_ylabel("Sensitivity")
        ax.set_title("ROC Curve - test set")
        ax.legend()
        ax.grid(True, alpha=0.3)
        return self._savefig(fig, "roc_test.png")

    def plot_confusion_matrix(self, evaluation) -> Path:
        fig, ax = plt.subplots(figsize=(6, 5))
        sns.heatmap(evaluation.confusion, annot=True, fmt="d", cmap="Blues", ax=ax)
        ax.set_xlabel("Truth")
        ax.set_ylabel("Predicted")
        ax.set_title(f"Confusion Matrix - {evaluation.name}")
        return self._savefig(fig, f"confusion_{evaluation.name}.png")

    def plot_odds_ratios(self, coefficients: pd.DataFrame) -> Path:
        fig, ax = plt.subplots(figsize=(8, 5))
        sns.barplot(data=coefficients, x="odds_ratio", y="term", color="steelblue", ax=ax)
        ax.axvline(1.0, color="k", linestyle="--")
        ax.set_xscale("log")
        ax.set_title("Logistic regression odds ratios")
        return self._savefig(fig, "odds_ratios.png")

    def write(self, result, config: ReportConfig) -> Path:
        """Render all figures, tables and ``report.html``; returns the report path."""
        target = config.target
        figures = {
            "exploration": self.plot_exploration(result.raw, target),
            "class_balance": self.plot_class_balance(result.data, target),
            "roc_resamples": self.plot_resample_roc(result.resample_results),
            "roc_test": self.plot_test_roc(result.final),
        }
        for evaluation in result.final.values():
            figures[f"confusion_{evaluation.name}"] = self.plot_confusion_matrix(evaluation)

        per_resample = metrics_frame(
            [r for results in result.resample_results.values() for r in results]
        )
        test_metrics = metrics_frame([e.metrics for e in result.final.values()])
        self._save_csv(per_resample, "resample_metrics.csv")
        self._save_csv(result.comparison, "comparison.csv")
        self._save_csv(test_metrics, "test_metrics.csv")

        model_tables = {}
        for name, evaluation in result.final.items():
            if evaluation.fitted.spec.kind is ModelKind.LINEAR:
                coefficients = logistic_coefficients(evaluation.fitted)
                figures["odds_ratios"] = self.plot_odds_ratios(coefficients)
                model_tables[f"{name} coefficients"] = coefficients
            elif evaluation.fitted.spec.kind is ModelKind.ENSEMBLE_TREE:
                model_tables[f"{name} feature importances"] = feature_importances(evaluation.fitted)

        html = self._render_html(result, config, figures, test_metrics, model_tables)
        report_path = self._path("report.html")
        report_path.write_text(html, encoding="utf-8")
        return report_path

    def _render_html(self, result, config, figures, test_metrics, model_tables) -> str:
        n_train, n_test = result.split.sizes

        def table(df, index=False):
            return df.to_html(index=index, float_format=lambda v: f"{v:.3f}", border=0)

        return Template(REPORT_TEMPLATE, autoescape=True).render(
            config=config,
            n_raw=len(result.raw),
            n_data=len(result.data),
            n_train=n_train,
            n_test=n_test,
            n_samples=len(result.samples),
            best_model=result.best_model,
            best=result.final[result.best_model].metrics,
            figures={key: path.name for key, path in figures.items()},
            comparison=table(result.comparison),
            test_metrics=table(test_metrics),
            confusion={
                name: table(evaluation.confusion, index=True)
                for name, evaluation in result.final.items()
            },
            model_tables={title: table(df) for title, df in model_tables.items()},
        )
