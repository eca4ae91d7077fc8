"""Command line control panel for building and scoring spam decision trees."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import Config, load_config
from .dataset import Dataset, load_dataset
from .exceptions import SpamTreeError
from .export import export_graphviz, format_tree
from .features import DEFAULT_FEATURES, FEATURE_GROUPS, resolve_feature
from .logging import enable_logging
from .scoring import score_lines
from .session import Evaluation, ModelSession
from .tree import Hyperparameters, Tree

app = typer.Typer(help="Build and evaluate Gini decision trees for spam filtering.")

console = Console()

ConfigOption = typer.Option(None, "--config", "-c", help="Optional path to a YAML config file.")
FeatureOption = typer.Option(
    None,
    "--feature",
    "-f",
    help="Feature to use (column name or label such as 'free' or '$'). Repeat for more; defaults to the config.",
)
MinSplitOption = typer.Option(None, "--min-split", help="Smallest node that may be split (>= 2).")
MinBucketOption = typer.Option(None, "--min-bucket", help="Smallest child a split may produce (>= 1).")
MaxDepthOption = typer.Option(None, "--max-depth", help="Maximum tree depth (>= 1).")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Log build progress to stderr.")


@contextmanager
def _reporting_errors(config_path: Optional[Path], verbose: bool) -> Iterator[Config]:
    """Load the config and set up logging; report library errors as exit code 1."""
    try:
        config = load_config(config_path)
        level = "DEBUG" if verbose else config.logging.level
        with enable_logging(level=level, log_format=config.logging.format):
            yield config
    except (SpamTreeError, OSError) as exc:
        console.print(f"[bold red]Error:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc


def _model_inputs(
    config: Config,
    features: Optional[List[str]],
    min_split: Optional[int],
    min_bucket: Optional[int],
    max_depth: Optional[int],
) -> Tuple[Tuple[str, ...], Hyperparameters]:
    model = config.model
    selected = tuple(resolve_feature(f) for f in features) if features else tuple(model.features)
    hyperparams = Hyperparameters(
        min_split=min_split if min_split is not None else model.min_split,
        min_bucket=min_bucket if min_bucket is not None else model.min_bucket,
        max_depth=max_depth if max_depth is not None else model.max_depth,
    )
    return selected, hyperparams


def _build(config: Config, features, hyperparams) -> Tuple[ModelSession, Tree]:
    training = load_dataset(config.paths.training_data)
    session = ModelSession(training)
    tree = session.build_model(features, hyperparams)
    return session, tree


def _print_evaluation(title: str, evaluation: Evaluation, limit: int) -> None:
    console.print(f"[bold green]{title}[/]")
    for line in score_lines(evaluation.metrics):
        console.print(line)

    table = Table(title="Outcomes")
    table.add_column("Outcomes")
    for column in evaluation.table.columns:
        table.add_column(column, justify="center")
    for label, row in evaluation.table.iterrows():
        table.add_row(str(label), *(str(int(v)) for v in row))
    console.print(table)

    if limit > 0:
        preview = Table(title=f"Classifications (first {limit} rows)")
        preview.add_column("ID", justify="right")
        preview.add_column("prediction", justify="center")
        preview.add_column("truth", justify="center")
        for p in evaluation.predictions[:limit]:
            preview.add_row(str(p.id), str(int(p.predicted)), str(int(p.truth)))
        console.print(preview)


@app.command("features")
def list_features() -> None:
    """List the selectable features; defaults are marked with '*'."""
    for group, mapping in FEATURE_GROUPS.items():
        table = Table(title=group)
        table.add_column("Label")
        table.add_column("Column")
        table.add_column("Default", justify="center")
        for label, column in mapping.items():
            table.add_row(label, column, "*" if column in DEFAULT_FEATURES else "")
        console.print(table)


@app.command("train")
def train(
    config_path: Optional[Path] = ConfigOption,
    features: Optional[List[str]] = FeatureOption,
    min_split: Optional[int] = MinSplitOption,
    min_bucket: Optional[int] = MinBucketOption,
    max_depth: Optional[int] = MaxDepthOption,
    limit: int = typer.Option(5, help="Classified rows to preview."),
    verbose: bool = VerboseOption,
) -> None:
    """Build a tree on the training data and report how well it fits it."""
    with _reporting_errors(config_path, verbose) as config:
        selected, hyperparams = _model_inputs(config, features, min_split, min_bucket, max_depth)
        session, tree = _build(config, selected, hyperparams)
        with session:
            console.print(format_tree(tree))
            _print_evaluation("Training Results", session.evaluate(), limit)


@app.command("test")
def test(
    config_path: Optional[Path] = ConfigOption,
    features: Optional[List[str]] = FeatureOption,
    min_split: Optional[int] = MinSplitOption,
    min_bucket: Optional[int] = MinBucketOption,
    max_depth: Optional[int] = MaxDepthOption,
    limit: int = typer.Option(5, help="Classified rows to preview."),
    verbose: bool = VerboseOption,
) -> None:
    """Build a tree on the training data and score it on the held-out test data."""
    with _reporting_errors(config_path, verbose) as config:
        selected, hyperparams = _model_inputs(config, features, min_split, min_bucket, max_depth)
        test_data: Dataset = load_dataset(config.paths.test_data)
        session, _ = _build(config, selected, hyperparams)
        with session:
            _print_evaluation("Test Results", session.evaluate(test_data), limit)


@app.command("export")
def export(
    output: Path = typer.Argument(..., help="Output basename; the extension follows --format."),
    config_path: Optional[Path] = ConfigOption,
    features: Optional[List[str]] = FeatureOption,
    min_split: Optional[int] = MinSplitOption,
    min_bucket: Optional[int] = MinBucketOption,
    max_depth: Optional[int] = MaxDepthOption,
    fmt: str = typer.Option("dot", "--format", help="Graphviz output format (dot, png, svg, pdf)."),
    verbose: bool = VerboseOption,
) -> None:
    """Build a tree and write it as a Graphviz flowchart."""
    with _reporting_errors(config_path, verbose) as config:
        selected, hyperparams = _model_inputs(config, features, min_split, min_bucket, max_depth)
        session, tree = _build(config, selected, hyperparams)
        with session:
            path = export_graphviz(tree, str(output), format=fmt)
        console.print(f"[bold green]Tree written to[/] {path}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
