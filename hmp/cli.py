"""Command line interface for building and validating motion models."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .analyzer import PlotConfig, PossibilityAnalyzer
from .classifier import StreamClassifier
from .config import ModelConfig
from .io import (
    load_class_trials,
    load_model_set,
    read_trial,
    save_model_set,
    trial_files,
    write_possibilities,
)
from .model import ModelBuilder

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Human motion primitive modeling (GMM + GMR) and classification")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="-v for info, -vv for debug output")
    sub = parser.add_subparsers(dest="command", required=True)

    build = sub.add_parser("build", help="Build class models from folders of modeling trials")
    build.add_argument("models_dir", help="Directory with one sub-folder of trial files per class")
    build.add_argument("output", help="Path of the .npz model set to write")
    build.add_argument("--scale", type=float, default=1.5, help="Threshold scaling factor")
    build.add_argument("--seed", type=int, default=None, help="Seed for the randomized K-means steps")
    build.add_argument("--jobs", type=int, default=1, help="Classes built in parallel (joblib n_jobs)")
    build.add_argument("--pattern", default="*.txt", help="Glob for trial files inside each class folder")

    validate = sub.add_parser("validate", help="Classify validation recordings sample by sample")
    validate.add_argument("models", help="Model set written by 'build'")
    validate.add_argument("validation_dir", help="Directory with validation recordings (raw codes)")
    validate.add_argument("results_dir", help="Directory for RES_<file> possibility tables")
    validate.add_argument("--pattern", default="*.txt", help="Glob for validation files")

    plot = sub.add_parser("plot", help="Plot a possibility table written by 'validate'")
    plot.add_argument("input", help="RES_<file> TSV")
    plot.add_argument("output", help="Path to write the generated plot (png or pdf)")
    plot.add_argument("--show", action="store_true", help="Also display the plot window")

    plot_model = sub.add_parser("plot-model", help="Plot the expected curves of one class model")
    plot_model.add_argument("models", help="Model set written by 'build'")
    plot_model.add_argument("name", help="Class name")
    plot_model.add_argument("output", help="Path to write the generated plot (png or pdf)")

    return parser


def run_build(args: argparse.Namespace) -> None:
    trials_by_class = load_class_trials(args.models_dir, pattern=args.pattern)
    logger.info("Building %s class models: %s", len(trials_by_class), ", ".join(trials_by_class))
    builder = ModelBuilder(ModelConfig(threshold_factor=args.scale))
    model_set = builder.build_set(trials_by_class, seed=args.seed, n_jobs=args.jobs)
    save_model_set(model_set, args.output)
    logger.info("Saved model set (window size %s) to %s", model_set.window_size, args.output)


def run_validate(args: argparse.Namespace) -> None:
    model_set = load_model_set(args.models)
    results_dir = Path(args.results_dir)
    results_dir.mkdir(parents=True, exist_ok=True)

    classifier = StreamClassifier(model_set)
    for path in trial_files(args.validation_dir, args.pattern):
        classifier.reset()
        result = classifier.process(read_trial(path), raw=True)
        out_path = results_dir / f"RES_{path.stem}.tsv"
        write_possibilities(result, out_path)
        logger.info("%s: %s samples -> %s", path.name, len(result), out_path)


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    level = logging.WARNING if args.verbose == 0 else logging.INFO if args.verbose == 1 else logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    if args.command == "build":
        run_build(args)
        return

    if args.command == "validate":
        run_validate(args)
        return

    if args.command == "plot":
        PossibilityAnalyzer(PlotConfig(show=args.show)).plot_from_file(args.input, args.output)
        return

    if args.command == "plot-model":
        model = load_model_set(args.models)[args.name]
        PossibilityAnalyzer().plot_model(model, args.output)
        return


if __name__ == "__main__":
    main()
