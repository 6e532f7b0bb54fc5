"""Visualization helpers for classification results and class models."""
from __future__ import annotations

from dataclasses import dataclass
from importlib import import_module
from pathlib import Path
from typing import Iterable

import numpy as np
import pandas as pd

from .model import ClassModel


@dataclass(frozen=True)
class PlotConfig:
    """Configuration for plot generation."""

    # Rows before the first full window are all zeros; skip them by default
    skip_filling: bool = True
    # Width of the model band in standard deviations
    band_scale: float = np.sqrt(3.0)
    figsize: tuple[float, float] = (10.0, 6.0)
    dpi: float | None = None
    tight_layout: bool = True
    show: bool = False

    def ensure_columns(self, columns: Iterable[str]) -> None:
        """Validate that there is at least one class column."""
        if len(list(columns)) == 0:
            raise ValueError("Possibility table has no class columns")


class PossibilityAnalyzer:
    """Plot per-class possibility curves and model expected curves."""

    def __init__(self, config: PlotConfig | None = None) -> None:
        self.config = config or PlotConfig()

    def _pyplot(self):
        try:
            matplotlib = import_module("matplotlib")
            if not self.config.show:
                matplotlib.use("Agg")
            return import_module("matplotlib.pyplot")
        except ModuleNotFoundError as exc:  # pragma: no cover - dependency is optional in CI
            raise ModuleNotFoundError(
                "matplotlib is required for plotting; install via `pip install hmp-motion-models[plot]`."
            ) from exc

    def _finish(self, plt, fig, output_path: str | Path) -> Path:
        if self.config.tight_layout:
            plt.tight_layout()
        output_path = Path(output_path)
        fig.savefig(output_path)
        if self.config.show:  # pragma: no cover - UI-driven choice
            plt.show()
        plt.close(fig)
        return output_path

    def plot(self, df: pd.DataFrame, output_path: str | Path | None = None) -> Path:
        """Plot the possibility of every class against the sample index."""
        cfg = self.config
        cfg.ensure_columns(df.columns)
        plt = self._pyplot()

        data = df
        if cfg.skip_filling:
            active = df.to_numpy().any(axis=1)
            if active.any():
                data = df.iloc[int(np.argmax(active)) :]

        fig, ax = plt.subplots(figsize=cfg.figsize, dpi=cfg.dpi)
        for column in data.columns:
            ax.plot(data.index, data[column], label=str(column))
        ax.set_ylim(-0.05, 1.05)
        ax.set_xlabel("sample")
        ax.set_ylabel("possibility")
        ax.legend()
        return self._finish(plt, fig, output_path or "possibilities.png")

    def plot_from_file(self, input_path: str | Path, output_path: str | Path | None = None) -> Path:
        """Load a possibilities TSV and plot it."""
        df = pd.read_csv(input_path, sep="\t")
        return self.plot(df, output_path=output_path)

    def plot_model(self, model: ClassModel, output_path: str | Path | None = None) -> Path:
        """Expected gravity and body curves with their covariance bands, one row per axis."""
        cfg = self.config
        plt = self._pyplot()

        fig, axes = plt.subplots(3, 2, figsize=cfg.figsize, dpi=cfg.dpi, sharex=True)
        for col, (label, curve) in enumerate((("gravity", model.gravity), ("body acc.", model.body))):
            band = cfg.band_scale * curve.std
            for axis in range(3):
                ax = axes[axis][col]
                ax.fill_between(
                    curve.times,
                    curve.values[:, axis] - band[:, axis],
                    curve.values[:, axis] + band[:, axis],
                    color=(1.0, 0.7, 0.7),
                )
                ax.plot(curve.times, curve.values[:, axis], color=(0.8, 0.0, 0.0), linewidth=2)
                ax.set_ylabel(f"{'xyz'[axis]} [m/s^2]")
            axes[0][col].set_title(f"{model.name} - {label}")
            axes[2][col].set_xlabel("time [samples]")
        return self._finish(plt, fig, output_path or f"{model.name}.png")


__all__ = ["PossibilityAnalyzer", "PlotConfig"]
