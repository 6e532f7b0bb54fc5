# hmp/io.py
"""Reading accelerometer trials and storing trained model sets."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Union

import numpy as np
import pandas as pd

from .dataset import align_trials
from .gmr import ExpectedCurve
from .model import ClassModel, ClassModelSet
from .sampling import decode_samples

PathLike = Union[str, Path]

MODEL_FOLDER_SUFFIX = "_MODEL"
_CURVE_FIELDS = ("times", "values", "covariances")


def read_trial(path: PathLike) -> np.ndarray:
    """Read one recording: whitespace separated x/y/z raw codes, one sample per line."""
    df = pd.read_csv(path, sep=r"\s+", header=None, names=["x", "y", "z"], engine="python")
    if df.isna().any().any():
        raise ValueError(f"{path}: every line must hold exactly 3 values")
    return df.to_numpy(dtype=float)


def trial_files(folder: PathLike, pattern: str = "*.txt") -> List[Path]:
    files = sorted(Path(folder).glob(pattern))
    if not files:
        raise FileNotFoundError(f"No files matching '{pattern}' in {folder}")
    return files


def load_trials(folder: PathLike, pattern: str = "*.txt", raw: bool = True) -> List[np.ndarray]:
    """Load every trial of a folder, decoded to m/s^2 and cut to a common length."""
    trials = [read_trial(path) for path in trial_files(folder, pattern)]
    if raw:
        trials = [decode_samples(trial) for trial in trials]
    return align_trials(trials)


def load_class_trials(models_dir: PathLike, pattern: str = "*.txt", raw: bool = True) -> Dict[str, List[np.ndarray]]:
    """Load one class per sub-folder; a trailing ``_MODEL`` is stripped from the name."""
    folders = sorted(p for p in Path(models_dir).iterdir() if p.is_dir())
    if not folders:
        raise FileNotFoundError(f"No class folders in {models_dir}")
    result: Dict[str, List[np.ndarray]] = {}
    for folder in folders:
        name = folder.name
        if name.endswith(MODEL_FOLDER_SUFFIX):
            name = name[: -len(MODEL_FOLDER_SUFFIX)]
        result[name] = load_trials(folder, pattern, raw=raw)
    return result


def save_model_set(model_set: ClassModelSet, path: PathLike) -> Path:
    """Store a model set as an ``.npz`` archive."""
    arrays: Dict[str, np.ndarray] = {
        "names": np.array(model_set.names),
        "thresholds": model_set.thresholds,
        "filter_delay": np.array(model_set.filter_delay),
    }
    for i, model in enumerate(model_set):
        for feature in ("gravity", "body"):
            curve = getattr(model, feature)
            for field in _CURVE_FIELDS:
                arrays[f"{i}_{feature}_{field}"] = getattr(curve, field)

    path = Path(path)
    with path.open("wb") as fh:
        np.savez(fh, **arrays)
    return path


def load_model_set(path: PathLike) -> ClassModelSet:
    with np.load(path, allow_pickle=False) as archive:
        names = [str(n) for n in archive["names"]]
        thresholds = archive["thresholds"]
        models = []
        for i, name in enumerate(names):
            curves = {
                feature: ExpectedCurve(**{field: archive[f"{i}_{feature}_{field}"] for field in _CURVE_FIELDS})
                for feature in ("gravity", "body")
            }
            models.append(ClassModel(name=name, threshold=float(thresholds[i]), **curves))
        return ClassModelSet(models=tuple(models), filter_delay=int(archive["filter_delay"]))


def write_possibilities(df: pd.DataFrame, path: PathLike) -> None:
    df.to_csv(path, sep="\t", index=False)


def read_possibilities(path: PathLike) -> pd.DataFrame:
    return pd.read_csv(path, sep="\t")
