"""Human motion primitive models: GMM/GMR expected curves and stream classification."""

from .config import ModelConfig, SelectionConfig, SeparatorConfig, TrainerConfig
from .errors import ConvergenceError, DegenerateCovarianceError
from .sampling import decode_samples
from .separation import SignalSeparator, separate_components
from .window import SampleWindow
from .dataset import Dataset, DatasetBuilder, build_datasets
from .selection import ClusterCountSelector, KSelection, tune_k
from .gmm import GaussianMixture, GaussianMixtureTrainer, train_gmm
from .gmr import ExpectedCurve, GaussianMixtureRegressor, retrieve_expected_curve
from .model import ClassModel, ClassModelSet, ModelBuilder, compute_threshold, generate_model
from .classifier import StreamClassifier, WindowState, classify_stream, possibility, possibilities

__all__ = [
    "ModelConfig",
    "SelectionConfig",
    "SeparatorConfig",
    "TrainerConfig",
    "ConvergenceError",
    "DegenerateCovarianceError",
    "decode_samples",
    "SignalSeparator",
    "separate_components",
    "SampleWindow",
    "Dataset",
    "DatasetBuilder",
    "build_datasets",
    "ClusterCountSelector",
    "KSelection",
    "tune_k",
    "GaussianMixture",
    "GaussianMixtureTrainer",
    "train_gmm",
    "ExpectedCurve",
    "GaussianMixtureRegressor",
    "retrieve_expected_curve",
    "ClassModel",
    "ClassModelSet",
    "ModelBuilder",
    "compute_threshold",
    "generate_model",
    "StreamClassifier",
    "WindowState",
    "classify_stream",
    "possibility",
    "possibilities",
]
