"""Minimal k-nearest-neighbors classifier with a lossless CSV codec."""

from .config import KnnConfig, load_config
from .knn import (
    CsvParseError,
    EmptyModelError,
    FeatureLengthError,
    KnnClassifier,
    LabelColumnError,
    LabeledPoint,
    distance,
    format_number,
    normalize_k,
)
from .pipeline import classify_with_model, evaluate, load_classifier, save_classifier, train_test_split
from .service import ensure_default_model, load_default_classifier, predict_from_measurements
from .viz import project_knn_scene

__all__ = [
    "KnnConfig",
    "load_config",
    "KnnClassifier",
    "LabeledPoint",
    "distance",
    "format_number",
    "normalize_k",
    "CsvParseError",
    "EmptyModelError",
    "FeatureLengthError",
    "LabelColumnError",
    "load_classifier",
    "save_classifier",
    "train_test_split",
    "evaluate",
    "classify_with_model",
    "ensure_default_model",
    "load_default_classifier",
    "predict_from_measurements",
    "project_knn_scene",
]
