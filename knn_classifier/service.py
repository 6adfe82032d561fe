"""Opinionated helpers bound to the bundled height/weight dataset."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .config import BASE_DIR, KnnConfig
from .knn import KnnClassifier
from .pipeline import classify_with_model, load_classifier, save_classifier

logger = logging.getLogger(__name__)

DATASET_CSV = BASE_DIR / "data" / "bmi.csv"
ARTIFACTS_DIR = BASE_DIR / "artifacts"
DEFAULT_MODEL = ARTIFACTS_DIR / "bmi_knn.csv"

# bmi.csv layout: height,weight,label with a header row
DATASET_CFG = KnnConfig(label_col=2, skip_header=True)


def ensure_default_model(
    force_retrain: bool = False,
    model_path: Optional[Union[str, Path]] = None,
) -> Path:
    """Write the canonical model CSV (label first, no header) unless it already exists."""
    model_path = Path(model_path or DEFAULT_MODEL)
    if model_path.exists() and not force_retrain:
        return model_path
    if not DATASET_CSV.exists():
        raise FileNotFoundError(f"Bundled dataset not found: {DATASET_CSV}")
    clf = load_classifier(str(DATASET_CSV), DATASET_CFG)
    save_classifier(clf, str(model_path))
    logger.info("Default model written to %s", model_path)
    return model_path


def load_default_classifier(
    k: Optional[int] = None,
    model_path: Optional[Union[str, Path]] = None,
) -> KnnClassifier:
    path = ensure_default_model(model_path=model_path)
    return load_classifier(str(path), KnnConfig(k=k or DATASET_CFG.k))


def predict_from_measurements(
    height: float,
    weight: float,
    *,
    k: Optional[int] = None,
    model_path: Optional[Union[str, Path]] = None,
) -> Dict[str, Any]:
    path = ensure_default_model(model_path=model_path)
    return classify_with_model(str(path), [height, weight], KnnConfig(k=k or DATASET_CFG.k))
