"""High-level helpers for loading, evaluating and running the classifier."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .config import KnnConfig, load_config, resolve_path
from .knn import EmptyModelError, KnnClassifier, LabeledPoint

logger = logging.getLogger(__name__)


def load_classifier(csv_path: str, cfg: Optional[KnnConfig] = None) -> KnnClassifier:
    cfg = cfg or KnnConfig()
    path = resolve_path(csv_path)
    if not path.exists():
        raise FileNotFoundError(f"Dataset not found: {path}")
    clf = KnnClassifier(cfg.k).from_csv(
        path.read_text(encoding="utf-8"),
        delimiter=cfg.delimiter,
        label_col=cfg.label_col,
        skip_header=cfg.skip_header,
    )
    logger.info("Loaded %d points from %s (k=%d)", len(clf), path, clf.k)
    return clf


def save_classifier(clf: KnnClassifier, out_path: str, delimiter: str = ",") -> str:
    path = resolve_path(out_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(clf.to_csv(delimiter), encoding="utf-8")
    logger.info("Saved %d points to %s", len(clf), path)
    return str(path)


def train_test_split(
    points: Sequence[LabeledPoint],
    train_fraction: float = 2 / 3,
    seed: Optional[int] = None,
) -> Tuple[List[LabeledPoint], List[LabeledPoint]]:
    """Shuffle a copy of ``points`` and cut it at round(n * train_fraction)."""
    if not 0.0 < train_fraction < 1.0:
        raise ValueError(f"train_fraction must be in (0, 1), got {train_fraction}")
    if not points:
        raise ValueError("Cannot split an empty point sequence.")
    rng = np.random.default_rng(seed)
    shuffled = [points[i] for i in rng.permutation(len(points))]
    cut = int(round(len(shuffled) * train_fraction))
    return shuffled[:cut], shuffled[cut:]


def evaluate(
    clf: KnnClassifier,
    train_fraction: float = 2 / 3,
    seed: Optional[int] = None,
    n_jobs: Optional[int] = None,
) -> Dict[str, Any]:
    train, test = train_test_split(clf.points, train_fraction=train_fraction, seed=seed)
    if not test:
        raise ValueError("The test split is empty; lower train_fraction or add data.")
    model = KnnClassifier(clf.k)
    model.points = train
    predicted = model.predict([p.features for p in test], n_jobs=n_jobs)
    correct = sum(1 for label, point in zip(predicted, test) if label == point.label)
    accuracy = correct / len(test)
    logger.info("Accuracy = %d/%d = %.4f", correct, len(test), accuracy)
    return {
        "k": model.k,
        "n_train": len(train),
        "n_test": len(test),
        "correct": correct,
        "accuracy": accuracy,
    }


def classify_with_model(
    model_path: str,
    features: Sequence[float],
    cfg: Optional[KnnConfig] = None,
) -> Dict[str, Any]:
    cfg = cfg or KnnConfig()
    clf = load_classifier(model_path, cfg)
    pred, neighbors, probs = clf.predict_with_context(features)
    return {
        "predicted_label": pred,
        "neighbors": neighbors,
        "vote_probs": probs,
        "config": cfg.to_dict(),
    }


def _parse_features(value: str, delimiter: str) -> List[float]:
    try:
        return [float(v) for v in value.split(delimiter)]
    except ValueError as exc:
        raise SystemExit(f"Invalid feature vector {value!r}: {exc}")


def cli(argv: Optional[Sequence[str]] = None):
    import argparse

    defaults = load_config()
    parser = argparse.ArgumentParser(description="k-NN classifier over CSV datasets.")
    parser.add_argument("--dataset", type=str, required=True, help="CSV file with labeled feature rows.")
    parser.add_argument("--delimiter", type=str, default=defaults.delimiter)
    parser.add_argument("--label-col", type=int, default=defaults.label_col)
    parser.add_argument("--skip-header", action="store_true", default=defaults.skip_header)
    parser.add_argument("--k", type=int, default=defaults.k)
    parser.add_argument(
        "--classify",
        type=str,
        action="append",
        default=[],
        help="Feature vector to classify, fields joined by the delimiter (repeatable).",
    )
    parser.add_argument("--evaluate", action="store_true", help="Report accuracy on a shuffled split.")
    parser.add_argument("--train-fraction", type=float, default=defaults.train_fraction)
    parser.add_argument("--seed", type=int, default=defaults.seed)
    parser.add_argument("--n-jobs", type=int, default=defaults.n_jobs)
    parser.add_argument("--export", type=str, default=None, help="Write the loaded points as canonical CSV.")
    parser.add_argument("--log-level", type=str, default="WARNING")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    try:
        cfg = KnnConfig(
            k=args.k,
            delimiter=args.delimiter,
            label_col=args.label_col,
            skip_header=args.skip_header,
            train_fraction=args.train_fraction,
            seed=args.seed,
            n_jobs=args.n_jobs,
        )
        clf = load_classifier(args.dataset, cfg)
        result: Dict[str, Any] = {"k": clf.k, "n_points": len(clf)}

        if args.classify:
            queries = [_parse_features(q, cfg.delimiter) for q in args.classify]
            labels = clf.predict(queries, n_jobs=cfg.n_jobs)
            result["predictions"] = [{"features": q, "label": lbl} for q, lbl in zip(queries, labels)]

        if args.evaluate:
            result["evaluation"] = evaluate(clf, cfg.train_fraction, seed=cfg.seed, n_jobs=cfg.n_jobs)

        if args.export:
            result["exported_to"] = save_classifier(clf, args.export, cfg.delimiter)
    except (FileNotFoundError, ValueError, EmptyModelError) as exc:
        raise SystemExit(f"[error] {exc}")

    print(json.dumps(result, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    cli()
