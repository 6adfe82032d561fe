"""k-NN classifier over labeled feature vectors, with a flat CSV codec."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

logger = logging.getLogger(__name__)

DEFAULT_K = 5
_LABEL_CANDIDATES = ["label", "class", "target", "species", "variety", "y"]


class EmptyModelError(RuntimeError):
    """Raised when predicting with a classifier that holds no points."""


class FeatureLengthError(ValueError):
    """Raised when a feature vector does not match the stored dimension."""


class CsvParseError(ValueError):
    """A CSV row could not be turned into a labeled point."""

    def __init__(self, message: str, line: int, field: Optional[str] = None):
        super().__init__(f"line {line}: {message}")
        self.line = line
        self.field = field


class LabelColumnError(CsvParseError, IndexError):
    """The label column index falls outside a CSV row."""


def normalize_k(k: int) -> int:
    """Return the effective neighbor count: non-positive -> 5, even -> k + 1."""
    effective = k if k > 0 else DEFAULT_K
    if effective % 2 == 0:
        effective += 1
    if effective != k:
        logger.debug("k=%d adjusted to %d", k, effective)
    return effective


def distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Euclidean distance over the index range common to both vectors."""
    n = min(len(a), len(b))
    diff = np.asarray(a[:n], dtype=float) - np.asarray(b[:n], dtype=float)
    return float(np.sqrt(np.sum(diff ** 2)))


def format_number(value: float) -> str:
    """Shortest round-trip decimal text without trailing zeros (150.0 -> '150')."""
    return np.format_float_positional(float(value), trim="-")


def _check_delimiter(delimiter: str) -> None:
    if len(delimiter) != 1:
        raise ValueError(f"delimiter must be a single character, got {delimiter!r}")


@dataclass(frozen=True)
class LabeledPoint:
    label: str
    features: Tuple[float, ...]

    @classmethod
    def create(cls, label: str, features: Iterable[float]) -> "LabeledPoint":
        return cls(str(label), tuple(float(x) for x in features))


class KnnClassifier:
    """Stores labeled points and classifies queries by majority vote of the k nearest.

    The store is single-writer / multi-reader: load it first (``fit``,
    ``fit_one``, ``from_csv``), then predict as often as needed. Nothing here
    locks, so mutating while another thread predicts is the caller's problem.
    """

    def __init__(self, k: int = DEFAULT_K):
        self.k = normalize_k(k)
        self.points: List[LabeledPoint] = []

    def __len__(self) -> int:
        return len(self.points)

    def __repr__(self) -> str:
        return f"KnnClassifier(k={self.k}, n_points={len(self.points)})"

    @property
    def n_features(self) -> Optional[int]:
        if not self.points:
            return None
        return len(self.points[0].features)

    # ------------------------------------------------------------------ fit

    def _extend(self, new_points: Sequence[LabeledPoint]) -> None:
        expected = self.n_features
        for idx, point in enumerate(new_points):
            if expected is None:
                expected = len(point.features)
            elif len(point.features) != expected:
                raise FeatureLengthError(
                    f"point {idx} ({point.label!r}) has {len(point.features)} features, expected {expected}"
                )
        self.points.extend(new_points)
        logger.debug("Stored %d new points (total %d)", len(new_points), len(self.points))

    def fit(self, data: Sequence[Sequence[float]], labels: Sequence[str]) -> "KnnClassifier":
        if len(data) != len(labels):
            raise ValueError(f"data and labels must have the same length ({len(data)} != {len(labels)})")
        self._extend([LabeledPoint.create(label, feats) for feats, label in zip(data, labels)])
        return self

    def fit_one(self, features: Sequence[float], label: str) -> "KnnClassifier":
        self._extend([LabeledPoint.create(label, features)])
        return self

    # -------------------------------------------------------------- predict

    def _ensure_ready(self) -> None:
        if not self.points:
            raise EmptyModelError("The classifier holds no training data.")

    def _matrix(self) -> np.ndarray:
        return np.array([p.features for p in self.points], dtype=float)

    def _neighbors(self, X: np.ndarray, features: Sequence[float]) -> List[Dict[str, Any]]:
        query = np.asarray(features, dtype=float)
        if query.ndim != 1 or query.shape[0] != X.shape[1]:
            raise FeatureLengthError(f"query has {query.size} features, expected {X.shape[1]}")
        dists = np.sqrt(np.sum((X - query) ** 2, axis=1))
        # stable sort keeps insertion order among equal distances
        order = np.argsort(dists, kind="stable")[: self.k]
        return [
            {"index": int(i), "label": self.points[i].label, "distance": float(dists[i])}
            for i in order
        ]

    @staticmethod
    def _vote(neighbors: Sequence[Dict[str, Any]]) -> Tuple[str, Dict[str, int]]:
        votes: Dict[str, int] = {}
        for nb in neighbors:
            votes[nb["label"]] = votes.get(nb["label"], 0) + 1
        best_vote = max(votes.values())
        # votes is ordered by first neighbor rank, so ties go to the nearer label
        pred = next(label for label, count in votes.items() if count == best_vote)
        return pred, votes

    def kneighbors(self, features: Sequence[float]) -> List[Dict[str, Any]]:
        self._ensure_ready()
        return self._neighbors(self._matrix(), features)

    def predict_one(self, features: Sequence[float]) -> str:
        pred, _ = self._vote(self.kneighbors(features))
        return pred

    def predict_with_context(
        self, features: Sequence[float]
    ) -> Tuple[str, List[Dict[str, Any]], Dict[str, float]]:
        neighbors = self.kneighbors(features)
        pred, votes = self._vote(neighbors)
        probs = {label: count / len(neighbors) for label, count in votes.items()}
        return pred, neighbors, probs

    def predict(self, items: Sequence[Sequence[float]], n_jobs: Optional[int] = None) -> List[str]:
        if len(items) == 0:
            return []
        self._ensure_ready()
        X = self._matrix()

        def _one(features: Sequence[float]) -> str:
            return self._vote(self._neighbors(X, features))[0]

        if n_jobs in (None, 1):
            return [_one(it) for it in items]
        logger.debug("Predicting %d items with n_jobs=%s", len(items), n_jobs)
        return list(Parallel(n_jobs=n_jobs, prefer="threads")(delayed(_one)(it) for it in items))

    # ------------------------------------------------------------------ csv

    def to_csv(self, delimiter: str = ",", label_col: int = 0) -> str:
        _check_delimiter(delimiter)
        lines = []
        for point in self.points:
            if delimiter in point.label or "\n" in point.label or "\r" in point.label:
                raise ValueError(f"label {point.label!r} cannot be written with delimiter {delimiter!r}")
            if point.label != point.label.strip():
                raise ValueError(f"label {point.label!r} has surrounding whitespace and would be trimmed on import")
            if not 0 <= label_col <= len(point.features):
                raise ValueError(f"label_col {label_col} is out of range for {len(point.features)} features")
            fields = [format_number(v) for v in point.features]
            fields.insert(label_col, point.label)
            line = delimiter.join(fields)
            # from_csv trims each line and skips blank ones
            if not line.strip() or line != line.strip():
                raise ValueError(f"point {point!r} cannot be written as a non-blank, untrimmed row")
            lines.append(line + "\n")
        return "".join(lines)

    def from_csv(
        self,
        text: str,
        delimiter: str = ",",
        label_col: int = 0,
        skip_header: bool = False,
    ) -> "KnnClassifier":
        """Append the points described by ``text``.

        The first raw line is dropped when ``skip_header`` is set; blank lines
        are ignored. Import stops at the first bad row and leaves the store
        untouched.
        """
        _check_delimiter(delimiter)
        parsed: List[LabeledPoint] = []
        for lineno, raw in enumerate(text.split("\n"), start=1):
            if skip_header and lineno == 1:
                continue
            line = raw.strip()
            if not line:
                continue
            columns = line.split(delimiter)
            if not 0 <= label_col < len(columns):
                raise LabelColumnError(
                    f"label column {label_col} out of range for {len(columns)} columns", line=lineno
                )
            features = []
            for idx, column in enumerate(columns):
                if idx == label_col:
                    continue
                token = column.strip()
                try:
                    if "_" in token:
                        raise ValueError("digit separators are not allowed")
                    features.append(float(token))
                except ValueError as exc:
                    raise CsvParseError(
                        f"column {idx}: {token!r} is not a number", line=lineno, field=token
                    ) from exc
            parsed.append(LabeledPoint(columns[label_col].strip(), tuple(features)))
        self._extend(parsed)
        return self

    # ------------------------------------------------------------ dataframe

    def fit_from_dataframe(self, df: pd.DataFrame, label_col: Optional[str] = None) -> "KnnClassifier":
        if label_col is None:
            cols = {str(c).lower(): c for c in df.columns}
            label_col = next((cols[c] for c in _LABEL_CANDIDATES if c in cols), None)
            if label_col is None:
                raise ValueError(f"Could not detect a label column; name one of {_LABEL_CANDIDATES}.")
        subset = df.dropna()
        feature_cols = [c for c in subset.columns if c != label_col]
        X = subset[feature_cols].to_numpy(dtype=float)
        return self.fit(X.tolist(), [str(v) for v in subset[label_col]])

    def to_dataframe(self) -> pd.DataFrame:
        n = self.n_features or 0
        data = pd.DataFrame(self._matrix() if self.points else np.empty((0, 0)), columns=[f"f{i}" for i in range(n)])
        data.insert(0, "label", [p.label for p in self.points])
        return data
