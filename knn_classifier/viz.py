"""Plotting support: a principal-component view of the stored points."""

from __future__ import annotations

from typing import Iterable, Sequence, Tuple

import numpy as np
import pandas as pd

from .knn import EmptyModelError, KnnClassifier


def project_knn_scene(
    clf: KnnClassifier,
    query_feature: Sequence[float],
    neighbor_indices: Iterable[int],
    dims: int = 3,
) -> Tuple[pd.DataFrame, np.ndarray]:
    """Return the stored points and the query in principal-component coordinates.

    The frame always has pc1..pc3 (axes beyond ``dims`` are zero), the point
    labels and an ``is_neighbor`` flag. The query comes back as a length-3 array.
    """
    if not clf.points:
        raise EmptyModelError("The classifier holds no points to project.")

    points = clf.to_dataframe()
    X = points.drop(columns="label").to_numpy(dtype=float)
    center = X.mean(axis=0)
    _, _, axes = np.linalg.svd(X - center, full_matrices=False)
    axes = axes[: max(1, min(dims, 3))]

    scene = np.zeros((len(X), 3))
    scene[:, : len(axes)] = (X - center) @ axes.T
    query = np.zeros(3)
    query[: len(axes)] = axes @ (np.asarray(query_feature, dtype=float) - center)

    frame = pd.DataFrame(scene, columns=["pc1", "pc2", "pc3"])
    frame["label"] = points["label"]
    frame["is_neighbor"] = np.isin(np.arange(len(frame)), list(neighbor_indices))
    return frame, query
