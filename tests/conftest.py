"""Shared fixtures for the k-NN classifier tests."""

import pytest

from knn_classifier import KnnClassifier


BMI_DATA = [
    [150.0, 80.0], [153.0, 69.0], [153.0, 94.0], [189.0, 96.0], [159.0, 74.0],
    [169.0, 64.0], [171.0, 64.0], [186.0, 59.0], [173.0, 84.0], [156.0, 77.0],
    [174.0, 46.0], [174.0, 54.0], [162.0, 77.0], [151.0, 76.0], [188.0, 55.0],
    [189.0, 97.0], [173.0, 68.0], [174.0, 80.0], [167.0, 56.0], [187.0, 95.0],
    [175.0, 100.0], [163.0, 73.0], [158.0, 79.0], [159.0, 45.0], [170.0, 45.0],
    [166.0, 81.0], [155.0, 98.0], [165.0, 50.0], [150.0, 83.0], [168.0, 85.0],
]
BMI_LABELS = [
    "Obesity", "Obesity", "Obesity", "Obesity", "Obesity",
    "Normal", "Normal", "Thin", "Obesity", "Obesity",
    "Thin", "Thin", "Obesity", "Obesity", "Thin",
    "Obesity", "Normal", "Obesity", "Normal", "Obesity",
    "Obesity", "Obesity", "Obesity", "Thin", "Thin",
    "Obesity", "Obesity", "Thin", "Obesity", "Obesity",
]


@pytest.fixture
def bmi_classifier():
    """k=5 classifier over the 30 height/weight rows."""
    return KnnClassifier(5).fit(BMI_DATA, BMI_LABELS)


@pytest.fixture
def small_classifier():
    """Two-class, five-point classifier with k=3."""
    return KnnClassifier(3).fit(
        [[170.0, 60.0], [166.0, 58.0], [152.0, 99.0], [163.0, 95.0], [150.0, 90.0]],
        ["Normal", "Normal", "Obesity", "Obesity", "Obesity"],
    )


@pytest.fixture
def bmi_csv(tmp_path):
    """The BMI rows written as a headed CSV file (label in the last column)."""
    lines = ["height,weight,label"]
    lines += [f"{int(h)},{int(w)},{label}" for (h, w), label in zip(BMI_DATA, BMI_LABELS)]
    path = tmp_path / "bmi.csv"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    """Hide KNN_* variables and undo anything a .env load sets during a test."""
    for name in ("KNN_K", "KNN_DELIMITER", "KNN_LABEL_COL", "KNN_SKIP_HEADER",
                 "KNN_TRAIN_FRACTION", "KNN_SEED", "KNN_N_JOBS"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
