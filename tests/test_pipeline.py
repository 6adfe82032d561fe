"""Tests for the file-level helpers and the command line entry point."""

import json

import pytest

from knn_classifier import (
    KnnClassifier,
    KnnConfig,
    classify_with_model,
    evaluate,
    load_classifier,
    save_classifier,
    train_test_split,
)
from knn_classifier.pipeline import cli

BMI_CFG = KnnConfig(k=5, label_col=2, skip_header=True)


def test_load_classifier(bmi_csv):
    clf = load_classifier(str(bmi_csv), BMI_CFG)
    assert clf.k == 5
    assert len(clf) == 30
    assert clf.predict([[159.0, 85.0], [162.0, 58.0], [183.0, 48.0]]) == ["Obesity", "Normal", "Thin"]


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_classifier(str(tmp_path / "nope.csv"))


def test_save_then_load(bmi_classifier, tmp_path):
    out = save_classifier(bmi_classifier, str(tmp_path / "models" / "bmi.csv"))
    text = open(out, encoding="utf-8").read()
    assert text.startswith("Obesity,150,80\n")
    reloaded = load_classifier(out, KnnConfig(k=5))
    assert reloaded.points == bmi_classifier.points


class TestSplit:
    def test_sizes_and_partition(self, bmi_classifier):
        train, test = train_test_split(bmi_classifier.points, train_fraction=2 / 3, seed=7)
        assert len(train) == 20
        assert len(test) == 10
        assert sorted(train + test, key=repr) == sorted(bmi_classifier.points, key=repr)

    def test_seed_is_reproducible(self, bmi_classifier):
        first = train_test_split(bmi_classifier.points, seed=3)
        second = train_test_split(bmi_classifier.points, seed=3)
        assert first == second

    def test_input_not_mutated(self, bmi_classifier):
        before = list(bmi_classifier.points)
        train_test_split(bmi_classifier.points, seed=1)
        assert bmi_classifier.points == before

    @pytest.mark.parametrize("fraction", [0.0, 1.0, 1.5])
    def test_bad_fraction(self, bmi_classifier, fraction):
        with pytest.raises(ValueError):
            train_test_split(bmi_classifier.points, train_fraction=fraction)

    def test_empty_input(self):
        with pytest.raises(ValueError):
            train_test_split([])


def test_evaluate(bmi_classifier):
    report = evaluate(bmi_classifier, train_fraction=2 / 3, seed=42)
    assert report["k"] == 5
    assert report["n_train"] == 20
    assert report["n_test"] == 10
    assert 0 <= report["correct"] <= 10
    assert report["accuracy"] == report["correct"] / 10
    assert len(bmi_classifier) == 30


def test_evaluate_with_empty_test_split():
    clf = KnnClassifier(1).fit([[1.0]], ["a"])
    with pytest.raises(ValueError):
        evaluate(clf, train_fraction=0.9)


def test_classify_with_model(bmi_classifier, tmp_path):
    model = save_classifier(bmi_classifier, str(tmp_path / "model.csv"))
    result = classify_with_model(model, [162.0, 58.0], KnnConfig(k=5))
    assert result["predicted_label"] == "Normal"
    assert len(result["neighbors"]) == 5
    assert result["vote_probs"]["Normal"] == pytest.approx(0.6)
    assert result["config"]["k"] == 5


class TestCli:
    def test_classify_and_evaluate(self, bmi_csv, tmp_path, capsys):
        export = tmp_path / "out" / "model.csv"
        cli([
            "--dataset", str(bmi_csv),
            "--label-col", "2",
            "--skip-header",
            "--k", "5",
            "--classify", "159,85",
            "--classify", "183,48",
            "--evaluate",
            "--seed", "0",
            "--export", str(export),
        ])
        result = json.loads(capsys.readouterr().out)
        assert result["n_points"] == 30
        assert [p["label"] for p in result["predictions"]] == ["Obesity", "Thin"]
        assert result["evaluation"]["n_test"] == 10
        assert export.read_text(encoding="utf-8").count("\n") == 30

    def test_parse_error_exits(self, tmp_path):
        bad = tmp_path / "bad.csv"
        bad.write_text("a,1\nb,x\n", encoding="utf-8")
        with pytest.raises(SystemExit) as excinfo:
            cli(["--dataset", str(bad)])
        assert "line 2" in str(excinfo.value.code)

    def test_bad_query_exits(self, bmi_csv):
        with pytest.raises(SystemExit):
            cli(["--dataset", str(bmi_csv), "--label-col", "2", "--skip-header", "--classify", "1,abc"])
