"""End-to-end tests for the command-line driver."""

import hashlib
import json

import pytest

from payout_forecast.cli import file_hash, main
from payout_forecast.io import read_predictions


@pytest.fixture
def claims_path(tmp_path):
    return tmp_path / "data" / "claims.csv"


class TestCli:
    """Test payout_forecast.cli.main."""

    def test_synthetic_run(self, claims_path, tmp_path, capsys):
        out_dir = tmp_path / "out"
        code = main([str(claims_path), "--synthetic", "60", "--months", "0", "12",
                     "--output-dir", str(out_dir)])

        assert code == 0
        assert claims_path.exists()
        jan16 = out_dir / "PredictionsJan16.csv"
        jan17 = out_dir / "PredictionsJan17.csv"
        assert jan16.exists() and jan17.exists()
        assert read_predictions(jan17)["Year"].eq(2017).all()

        manifest = json.loads((out_dir / "run_manifest.json").read_text())
        assert [m["label"] for m in manifest["months"]] == ["Jan16", "Jan17"]
        assert all(m["success"] for m in manifest["months"])
        assert manifest["months"][0]["sha256"] == file_hash(jan16)
        assert manifest["clustering"]["enabled"] is False

        out = capsys.readouterr().out
        assert "Predictions for Jan16" in out
        assert "Forecast complete" in out

    def test_clustered_run_writes_beside_input(self, claims_path):
        code = main([str(claims_path), "--synthetic", "60", "--months", "4",
                     "--cluster", "-k", "3", "--epsilon", "0.5"])

        assert code == 0
        assert (claims_path.parent / "PredictionsMay16.csv").exists()
        manifest = json.loads((claims_path.parent / "run_manifest.json").read_text())
        entry = manifest["months"][0]
        assert 1 <= entry["n_clusters"] <= 3
        assert set(entry["timings_ms"]) >= {"read", "aggregation", "clustering", "prediction"}

    def test_missing_input_fails_each_month(self, tmp_path, capsys):
        code = main([str(tmp_path / "missing.csv"), "--months", "1", "2"])

        assert code == 1
        manifest = json.loads((tmp_path / "run_manifest.json").read_text())
        assert [m["success"] for m in manifest["months"]] == [False, False]
        assert "2 of 2 forecast months failed" in capsys.readouterr().out

    def test_month_out_of_range(self, claims_path):
        assert main([str(claims_path), "--months", "13"]) == 2

    def test_prompts_for_input(self, claims_path, monkeypatch):
        monkeypatch.setattr("builtins.input", lambda prompt: str(claims_path))
        assert main(["--synthetic", "20", "--months", "6"]) == 0
        assert (claims_path.parent / "PredictionsJul16.csv").exists()


class TestFileHash:
    """Test the manifest file digest."""

    def test_matches_hashlib_across_chunks(self, tmp_path):
        path = tmp_path / "blob.bin"
        data = bytes(range(256)) * 10
        path.write_bytes(data)
        assert file_hash(path, chunk_size=7) == hashlib.sha256(data).hexdigest()

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_bytes(b"")
        assert file_hash(path) == hashlib.sha256(b"").hexdigest()
