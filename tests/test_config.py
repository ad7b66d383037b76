"""Tests for pipeline configuration and path resolution."""

from pathlib import Path

import pytest

from faceattr.config import DetectorConfig, PipelineConfig
from faceattr.paths import ensure_dir, get_home_dir, get_models_dir


class TestPipelineConfig:
    def test_defaults(self):
        config = PipelineConfig()
        assert config.agender_model == "agender_cnn_model.onnx"
        assert config.expression_model == "expression_cnn_model.onnx"
        assert config.device == "cpu"
        assert config.parallel is True
        assert config.timeout == 10.0
        assert config.models_path is None
        assert config.detector.name == "insightface"

    def test_zero_timeout_disables(self):
        assert PipelineConfig(inference_timeout_sec=0).timeout is None

    def test_negative_timeout(self):
        with pytest.raises(ValueError):
            PipelineConfig(inference_timeout_sec=-1)

    def test_unknown_detector(self):
        with pytest.raises(ValueError):
            DetectorConfig(name="mediapipe")

    def test_from_dict(self):
        config = PipelineConfig.from_dict({
            "device": "cuda:0",
            "parallel": False,
            "models_dir": "~/models",
            "detector": {"name": "static", "kwargs": {"faces": "faces.yaml"}},
        })
        assert config.device == "cuda:0"
        assert config.parallel is False
        assert config.models_path == Path("~/models").expanduser()
        assert config.detector == DetectorConfig(name="static", kwargs={"faces": "faces.yaml"})

    def test_from_dict_detector_name_only(self):
        assert PipelineConfig.from_dict({"detector": "static"}).detector.name == "static"

    def test_from_dict_unknown_key(self):
        with pytest.raises(TypeError):
            PipelineConfig.from_dict({"fps": 10})

    def test_to_dict_round_trip(self):
        config = PipelineConfig(device="cuda:1", inference_timeout_sec=2.5)
        assert PipelineConfig.from_dict(config.to_dict()) == config

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "pipeline.yaml"
        path.write_text(
            "expression_model: expr_v2.onnx\n"
            "inference_timeout_sec: 3\n"
            "detector:\n"
            "  name: insightface\n"
            "  kwargs:\n"
            "    det_thresh: 0.6\n"
        )
        config = PipelineConfig.from_yaml(path)
        assert config.expression_model == "expr_v2.onnx"
        assert config.timeout == 3
        assert config.detector.kwargs == {"det_thresh": 0.6}

    def test_from_empty_yaml(self, tmp_path):
        path = tmp_path / "pipeline.yaml"
        path.write_text("")
        assert PipelineConfig.from_yaml(path) == PipelineConfig()

    def test_from_yaml_not_mapping(self, tmp_path):
        path = tmp_path / "pipeline.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            PipelineConfig.from_yaml(path)

    def test_from_yaml_invalid(self, tmp_path):
        path = tmp_path / "pipeline.yaml"
        path.write_text("detector: [unclosed\n")
        with pytest.raises(ValueError):
            PipelineConfig.from_yaml(path)


class TestPaths:
    def test_home_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FACEATTR_HOME", str(tmp_path / "home"))
        assert get_home_dir() == tmp_path / "home"

    def test_models_dir_under_home(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FACEATTR_HOME", str(tmp_path))
        monkeypatch.delenv("FACEATTR_MODELS_DIR", raising=False)
        assert get_models_dir() == tmp_path / "models"

    def test_models_dir_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FACEATTR_MODELS_DIR", str(tmp_path / "m"))
        assert get_models_dir() == tmp_path / "m"

    def test_relative_models_dir(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("FACEATTR_MODELS_DIR", "weights")
        assert get_models_dir() == tmp_path / "weights"

    def test_lookup_creates_nothing(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FACEATTR_HOME", str(tmp_path / "home"))
        monkeypatch.delenv("FACEATTR_MODELS_DIR", raising=False)
        get_home_dir()
        get_models_dir()
        assert not (tmp_path / "home").exists()

    def test_ensure_dir(self, tmp_path):
        path = ensure_dir(tmp_path / "a" / "b")
        assert path.is_dir()
        assert ensure_dir(path) == path
