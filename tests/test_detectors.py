"""Tests for detector backends and detection result wrapping."""

import json
from concurrent.futures import Future
from types import SimpleNamespace
from unittest.mock import MagicMock

import numpy as np
import pytest

from faceattr.backends.base import FaceDetectionBackend
from faceattr.backends.insightface import InsightFaceSCRFD, keypoints_to_contours
from faceattr.backends.static import StaticDetector, face_from_dict, load_detections
from faceattr.detection import Detected, DetectionFailed, detection_from_future, run_detection
from faceattr.errors import DetectionError
from faceattr.types import ContourKind

from helpers import MockDetector

DETECTIONS = {
    "faces": [
        {
            "bbox": [10, 20, 110, 140],
            "contours": {"nose_bottom": [[60, 80], [61, 100]], "left_eye": [[40, 50]]},
        },
        {"bbox": [150, 20, 190, 70]},
    ]
}


class TestStaticDetector:
    def test_protocol(self):
        assert isinstance(StaticDetector(), FaceDetectionBackend)

    def test_faces_from_sequence(self, make_face, blank_image):
        faces = [make_face(), make_face(bbox=(0, 0, 5, 5))]
        detector = StaticDetector(faces)
        detector.initialize()
        assert detector.detect(blank_image) == faces

    def test_detect_before_initialize(self, blank_image):
        with pytest.raises(RuntimeError):
            StaticDetector([]).detect(blank_image)

    def test_yaml_file(self, tmp_path, blank_image):
        import yaml

        path = tmp_path / "faces.yaml"
        path.write_text(yaml.safe_dump(DETECTIONS))
        detector = StaticDetector(str(path))
        detector.initialize()
        faces = detector.detect(blank_image)
        assert len(faces) == 2
        assert faces[0].bbox == (10.0, 20.0, 110.0, 140.0)
        assert faces[0].contour(ContourKind.NOSE_BOTTOM) == ((60.0, 80.0), (61.0, 100.0))
        assert faces[1].contours == {}

    def test_json_list(self, tmp_path):
        path = tmp_path / "faces.json"
        path.write_text(json.dumps(DETECTIONS["faces"]))
        assert len(load_detections(path)) == 2

    def test_empty_file_means_no_faces(self, tmp_path):
        path = tmp_path / "faces.yaml"
        path.write_text("")
        assert load_detections(path) == []

    def test_bad_file(self, tmp_path):
        path = tmp_path / "faces.json"
        path.write_text("{not json")
        with pytest.raises(DetectionError):
            load_detections(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(DetectionError):
            load_detections(tmp_path / "nope.yaml")

    def test_unreadable_file_fails_on_detect(self, tmp_path, blank_image):
        path = tmp_path / "faces.json"
        path.write_text("{not json")
        detector = StaticDetector(path)
        detector.initialize()
        with pytest.raises(DetectionError):
            detector.detect(blank_image)
        assert isinstance(run_detection(detector, blank_image), DetectionFailed)

    def test_file_read_once(self, tmp_path, blank_image):
        path = tmp_path / "faces.json"
        path.write_text(json.dumps(DETECTIONS))
        detector = StaticDetector(path)
        detector.initialize()
        assert len(detector.detect(blank_image)) == 2
        path.unlink()
        assert len(detector.detect(blank_image)) == 2

    def test_invalid_bbox_rejected(self):
        with pytest.raises(ValueError):
            face_from_dict({"bbox": [1, 2, 3]})

    def test_cleanup(self, make_face, blank_image):
        detector = StaticDetector([make_face()])
        detector.initialize()
        detector.cleanup()
        with pytest.raises(RuntimeError):
            detector.detect(blank_image)


class TestKeypointsToContours:
    def test_five_points(self):
        kps = np.array([[30, 40], [70, 40], [50, 60], [35, 80], [65, 80]], dtype=np.float32)
        contours = keypoints_to_contours(kps)
        assert contours[ContourKind.LEFT_EYE] == ((30.0, 40.0),)
        assert contours[ContourKind.RIGHT_EYE] == ((70.0, 40.0),)
        assert contours[ContourKind.NOSE_BOTTOM] == ((50.0, 60.0),)
        assert contours[ContourKind.UPPER_LIP_BOTTOM] == ((35.0, 80.0), (65.0, 80.0))

    def test_missing_keypoints(self):
        assert keypoints_to_contours(None) == {}
        assert keypoints_to_contours(np.zeros((2, 2))) == {}


class TestInsightFaceSCRFD:
    def _backend(self, app):
        backend = InsightFaceSCRFD()
        backend._app = app
        backend._initialized = True
        return backend

    def test_detect_before_initialize(self, blank_image):
        with pytest.raises(RuntimeError):
            InsightFaceSCRFD().detect(blank_image)

    def test_detect_converts_faces(self, blank_image):
        app = MagicMock()
        app.get.return_value = [
            SimpleNamespace(
                bbox=np.array([10, 20, 110, 140], dtype=np.float32),
                kps=np.array([[30, 40], [70, 40], [50, 60], [35, 80], [65, 80]]),
            ),
            SimpleNamespace(bbox=np.array([50, 50, 50, 60]), kps=None),
        ]
        faces = self._backend(app).detect(blank_image)
        assert len(faces) == 1
        assert faces[0].bbox == (10.0, 20.0, 110.0, 140.0)
        assert ContourKind.NOSE_BOTTOM in faces[0].contours

    def test_gray_image_converted(self):
        app = MagicMock()
        app.get.return_value = []
        self._backend(app).detect(np.zeros((40, 40), dtype=np.uint8))
        (image,), _ = app.get.call_args
        assert image.shape == (40, 40, 3)

    def test_app_error_becomes_detection_error(self, blank_image):
        app = MagicMock()
        app.get.side_effect = RuntimeError("onnx failure")
        with pytest.raises(DetectionError):
            self._backend(app).detect(blank_image)

    def test_cleanup(self):
        backend = self._backend(MagicMock())
        backend.cleanup()
        assert backend._app is None


class TestRunDetection:
    def test_success(self, make_face, blank_image):
        result = run_detection(MockDetector([make_face()]), blank_image)
        assert isinstance(result, Detected)
        assert len(result.faces) == 1

    def test_no_faces(self, blank_image):
        assert run_detection(MockDetector([]), blank_image) == Detected(faces=[])

    def test_failure(self, blank_image):
        error = DetectionError("detector crashed")
        result = run_detection(MockDetector(error=error), blank_image)
        assert isinstance(result, DetectionFailed)
        assert result.cause is error


class TestDetectionFromFuture:
    def test_result(self, make_face):
        future = Future()
        future.set_result([make_face()])
        assert isinstance(detection_from_future(future), Detected)

    def test_exception(self):
        future = Future()
        future.set_exception(DetectionError("boom"))
        result = detection_from_future(future)
        assert isinstance(result, DetectionFailed)
        assert isinstance(result.cause, DetectionError)

    def test_timeout_is_failure(self):
        result = detection_from_future(Future(), timeout=0.01)
        assert isinstance(result, DetectionFailed)
