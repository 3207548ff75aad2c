"""
Tests for the OpenCV DNN detector backend.
"""

from unittest.mock import MagicMock, patch

import cv2
import numpy as np
import pytest

from inference.dnn_backend import (
    CAFFE_BLOB,
    TENSORFLOW_BLOB,
    DnnDetector,
    DnnDetectorConfig,
    blob_params_for_model,
    parse_net_backend,
    parse_net_target,
)


class TestParseNames:
    def test_known_backends(self):
        assert parse_net_backend("default") == cv2.dnn.DNN_BACKEND_DEFAULT
        assert parse_net_backend("opencv") == cv2.dnn.DNN_BACKEND_OPENCV
        assert parse_net_backend("OpenCV") == cv2.dnn.DNN_BACKEND_OPENCV

    def test_unknown_backend_falls_back(self):
        assert parse_net_backend("tpu") == cv2.dnn.DNN_BACKEND_DEFAULT
        assert parse_net_backend("") == cv2.dnn.DNN_BACKEND_DEFAULT

    def test_known_targets(self):
        assert parse_net_target("cpu") == cv2.dnn.DNN_TARGET_CPU
        assert parse_net_target("fp32") == cv2.dnn.DNN_TARGET_OPENCL
        assert parse_net_target("fp16") == cv2.dnn.DNN_TARGET_OPENCL_FP16

    def test_unknown_target_falls_back(self):
        assert parse_net_target("quantum") == cv2.dnn.DNN_TARGET_CPU


class TestBlobParams:
    def test_caffe_model(self):
        params = blob_params_for_model("models/res10_300x300_ssd_iter_140000.caffemodel")
        assert params == CAFFE_BLOB
        assert params.scale == 1.0
        assert params.mean == (104.0, 177.0, 123.0)
        assert params.swap_rb is False

    def test_tensorflow_model(self):
        params = blob_params_for_model("models/frozen_inference_graph.pb")
        assert params == TENSORFLOW_BLOB
        assert params.scale == pytest.approx(1.0 / 127.5)
        assert params.swap_rb is True


class TestDnnDetector:
    def _net(self, empty=False, output=None):
        net = MagicMock()
        net.empty.return_value = empty
        net.forward.return_value = output
        return net

    def test_loads_and_configures_net(self):
        net = self._net()
        with patch("inference.dnn_backend.cv2.dnn.readNet", return_value=net) as read_net:
            DnnDetector(DnnDetectorConfig(model="face.caffemodel", config="deploy.prototxt", target="cpu"))

        read_net.assert_called_once_with("face.caffemodel", "deploy.prototxt")
        net.setPreferableBackend.assert_called_once_with(cv2.dnn.DNN_BACKEND_DEFAULT)
        net.setPreferableTarget.assert_called_once_with(cv2.dnn.DNN_TARGET_CPU)

    def test_empty_net_raises(self):
        with patch("inference.dnn_backend.cv2.dnn.readNet", return_value=self._net(empty=True)):
            with pytest.raises(RuntimeError, match="Error reading network model"):
                DnnDetector(DnnDetectorConfig(model="missing.caffemodel"))

    def test_forward_returns_raw_tensor(self):
        tensor = np.zeros((1, 1, 3, 7), dtype=np.float32)
        net = self._net(output=tensor)
        frame = np.zeros((240, 320, 3), dtype=np.uint8)

        with patch("inference.dnn_backend.cv2.dnn.readNet", return_value=net), \
                patch("inference.dnn_backend.cv2.dnn.blobFromImage", return_value="blob") as blob:
            detector = DnnDetector(DnnDetectorConfig(model="face.caffemodel", config="deploy.prototxt"))
            out = detector.forward(frame)

        assert out is tensor
        net.setInput.assert_called_once_with("blob")
        args, kwargs = blob.call_args
        assert args[0] is frame
        assert args[1] == 1.0
        assert args[2] == (300, 300)
        assert args[3] == (104.0, 177.0, 123.0)
        assert kwargs == {"swapRB": False, "crop": False}

    def test_forward_tensorflow_blob(self):
        net = self._net(output=np.zeros((1, 1, 0, 7), dtype=np.float32))

        with patch("inference.dnn_backend.cv2.dnn.readNet", return_value=net), \
                patch("inference.dnn_backend.cv2.dnn.blobFromImage", return_value="blob") as blob:
            detector = DnnDetector(DnnDetectorConfig(model="frozen_inference_graph.pb", config="ssd.pbtxt"))
            detector.forward(np.zeros((10, 10, 3), dtype=np.uint8))

        assert blob.call_args[1]["swapRB"] is True
        assert blob.call_args[0][3] == (127.5, 127.5, 127.5)
