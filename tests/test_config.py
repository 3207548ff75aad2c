"""
Smoke tests for configuration loading and validation.
"""

import pytest

from main import apply_cli_overrides, build_parser, load_config, validate_config


class TestValidateConfig:
    """Tests for validate_config function."""

    def test_valid_config_passes(self, valid_config):
        is_valid, error = validate_config(valid_config)

        assert is_valid is True
        assert error is None

    @pytest.mark.parametrize("section", ["camera", "detection", "log_path", "log_level"])
    def test_missing_section(self, valid_config, section):
        del valid_config[section]

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert section in error

    def test_blur_and_output_sections_optional(self, valid_config):
        del valid_config["blur"]
        del valid_config["output"]

        assert validate_config(valid_config) == (True, None)

    def test_invalid_device_id_type(self, valid_config):
        valid_config["camera"]["device_id"] = [1, 2, 3]

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "device_id" in error

    def test_negative_device_id(self, valid_config):
        valid_config["camera"]["device_id"] = -1

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "non-negative" in error

    def test_file_device_id(self, valid_config):
        valid_config["camera"]["device_id"] = "clips/meeting.mp4"
        assert validate_config(valid_config) == (True, None)

    def test_bad_resolution(self, valid_config):
        valid_config["camera"]["resolution"] = [640]

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "resolution" in error

    def test_missing_model(self, valid_config):
        valid_config["detection"]["model"] = ""

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "detection.model" in error

    def test_threshold_out_of_range(self, valid_config):
        valid_config["detection"]["confidence_threshold"] = 1.5

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "confidence_threshold" in error

    def test_even_kernel(self, valid_config):
        valid_config["blur"]["kernel_size"] = 74

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "kernel_size" in error

    def test_unknown_border(self, valid_config):
        valid_config["blur"]["border"] = "wrap"

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "border" in error

    def test_invalid_log_level(self, valid_config):
        valid_config["log_level"] = "VERBOSE"

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "log_level" in error


class TestLoadConfig:
    def test_loads_default(self, temp_config_dir):
        config = load_config(str(temp_config_dir / "config.yaml"))

        assert config["detection"]["model"] == "models/face.caffemodel"
        assert config["blur"]["kernel_size"] == 75

    def test_local_overrides_merge(self, temp_config_dir):
        (temp_config_dir / "config.yaml").write_text("""
camera:
  device_id: "clips/meeting.mp4"
blur:
  kernel_size: 31
""")
        config = load_config(str(temp_config_dir / "config.yaml"))

        assert config["camera"]["device_id"] == "clips/meeting.mp4"
        assert config["blur"]["kernel_size"] == 31
        assert config["blur"]["border"] == "default"

    def test_explicit_config_applied_last(self, temp_config_dir):
        (temp_config_dir / "config.yaml").write_text("log_level: WARNING\n")
        explicit = temp_config_dir / "tf.yaml"
        explicit.write_text("""
detection:
  model: "models/frozen_inference_graph.pb"
log_level: DEBUG
""")
        config = load_config(str(explicit))

        assert config["detection"]["model"] == "models/frozen_inference_graph.pb"
        assert config["detection"]["target"] == "cpu"
        assert config["log_level"] == "DEBUG"

    def test_invalid_yaml_exits(self, temp_config_dir):
        (temp_config_dir / "config.yaml").write_text("camera: [unclosed\n")

        with pytest.raises(SystemExit):
            load_config(str(temp_config_dir / "config.yaml"))


class TestCliOverrides:
    def test_flags_override_yaml(self, valid_config):
        args = build_parser().parse_args([
            "--source", "1",
            "--model", "face.caffemodel",
            "--model-config", "deploy.prototxt",
            "--backend", "cuda",
            "--target", "cuda",
            "--no-display",
            "--record",
        ])
        config = apply_cli_overrides(valid_config, args)

        assert config["camera"]["device_id"] == "1"
        assert config["detection"]["model"] == "face.caffemodel"
        assert config["detection"]["config"] == "deploy.prototxt"
        assert config["detection"]["backend"] == "cuda"
        assert config["output"]["display"] is False
        assert config["output"]["record"] is True

    def test_no_flags_keep_yaml(self, valid_config):
        args = build_parser().parse_args([])
        config = apply_cli_overrides(valid_config, args)

        assert config["camera"]["device_id"] == 0
        assert config["detection"]["backend"] == "default"
        assert config["output"]["record"] is False
