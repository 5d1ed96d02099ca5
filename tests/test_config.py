"""Tests for configuration parsing."""

import tempfile
from pathlib import Path

import pytest

from vortex.config import (
    DEFAULT_RESERVED_NAMESPACES,
    DEFAULT_UNUSED_EXCLUSIONS,
    DEFAULT_UPLOAD_ENDPOINT,
    Config,
    ExportConfig,
    TrackingConfig,
    UploadConfig,
)


def write_config(content: str) -> Path:
    """Write TOML content to a temporary file."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".toml", delete=False) as f:
        f.write(content)
        return Path(f.name)


class TestTrackingConfig:
    """Tests for TrackingConfig parsing."""

    def test_defaults(self):
        """Test parsing an empty [tracking] table."""
        tracking = TrackingConfig.from_dict({})

        assert tracking.reserved_namespaces == DEFAULT_RESERVED_NAMESPACES
        assert tracking.unused_exclusions == DEFAULT_UNUSED_EXCLUSIONS
        assert tracking.report_limit == 10

    def test_single_string_namespace(self):
        """Test that a bare string is accepted as a one-item list."""
        tracking = TrackingConfig.from_dict({"reserved_namespaces": "minecraft"})

        assert tracking.reserved_namespaces == ("minecraft",)

    def test_invalid_namespace_list(self):
        """Test error when namespaces aren't strings."""
        with pytest.raises(ValueError) as exc_info:
            TrackingConfig.from_dict({"reserved_namespaces": [1, 2]})
        assert "tracking.reserved_namespaces" in str(exc_info.value)

    @pytest.mark.parametrize("limit", [0, -1, "5", True])
    def test_invalid_report_limit(self, limit):
        """Test error on a non-positive or non-integer limit."""
        with pytest.raises(ValueError) as exc_info:
            TrackingConfig.from_dict({"report_limit": limit})
        assert "tracking.report_limit" in str(exc_info.value)


class TestExportConfig:
    """Tests for ExportConfig parsing."""

    def test_defaults(self):
        """Test parsing an empty [export] table."""
        export = ExportConfig.from_dict({})

        assert export.directory == "config/vortex"
        assert export.base_name == "vortex_mod_usage_data"
        assert export.export_on_shutdown is True

    def test_empty_directory(self):
        """Test error on an empty directory."""
        with pytest.raises(ValueError) as exc_info:
            ExportConfig.from_dict({"directory": ""})
        assert "export.directory" in str(exc_info.value)

    @pytest.mark.parametrize("value", ["false", 0, 1])
    def test_export_on_shutdown_must_be_boolean(self, value):
        """Test error on a non-boolean export_on_shutdown."""
        with pytest.raises(ValueError) as exc_info:
            ExportConfig.from_dict({"export_on_shutdown": value})
        assert "export.export_on_shutdown" in str(exc_info.value)

    def test_export_on_shutdown_false(self):
        """Test disabling the shutdown export."""
        assert ExportConfig.from_dict({"export_on_shutdown": False}).export_on_shutdown is False


class TestUploadConfig:
    """Tests for UploadConfig parsing."""

    def test_defaults(self):
        """Test parsing an empty [upload] table."""
        upload = UploadConfig.from_dict({})

        assert upload.endpoint == DEFAULT_UPLOAD_ENDPOINT
        assert upload.timeout == 10

    def test_rejects_non_http_endpoint(self):
        """Test error on an endpoint that isn't an http(s) URL."""
        with pytest.raises(ValueError) as exc_info:
            UploadConfig.from_dict({"endpoint": "ftp://example.com"})
        assert "upload.endpoint" in str(exc_info.value)


class TestConfig:
    """Tests for Config loading."""

    def test_load_from_toml_string(self):
        """Test loading config from TOML content."""
        config_path = write_config(
            """
[vortex]
version = "1"

[tracking]
reserved_namespaces = ["minecraft", "neoforge"]
unused_exclusions = ["minecraft"]
report_limit = 5

[export]
directory = "stats"
base_name = "usage"
export_on_shutdown = false

[upload]
endpoint = "http://localhost:3000/api/submit"
viewer_url = "http://localhost:3000/"
timeout = 2
"""
        )

        try:
            config = Config.load(config_path)

            assert config.version == "1"
            assert config.tracking.reserved_namespaces == ("minecraft", "neoforge")
            assert config.tracking.unused_exclusions == ("minecraft",)
            assert config.tracking.report_limit == 5
            assert config.export.directory == "stats"
            assert config.export.export_on_shutdown is False
            assert config.upload.endpoint == "http://localhost:3000/api/submit"
            assert config.upload.timeout == 2
            assert config.config_path == config_path
        finally:
            config_path.unlink()

    def test_load_with_defaults(self):
        """Test that defaults are applied for missing sections."""
        config_path = write_config('[vortex]\nversion = "1"\n')

        try:
            config = Config.load(config_path)

            assert config.tracking.reserved_namespaces == ("minecraft",)
            assert config.export.base_name == "vortex_mod_usage_data"
            assert config.upload.timeout == 10
        finally:
            config_path.unlink()

    def test_load_invalid_value(self):
        """Test that invalid values are rejected."""
        config_path = write_config("[upload]\ntimeout = 0\n")

        try:
            with pytest.raises(ValueError) as exc_info:
                Config.load(config_path)
            assert "upload.timeout" in str(exc_info.value)
        finally:
            config_path.unlink()

    def test_load_or_default_with_missing_file(self):
        """Test load_or_default returns default when file doesn't exist."""
        config = Config.load_or_default(Path("/nonexistent/config.toml"))

        assert config.version == "1"
        assert config.config_path is None
        assert config.tracking.report_limit == 10

    def test_load_missing_file_raises_error(self):
        """Test load raises FileNotFoundError for missing file."""
        with pytest.raises(FileNotFoundError):
            Config.load(Path("/nonexistent/config.toml"))

    def test_find_config_in_parent(self, tmp_path, monkeypatch):
        """Test discovery of config/vortex/config.toml from a subdirectory."""
        config_file = tmp_path / "config" / "vortex" / "config.toml"
        config_file.parent.mkdir(parents=True)
        config_file.write_text("[tracking]\nreport_limit = 3\n")
        nested = tmp_path / "world" / "region"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        config = Config.load()

        assert config.config_path == config_file
        assert config.tracking.report_limit == 3

    def test_get_value(self):
        """Test dot-separated lookup."""
        config = Config()

        assert config.get_value("upload.timeout") == 10
        assert config.get_value("export.base_name") == "vortex_mod_usage_data"

    def test_get_value_invalid_path(self):
        """Test lookup of a path that doesn't exist."""
        with pytest.raises(KeyError):
            Config().get_value("tracking.nope")
