"""
Runtime Configuration Unit Tests
Tests for canopy/config/runtime.py
"""
import logging

import pytest

from canopy.config import (
    DEFAULT_HASH_ALGORITHM,
    RuntimeConfig,
    get_default_config,
    set_default_config,
    setup_logging,
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("CANOPY_HASH_ALGORITHM", "CANOPY_LOG_LEVEL", "CANOPY_LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestRuntimeConfig:
    """Tests for RuntimeConfig loading."""

    def test_defaults(self):
        config = RuntimeConfig()
        assert config.hash_algorithm == DEFAULT_HASH_ALGORITHM == "sha256"
        assert config.log_level == "WARNING"
        assert config.log_file is None

    def test_from_env(self, clean_env):
        clean_env.setenv("CANOPY_HASH_ALGORITHM", "SHA512")
        clean_env.setenv("CANOPY_LOG_LEVEL", "DEBUG")

        config = RuntimeConfig.from_env()

        assert config.hash_algorithm == "sha512"
        assert config.log_level == "DEBUG"

    def test_from_env_without_variables(self, clean_env):
        assert RuntimeConfig.from_env() == RuntimeConfig()

    def test_from_dict_partial(self):
        config = RuntimeConfig.from_dict({"logging": {"level": "INFO", "file": "x.log"}})

        assert config.hash_algorithm == "sha256"
        assert config.log_level == "INFO"
        assert config.log_file == "x.log"

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "canopy.yaml"
        path.write_text("hash_algorithm: blake2b\nlog_level: INFO\nextra:\n  team: audit\n")

        config = RuntimeConfig.from_yaml(path)

        assert config.hash_algorithm == "blake2b"
        assert config.log_level == "INFO"
        assert config.extra == {"team": "audit"}

    def test_from_yaml_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert RuntimeConfig.from_yaml(path) == RuntimeConfig()

    def test_from_yaml_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            RuntimeConfig.from_yaml(tmp_path / "absent.yaml")

    def test_with_env_overrides(self, clean_env):
        base = RuntimeConfig(hash_algorithm="sha1", log_level="INFO")
        assert base.with_env_overrides() is base

        clean_env.setenv("CANOPY_HASH_ALGORITHM", "SHA3_256")
        overridden = base.with_env_overrides()

        assert overridden.hash_algorithm == "sha3_256"
        assert overridden.log_level == "INFO"
        assert base.hash_algorithm == "sha1"

    def test_to_dict_round_trip(self):
        config = RuntimeConfig(hash_algorithm="sha384", log_level="ERROR", extra={"a": 1})
        assert RuntimeConfig.from_dict(config.to_dict()) == config


class TestDefaultConfig:
    """Tests for the process-wide default."""

    def test_get_reads_env_once(self, clean_env):
        clean_env.setenv("CANOPY_HASH_ALGORITHM", "sha224")
        set_default_config(None)

        assert get_default_config().hash_algorithm == "sha224"
        assert get_default_config() is get_default_config()

    def test_set(self):
        custom = RuntimeConfig(hash_algorithm="sha1")
        set_default_config(custom)
        assert get_default_config() is custom


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_configures_root_logger(self, tmp_path):
        root = logging.getLogger()
        saved_handlers, saved_level = list(root.handlers), root.level
        root.handlers = []
        try:
            log_file = tmp_path / "canopy.log"
            setup_logging("debug", str(log_file))

            assert root.level == logging.DEBUG
            assert any(isinstance(h, logging.FileHandler) for h in root.handlers)
        finally:
            for handler in root.handlers:
                handler.close()
            root.handlers = saved_handlers
            root.setLevel(saved_level)

    def test_falls_back_to_config(self, tmp_path):
        root = logging.getLogger()
        saved_handlers, saved_level = list(root.handlers), root.level
        root.handlers = []
        try:
            log_file = tmp_path / "from-config.log"
            config = RuntimeConfig.from_dict(
                {"logging": {"level": "INFO", "file": str(log_file)}}
            )
            setup_logging(config=config)

            assert root.level == logging.INFO
            file_handlers = [h for h in root.handlers if isinstance(h, logging.FileHandler)]
            assert [h.baseFilename for h in file_handlers] == [str(log_file)]
        finally:
            for handler in root.handlers:
                handler.close()
            root.handlers = saved_handlers
            root.setLevel(saved_level)

    def test_uses_default_config(self, clean_env):
        root = logging.getLogger()
        saved_handlers, saved_level = list(root.handlers), root.level
        root.handlers = []
        try:
            set_default_config(RuntimeConfig(log_level="ERROR"))
            setup_logging()

            assert root.level == logging.ERROR
            assert not any(isinstance(h, logging.FileHandler) for h in root.handlers)
        finally:
            for handler in root.handlers:
                handler.close()
            root.handlers = saved_handlers
            root.setLevel(saved_level)
