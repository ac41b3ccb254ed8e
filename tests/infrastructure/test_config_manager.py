#!/usr/bin/env python3
"""Tests for the ConfigManager module."""

import os
import threading
from pathlib import Path

import pytest
import yaml

from filesieve.core.constants import ErrorCode
from filesieve.infrastructure.config_manager import (
    ConfigError,
    ConfigManager,
    ConfigSource,
    EngineSettings,
    get_config_manager,
    load_filter_config,
    set_global_config,
)
from filesieve.rules.models import FileMetadata, FilterConfig


class TestConfigSource:
    """Tests for ConfigSource enum."""

    def test_precedence_order(self):
        """Test config source precedence ordering."""
        sources = [
            ConfigSource.COMPILED_DEFAULTS,
            ConfigSource.USER_CONFIG,
            ConfigSource.ENVIRONMENT,
            ConfigSource.RUNTIME,
        ]
        for i in range(len(sources) - 1):
            assert sources[i].value < sources[i + 1].value


class TestConfigError:
    """Tests for ConfigError exception."""

    def test_config_error_creation(self):
        error = ConfigError("Test error", ErrorCode.CONFLICT)
        assert error.message == "Test error"
        assert error.error_code == ErrorCode.CONFLICT
        assert str(error) == "Test error"

    def test_config_error_default_code(self):
        assert ConfigError("Test error").error_code == ErrorCode.INVALID_INPUT


class TestConfigManager:
    """Tests for ConfigManager class."""

    @pytest.fixture
    def manager(self):
        return ConfigManager(load_environment=False)

    @pytest.fixture
    def settings_file(self, temp_dir):
        path = temp_dir / "filesieve.yaml"
        path.write_text(
            "filesieve:\n"
            "  engine:\n"
            "    batch_size: 250\n"
            "  verification:\n"
            "    threshold: 0.9\n"
        )
        return path

    def test_defaults(self, manager):
        """Test compiled defaults are available."""
        assert manager.get("filesieve.engine.batch_size") == 100
        assert manager.get("filesieve.engine.batch_threshold") == 1000
        assert manager.get("filesieve.engine.max_workers") == 1
        assert manager.get("filesieve.verification.threshold") == 0.95
        assert manager.get("filesieve.logging.level") == "INFO"

    def test_get_missing_key(self, manager):
        assert manager.get("filesieve.nope") is None
        assert manager.get("filesieve.nope", default=7) == 7
        assert manager.get("filesieve.engine.batch_size.deeper", default="x") == "x"

    def test_load_file(self, manager, settings_file):
        manager.load_file(str(settings_file))
        assert manager.get("filesieve.engine.batch_size") == 250
        assert manager.get("filesieve.engine.batch_threshold") == 1000

    def test_constructor_loads_file(self, settings_file):
        manager = ConfigManager(config_file=str(settings_file), load_environment=False)
        assert manager.get("filesieve.verification.threshold") == 0.9

    def test_missing_file(self, manager, temp_dir):
        with pytest.raises(ConfigError) as exc_info:
            manager.load_file(str(temp_dir / "missing.yaml"))
        assert exc_info.value.error_code == ErrorCode.NOT_FOUND

    def test_invalid_yaml(self, manager, temp_dir):
        path = temp_dir / "bad.yaml"
        path.write_text("filesieve: [unclosed\n")
        with pytest.raises(ConfigError) as exc_info:
            manager.load_file(str(path))
        assert exc_info.value.error_code == ErrorCode.INVALID_INPUT

    def test_non_mapping_yaml(self, manager, temp_dir):
        path = temp_dir / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError):
            manager.load_file(str(path))

    def test_environment_overrides_file(self, settings_file, monkeypatch):
        monkeypatch.setenv("FILESIEVE_ENGINE__BATCH_SIZE", "500")
        manager = ConfigManager(config_file=str(settings_file))
        assert manager.get("filesieve.engine.batch_size") == 500

    def test_runtime_overrides_environment(self, monkeypatch):
        monkeypatch.setenv("FILESIEVE_ENGINE__BATCH_SIZE", "500")
        manager = ConfigManager()
        manager.set("filesieve.engine.batch_size", 42)
        assert manager.get("filesieve.engine.batch_size") == 42

    def test_environment_ignored_when_disabled(self, monkeypatch):
        monkeypatch.setenv("FILESIEVE_ENGINE__BATCH_SIZE", "500")
        assert ConfigManager(load_environment=False).get("filesieve.engine.batch_size") == 100

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("true", True),
            ("YES", True),
            ("false", False),
            ("no", False),
            ("12", 12),
            ("0.5", 0.5),
            ("DEBUG", "DEBUG"),
        ],
    )
    def test_parse_env_value(self, manager, raw, expected):
        assert manager._parse_env_value(raw) == expected

    def test_environment_sections(self, monkeypatch):
        monkeypatch.setenv("FILESIEVE_VERIFICATION__TARGET_RATE", "2500.0")
        monkeypatch.setenv("FILESIEVE_LOGGING__LEVEL", "DEBUG")
        manager = ConfigManager()
        assert manager.get("filesieve.verification.target_rate") == 2500.0
        assert manager.get("filesieve.logging.level") == "DEBUG"

    def test_load_dict(self, manager):
        data = {"filesieve": {"engine": {"max_workers": 4}}}
        manager.load_dict(data)
        data["filesieve"]["engine"]["max_workers"] = 99
        assert manager.get("filesieve.engine.max_workers") == 4

    def test_get_all_merges(self, manager, settings_file):
        manager.load_file(str(settings_file))
        manager.set("filesieve.engine.max_workers", 3)
        merged = manager.get_all()
        assert merged["filesieve"]["engine"] == {
            "batch_size": 250,
            "batch_threshold": 1000,
            "max_workers": 3,
        }

    def test_clear_source(self, manager):
        manager.set("filesieve.engine.batch_size", 5)
        manager.clear(ConfigSource.RUNTIME)
        assert manager.get("filesieve.engine.batch_size") == 100

    def test_clear_all_keeps_defaults(self, manager, settings_file):
        manager.load_file(str(settings_file))
        manager.set("filesieve.engine.batch_size", 5)
        manager.clear()
        assert manager.get("filesieve.engine.batch_size") == 100
        manager.clear(ConfigSource.COMPILED_DEFAULTS)
        assert manager.get("filesieve.engine.batch_size") == 100

    def test_concurrent_set_and_get(self, manager):
        errors = []

        def writer(n):
            try:
                for i in range(100):
                    manager.set(f"filesieve.custom.key{n}", i)
                    manager.get(f"filesieve.custom.key{n}")
            except Exception as e:  # pragma: no cover
                errors.append(e)

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert all(manager.get(f"filesieve.custom.key{n}") == 99 for n in range(5))


class TestGlobalConfig:
    """Tests for the global manager."""

    def test_singleton(self):
        assert get_config_manager() is get_config_manager()

    def test_set_global_config(self):
        manager = ConfigManager(load_environment=False)
        set_global_config(manager)
        assert get_config_manager() is manager
        set_global_config(None)
        assert get_config_manager() is not manager


class TestEngineSettings:
    """Tests for EngineSettings."""

    def test_defaults(self):
        settings = EngineSettings()
        assert settings.batch_size == 100
        assert settings.batch_threshold == 1000
        assert settings.max_workers == 1
        assert settings.threshold == 0.95
        assert settings.target_rate == 10000.0

    def test_from_config(self, monkeypatch):
        monkeypatch.setenv("FILESIEVE_ENGINE__MAX_WORKERS", "4")
        manager = ConfigManager()
        manager.set("filesieve.verification.threshold", 0.8)
        settings = EngineSettings.from_config(manager)
        assert settings.max_workers == 4
        assert settings.threshold == 0.8
        assert settings.batch_size == 100

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"batch_size": 0},
            {"batch_threshold": "1000"},
            {"max_workers": -2},
            {"threshold": 1.5},
            {"threshold": "high"},
            {"target_rate": 0},
            {"target_rate": True},
            {"log_level": "LOUD"},
            {"log_level": 10},
        ],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ConfigError):
            EngineSettings(**kwargs)

    def test_invalid_from_config(self):
        manager = ConfigManager(load_environment=False)
        manager.set("filesieve.engine.batch_size", -1)
        with pytest.raises(ConfigError):
            EngineSettings.from_config(manager)

    def test_log_level_from_config(self, monkeypatch):
        monkeypatch.setenv("FILESIEVE_LOGGING__LEVEL", "debug")
        settings = EngineSettings.from_config(ConfigManager())
        assert settings.log_level == "debug"

    def test_frozen(self):
        with pytest.raises(AttributeError):
            EngineSettings().batch_size = 5


class TestLoadFilterConfig:
    """Tests for YAML rule-set files."""

    def test_filters_key(self, rules_file):
        config = load_filter_config(rules_file)
        assert config == FilterConfig(
            include=("**/*.ts", "!**/*.test.ts"),
            exclude=("**/node_modules/**",),
            max_size=10000,
            content_types=("text/*",),
        )

    def test_bare_rule_set(self, temp_dir):
        path = temp_dir / "bare.yaml"
        path.write_text(yaml.safe_dump({"include": ["*.py"], "min_size": 1}))
        assert load_filter_config(str(path)) == FilterConfig(include=("*.py",), min_size=1)

    def test_invalid_rule_set(self, temp_dir):
        path = temp_dir / "bad.yaml"
        path.write_text(yaml.safe_dump({"filters": {"minSize": 10, "maxSize": 1}}))
        with pytest.raises(ConfigError) as exc_info:
            load_filter_config(path)
        assert exc_info.value.error_code == ErrorCode.CONFLICT

    def test_filters_not_mapping(self, temp_dir):
        path = temp_dir / "list.yaml"
        path.write_text(yaml.safe_dump({"filters": ["*.py"]}))
        with pytest.raises(ConfigError):
            load_filter_config(path)

    def test_missing_file(self, temp_dir):
        with pytest.raises(ConfigError) as exc_info:
            load_filter_config(Path(temp_dir) / "nope.yaml")
        assert exc_info.value.error_code == ErrorCode.NOT_FOUND

    def test_loaded_config_runs(self, rules_file, engine):
        result = engine.filter(
            load_filter_config(rules_file),
            [
                FileMetadata("src/a.ts", 10, "text/typescript"),
                FileMetadata("src/a.test.ts", 10, "text/typescript"),
                FileMetadata("node_modules/x/a.ts", 10, "text/typescript"),
            ],
        )
        assert result.included == ["src/a.ts"]
        assert os.path.basename(result.excluded[0]) == "a.test.ts"
