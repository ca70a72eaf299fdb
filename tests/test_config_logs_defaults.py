from __future__ import annotations

from emitkit.config import (
    DEFAULT_COPY_PAYLOADS,
    DEFAULT_LOGS_ENABLED,
    DEFAULT_LOGS_FORMAT,
    DEFAULT_LOGS_INCLUDE_PAYLOADS,
    DEFAULT_LOGS_MAX_FILE_BYTES,
    DEFAULT_LOGS_MAX_FILES,
    DEFAULT_LOGS_REDACTION,
    initialize_project_config,
    load_project_config,
    load_settings,
)


def test_init_config_contains_logs_defaults(tmp_path):
    config_root = initialize_project_config(workspace_dir=tmp_path)
    config = load_project_config(workspace_dir=tmp_path)
    config_text = (config_root / "config.toml").read_text(encoding="utf-8")

    assert "[emitter]" in config_text
    assert "copy_payloads = false" in config_text
    assert "[logs]" in config_text
    assert "enabled = true" in config_text
    assert 'format = "jsonl"' in config_text
    assert "max_file_bytes = 10485760" in config_text
    assert "max_files = 5" in config_text
    assert 'redaction = "default"' in config_text
    assert "include_payloads = false" in config_text

    assert config.copy_payloads is DEFAULT_COPY_PAYLOADS
    assert config.logs_enabled is DEFAULT_LOGS_ENABLED
    assert config.logs_format == DEFAULT_LOGS_FORMAT
    assert config.logs_max_file_bytes == DEFAULT_LOGS_MAX_FILE_BYTES
    assert config.logs_max_files == DEFAULT_LOGS_MAX_FILES
    assert config.logs_redaction == DEFAULT_LOGS_REDACTION
    assert config.logs_include_payloads is DEFAULT_LOGS_INCLUDE_PAYLOADS


def test_config_without_logs_table_uses_defaults(tmp_path):
    config_root = initialize_project_config(workspace_dir=tmp_path)
    (config_root / "config.toml").write_text(
        "\n".join(
            [
                "[emitter]",
                "copy_payloads = true",
                "",
            ]
        ),
        encoding="utf-8",
    )

    settings = load_settings(workspace_dir=tmp_path)
    assert settings.copy_payloads is True
    assert settings.logs_enabled is DEFAULT_LOGS_ENABLED
    assert settings.logs_format == DEFAULT_LOGS_FORMAT
    assert settings.logs_max_file_bytes == DEFAULT_LOGS_MAX_FILE_BYTES
    assert settings.logs_max_files == DEFAULT_LOGS_MAX_FILES
    assert settings.logs_redaction == DEFAULT_LOGS_REDACTION
    assert settings.logs_dir == config_root.resolve() / "logs"


def test_invalid_logs_values_fallback_to_defaults(tmp_path):
    config_root = initialize_project_config(workspace_dir=tmp_path)
    (config_root / "config.toml").write_text(
        "\n".join(
            [
                "[emitter]",
                'copy_payloads = "perhaps"',
                "",
                "[logs]",
                'enabled = "maybe"',
                'format = "xml"',
                "max_file_bytes = -1",
                "max_files = 0",
                'redaction = "unknown"',
                "include_payloads = []",
                "",
            ]
        ),
        encoding="utf-8",
    )

    settings = load_settings(workspace_dir=tmp_path)
    assert settings.copy_payloads is DEFAULT_COPY_PAYLOADS
    assert settings.logs_enabled is DEFAULT_LOGS_ENABLED
    assert settings.logs_format == DEFAULT_LOGS_FORMAT
    assert settings.logs_max_file_bytes == DEFAULT_LOGS_MAX_FILE_BYTES
    assert settings.logs_max_files == DEFAULT_LOGS_MAX_FILES
    assert settings.logs_redaction == DEFAULT_LOGS_REDACTION
    assert settings.logs_include_payloads is DEFAULT_LOGS_INCLUDE_PAYLOADS


def test_explicit_override_wins_over_project_config(tmp_path):
    initialize_project_config(workspace_dir=tmp_path)

    settings = load_settings(copy_payloads=True, workspace_dir=tmp_path)

    assert settings.copy_payloads is True
    assert settings.overrides == {"copy_payloads": True}
