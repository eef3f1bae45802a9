"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from thumbtree.config import (
    ConfigError,
    ConfigManager,
    ThumbtreeConfig,
    flatten_for_env,
    resolve_with_precedence,
)


def _fresh_manager(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ConfigManager:
    monkeypatch.setenv("HOME", str(tmp_path))
    return ConfigManager()


def test_ensure_exists_creates_default_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    path = manager.ensure_exists()

    assert path == tmp_path / ".thumbtree" / "config.yaml"
    text = path.read_text(encoding="utf-8")
    assert "thumbtree configuration file" in text
    assert "Last updated:" in text

    config = manager.load(include_env=False)
    assert isinstance(config, ThumbtreeConfig)
    assert config.generation.thumbnail_sizes == [100, 200, 300, 640, 800, 1024, 1920]
    assert config.generation.hidden_dirs == ["0-sterne", "raw"]


def test_resolve_with_precedence_respects_order(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.save({"generation": {"max_workers": 2, "hidden_dirs": ["skip"]}})

    env = {"THUMBTREE__GENERATION__MAX_WORKERS": "3", "THUMBTREE__LOGGING__LEVEL": "INFO"}
    cli = {"generation.max_workers": 5}

    config = manager.load(cli_overrides=cli, env_overrides=env)

    assert config.generation.hidden_dirs == ["skip"]
    assert config.logging.level == "INFO"
    # CLI overrides take precedence over environment
    assert config.generation.max_workers == 5


def test_environment_lists_are_parsed_as_yaml(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    env = {
        "THUMBTREE__GENERATION__THUMBNAIL_SIZES": "[64, 128]",
        "THUMBTREE__GENERATION__THUMBNAIL_QUALITIES": "[70, 80]",
    }
    config = manager.load(env_overrides=env)

    assert config.generation.renditions() == [(64, 70), (128, 80)]


def test_invalid_yaml_raises_config_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.config_path.write_text("- not-a-mapping", encoding="utf-8")

    with pytest.raises(ConfigError):
        manager.load()


def test_flatten_for_env_round_trips_defaults() -> None:
    flat = flatten_for_env(ThumbtreeConfig())

    assert flat["THUMBTREE__GENERATION__GENERATE_THUMBNAILS"] == "True"
    assert flat["THUMBTREE__GENERATION__MAX_WORKERS"] == "null"
    assert flat["THUMBTREE__LOGGING__LEVEL"] == "WARNING"


@pytest.mark.parametrize(
    "overrides",
    [
        {"generation": {"thumbnail_sizes": [100, 200], "thumbnail_qualities": [75]}},
        {"generation": {"thumbnail_sizes": [0], "thumbnail_qualities": [75]}},
        {"generation": {"thumbnail_sizes": [800, 800], "thumbnail_qualities": [75, 88]}},
        {"generation": {"thumbnail_sizes": [100], "thumbnail_qualities": [101]}},
        {"generation": {"max_workers": 0}},
        {"generation": {"unknown_option": True}},
    ],
)
def test_resolve_with_precedence_invalid_value_raises(overrides: dict) -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(defaults=ThumbtreeConfig(), file_overrides=overrides)


def test_extension_dots_are_stripped() -> None:
    config = resolve_with_precedence(
        defaults=ThumbtreeConfig(),
        cli_overrides={"generation.image_extensions": [".jpeg", "JPG"]},
    )

    assert config.generation.image_extensions == ["jpeg", "JPG"]


def test_repeated_thumbnail_size_is_rejected() -> None:
    with pytest.raises(ConfigError, match="must not repeat"):
        resolve_with_precedence(
            defaults=ThumbtreeConfig(),
            cli_overrides={
                "generation.thumbnail_sizes": [100, 800, 100],
                "generation.thumbnail_qualities": [75, 88, 90],
            },
        )
