"""Tests for configuration loading."""

import json

import pytest

from folio.config import AppConfig, config_from_dict, load_config, resolve_path
from folio.errors import ConfigError


def test_defaults():
    cfg = AppConfig()

    assert cfg.content.roots == ["content"]
    assert ".md" in cfg.content.file_extensions
    assert cfg.parsing.derive_defaults is True
    assert cfg.build.state_path == ".folio/state.json"
    assert cfg.build.workers == 4
    assert cfg.output.dir == "public"
    assert cfg.logging.level == "INFO"


def test_load_without_path_uses_defaults(monkeypatch):
    monkeypatch.delenv("FOLIO_CONFIG", raising=False)

    assert load_config() == AppConfig()


def test_load_yaml_merges_over_defaults(tmp_path):
    path = tmp_path / "folio.yaml"
    path.write_text(
        """
content:
  roots: [posts, pages]
build:
  workers: 2
""",
        encoding="utf-8",
    )

    cfg = load_config(path)

    assert cfg.content.roots == ["posts", "pages"]
    assert cfg.content.file_extensions == AppConfig().content.file_extensions
    assert cfg.build.workers == 2
    assert cfg.build.state_path == ".folio/state.json"


def test_load_json(tmp_path):
    path = tmp_path / "folio.json"
    path.write_text(json.dumps({"output": {"dir": "site", "indent": None}}), encoding="utf-8")

    cfg = load_config(path)

    assert cfg.output.dir == "site"
    assert cfg.output.indent is None


def test_config_path_from_environment(tmp_path, monkeypatch):
    path = tmp_path / "folio.yaml"
    path.write_text("output:\n  dir: from-env\n", encoding="utf-8")
    monkeypatch.setenv("FOLIO_CONFIG", str(path))

    assert load_config().output.dir == "from-env"


def test_env_vars_are_expanded(monkeypatch):
    monkeypatch.setenv("FOLIO_STATE", "/var/lib/folio/state.json")
    monkeypatch.setenv("FOLIO_WORKERS", "8")

    cfg = config_from_dict({
        "build": {
            "state_path": "${FOLIO_STATE:-.folio/state.json}",
            "workers": "${FOLIO_WORKERS:-4}",
        },
        "output": {"dir": "${FOLIO_OUTPUT_UNSET:-public}"},
    })

    assert cfg.build.state_path == "/var/lib/folio/state.json"
    assert cfg.build.workers == 8
    assert cfg.output.dir == "public"


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


@pytest.mark.parametrize(
    "data, message",
    [
        ({"themes": {}}, "Unknown config sections"),
        ({"content": {"root": "x"}}, "Unknown keys in 'content'"),
        ({"build": {"workers": 0}}, "at least 1"),
        ({"build": {"workers": "many"}}, "integer"),
        ({"content": {"roots": []}}, "non-empty"),
        ({"content": {"file_extensions": ["md"]}}, "must start with"),
        ({"output": "public"}, "must be a mapping"),
    ],
)
def test_invalid_config(data, message):
    with pytest.raises(ConfigError) as exc_info:
        config_from_dict(data)

    assert message in str(exc_info.value)


def test_non_mapping_file(tmp_path):
    path = tmp_path / "folio.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(path)


def test_resolve_path(tmp_path):
    assert resolve_path("public", tmp_path) == (tmp_path / "public").resolve()
    assert resolve_path(str(tmp_path / "abs")) == tmp_path / "abs"
