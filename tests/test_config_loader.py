from __future__ import annotations

from pathlib import Path

import pytest

from phaselock_core.config import load_engine_config, merge_overrides


def test_packaged_defaults_are_loaded() -> None:
    config = load_engine_config()

    assert config["anchor"]["phase"] == 45.0
    assert [node["name"] for node in config["nodes"]] == ["qwen", "gemma", "deepseek", "os"]
    assert config["consensus"]["boundaries"] == "extended"


def test_explicit_path_wins(tmp_path: Path) -> None:
    target = tmp_path / "custom.yaml"
    target.write_text("anchor:\n  phase: 10.0\n", encoding="utf8")

    assert load_engine_config(target)["anchor"]["phase"] == 10.0


def test_missing_explicit_path_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_engine_config(tmp_path / "missing.yaml")


def test_search_paths_resolve_directories(tmp_path: Path) -> None:
    site = tmp_path / "site"
    site.mkdir()
    (site / "engine.yaml").write_text("drift:\n  wobble_threshold: 12.5\n", encoding="utf8")

    config = load_engine_config(search_paths=[tmp_path / "nowhere", site])

    assert config["drift"]["wobble_threshold"] == 12.5


def test_search_paths_fall_back_to_packaged_defaults(tmp_path: Path) -> None:
    config = load_engine_config(search_paths=[tmp_path])

    assert config["anchor"]["phase"] == 45.0


def test_invalid_yaml_raises_value_error(tmp_path: Path) -> None:
    target = tmp_path / "broken.yaml"
    target.write_text("anchor: [unterminated\n", encoding="utf8")

    with pytest.raises(ValueError):
        load_engine_config(target)


def test_non_mapping_payload_raises_type_error(tmp_path: Path) -> None:
    target = tmp_path / "list.yaml"
    target.write_text("- 1\n- 2\n", encoding="utf8")

    with pytest.raises(TypeError):
        load_engine_config(target)


def test_empty_file_yields_empty_mapping(tmp_path: Path) -> None:
    target = tmp_path / "empty.yaml"
    target.write_text("", encoding="utf8")

    assert dict(load_engine_config(target)) == {}


def test_merge_overrides_is_deep_and_read_only() -> None:
    base = {"drift": {"wobble_threshold": 30.0, "node_threshold": 45.0}, "nodes": [1, 2]}

    merged = merge_overrides(base, {"drift": {"node_threshold": 60.0}}, None, {"nodes": [3]})

    assert merged["drift"] == {"wobble_threshold": 30.0, "node_threshold": 60.0}
    assert merged["nodes"] == [3]
    assert base["drift"]["node_threshold"] == 45.0
    with pytest.raises(TypeError):
        merged["drift"] = {}  # type: ignore[index]
