from __future__ import annotations

from pathlib import Path

import pytest

from phaselock.configuration import CONFIG_ENV_VAR, load_cli_config, load_project_config

from tests.helpers import write_pyproject


def test_load_project_config_reads_tool_section(tmp_path: Path) -> None:
    write_pyproject(
        tmp_path,
        """
        [tool.phaselock.logging]
        level = "debug"
        """,
    )

    loaded = load_project_config(tmp_path)

    assert loaded is not None
    payload, source = loaded
    assert payload == {"logging": {"level": "debug"}}
    assert source == (tmp_path / "pyproject.toml").resolve()


def test_load_project_config_ignores_other_tools(tmp_path: Path) -> None:
    write_pyproject(
        tmp_path,
        """
        [tool.other]
        value = 1
        """,
    )

    assert load_project_config(tmp_path) is None
    assert load_project_config(tmp_path / "settings.json") is None


def test_load_cli_config_prefers_explicit_path(
    tmp_path: Path, isolated_project: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    explicit = tmp_path / "explicit"
    explicit.mkdir()
    write_pyproject(explicit, '[tool.phaselock]\nengine_config = "a.yaml"\n')
    env_dir = tmp_path / "env"
    env_dir.mkdir()
    write_pyproject(env_dir, '[tool.phaselock]\nengine_config = "b.yaml"\n')
    monkeypatch.setenv(CONFIG_ENV_VAR, str(env_dir))

    assert load_cli_config(explicit / "pyproject.toml")["engine_config"] == "a.yaml"
    assert load_cli_config()["engine_config"] == "b.yaml"


def test_load_cli_config_falls_back_to_cwd(isolated_project: Path) -> None:
    write_pyproject(isolated_project, '[tool.phaselock.engine.anchor]\nphase = 5.0\n')

    config = load_cli_config()

    assert config["engine"] == {"anchor": {"phase": 5.0}}
    assert config["_config_path"] == str((isolated_project / "pyproject.toml").resolve())


def test_load_cli_config_without_project(isolated_project: Path) -> None:
    assert load_cli_config() == {"_config_path": None}
