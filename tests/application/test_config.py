"""Tests for layered configuration resolution."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from lexis.application.config import AppConfig, resolve_config
from lexis.domain.constants import DEFAULT_BATCH_SIZE, DEFAULT_SESSION_LIMIT


def test_defaults(mock_home):
    config = resolve_config()
    assert config.session_limit == DEFAULT_SESSION_LIMIT
    assert config.batch_size == DEFAULT_BATCH_SIZE
    assert config.learner_id == "default"
    assert config.data_dir == (mock_home / ".local/share/lexis").resolve()


def test_toml_file(mock_home):
    cfg = mock_home / ".config/lexis/config.toml"
    cfg.parent.mkdir(parents=True)
    cfg.write_text('batch_size = 7\nlearner_id = "kim"\n')

    config = resolve_config()

    assert config.batch_size == 7
    assert config.learner_id == "kim"


def test_env_overrides_toml(mock_home, monkeypatch):
    (mock_home / ".lexis.toml").write_text("batch_size = 7\n")
    monkeypatch.setenv("LEXIS_BATCH_SIZE", "9")

    assert resolve_config().batch_size == 9


def test_cli_overrides_win(mock_home, monkeypatch):
    monkeypatch.setenv("LEXIS_BATCH_SIZE", "9")
    config = resolve_config({"batch_size": 4, "learner_id": None})

    assert config.batch_size == 4
    assert config.learner_id == "default"


def test_data_dir_resolved(mock_home, tmp_path):
    config = resolve_config({"data_dir": tmp_path / "x" / ".." / "data"})
    assert config.data_dir == Path(tmp_path / "data").resolve()


@pytest.mark.parametrize("field", ["session_limit", "batch_size", "daily_goal"])
def test_non_positive_rejected(mock_home, field):
    with pytest.raises(ValidationError):
        AppConfig(**{field: 0})


def test_weak_list_size_bounds(mock_home):
    assert AppConfig(weak_list_size=0).weak_list_size == 0
    with pytest.raises(ValidationError):
        AppConfig(weak_list_size=-1)
