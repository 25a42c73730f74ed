from __future__ import annotations

import pytest
from pydantic import ValidationError

from quill import main as main_mod
from quill.main import build_session_settings, main, parse_args


def test_parse_args_flags_and_values():
    opts = parse_args(["-m", "command-r", "--temperature=0.2", "--max-tokens", "50", "--no-history", "-s"])
    assert opts == {
        "model": "command-r",
        "temperature": "0.2",
        "max_tokens": "50",
        "no_history": True,
        "single_message": True,
    }


@pytest.mark.parametrize(
    "argv",
    [["--bogus"], ["-m"], ["stray"], ["--no-history=yes"]],
)
def test_parse_args_rejects_bad_input(argv):
    with pytest.raises(ValueError):
        parse_args(argv)


def test_cli_overrides_settings_file():
    settings = {"api": {"model": "from-yaml"}, "session": {"temperature": 0.1, "max_tokens": 10}}
    s = build_session_settings({"model": "from-cli", "max_tokens": "20"}, settings)
    assert (s.model, s.temperature, s.max_tokens) == ("from-cli", 0.1, 20)


def test_settings_file_overrides_environment_defaults(monkeypatch):
    monkeypatch.setattr(main_mod, "DEFAULT_MODEL", "env-model")
    s = build_session_settings({}, {"api": {"model": "yaml-model"}, "session": {"model_type": "generate"}})
    assert s.model == "yaml-model"
    assert s.model_type == "generate"
    assert build_session_settings({}, {}).model == "env-model"


def test_history_can_be_disabled_from_either_source():
    assert build_session_settings({"no_history": True}, {}).include_history is False
    assert build_session_settings({}, {"session": {"history": False}}).include_history is False
    assert build_session_settings({}, {}).include_history is True


def test_out_of_range_temperature_is_rejected():
    with pytest.raises(ValidationError):
        build_session_settings({"temperature": "3"}, {})


def test_help_and_version(capsys):
    main(["--help"])
    assert "Usage: quill" in capsys.readouterr().out
    main(["-V"])
    assert capsys.readouterr().out.strip() == "quill 1.0.0"


def test_unknown_flag_prints_usage(capsys):
    main(["--nope"])
    out = capsys.readouterr().out
    assert "unknown option: --nope" in out
    assert "Usage: quill" in out
