"""
Tests for the YAML config layer.

CONFIG_PATH is redirected into tmp_path by the autouse fixture in conftest.
"""

import pytest
import yaml

from taskgrid import config
from taskgrid.settings import GatewayTimeouts


def write_config(text: str) -> None:
    config.CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
    config.CONFIG_PATH.write_text(text)


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_file(self):
        assert config.load_config() == {}

    def test_invalid_yaml(self):
        write_config("ui_session: [unclosed")
        assert config.load_config() == {}

    def test_non_mapping(self):
        write_config("- just\n- a list\n")
        assert config.load_config() == {}

    def test_save_and_load(self):
        config.save_config({"ui_session": "grid", "timeouts": {"focus": 1}})
        assert config.load_config() == {"ui_session": "grid", "timeouts": {"focus": 1}}


class TestTemplate:
    """Tests for write_config_template."""

    def test_writes_template(self):
        assert config.write_config_template() is True
        assert "shell_pane_width" in config.CONFIG_PATH.read_text()
        # Everything is commented out, so it loads as empty
        assert config.load_config() == {}

    def test_refuses_to_overwrite(self):
        write_config("ui_session: mine\n")
        assert config.write_config_template() is False
        assert config.get_ui_session() == "mine"

    def test_force_overwrites(self):
        write_config("ui_session: mine\n")
        assert config.write_config_template(force=True) is True
        assert config.get_ui_session() == "task-ui"

    def test_template_is_valid_yaml(self):
        assert yaml.safe_load(config.CONFIG_TEMPLATE) is None


class TestGetters:
    """Tests for the typed getters."""

    def test_defaults(self):
        assert config.get_timeouts() == GatewayTimeouts()
        assert config.get_shell_pane_width() == "50%"
        assert config.get_agent_command() == "claude"
        assert config.get_ui_session() == "task-ui"
        assert config.get_tmux_socket() is None

    def test_timeouts_override(self):
        write_config("timeouts:\n  focus: 0.2\n  setup: 60\n")
        timeouts = config.get_timeouts()
        assert timeouts.focus == 0.2
        assert timeouts.setup == 60.0
        assert timeouts.single == GatewayTimeouts().single

    def test_timeouts_ignore_bad_values(self):
        write_config("timeouts:\n  focus: fast\n  probe: -1\n  bogus: 3\n")
        assert config.get_timeouts() == GatewayTimeouts()

    @pytest.mark.parametrize("value,expected", [
        ("30%", "30%"),
        ("10%", "10%"),
        ("90%", "90%"),
        ("5%", "50%"),
        ("95%", "50%"),
        ("abc%", "50%"),
        ("40", "50%"),
        (40, "50%"),
        (None, "50%"),
    ])
    def test_normalize_pane_width(self, value, expected):
        assert config.normalize_pane_width(value) == expected

    def test_shell_pane_width_from_file(self):
        write_config("shell_pane_width: 35%\n")
        assert config.get_shell_pane_width() == "35%"

    def test_agent_command_from_file(self):
        write_config("agent_command: '  claude --continue '\n")
        assert config.get_agent_command() == "claude --continue"

    def test_blank_strings_use_defaults(self):
        write_config("agent_command: ''\nui_session: '   '\n")
        assert config.get_agent_command() == "claude"
        assert config.get_ui_session() == "task-ui"

    def test_tmux_socket_env_wins(self, monkeypatch):
        write_config("tmux_socket: from-file\n")
        assert config.get_tmux_socket() == "from-file"
        monkeypatch.setenv("TASKGRID_TMUX_SOCKET", "from-env")
        assert config.get_tmux_socket() == "from-env"
