"""Tests for MCP server configuration merging."""

import json
from unittest.mock import patch

import pytest
from kiro_agent_cli.bundles.mcp_merger import MCPConfigMerger
from kiro_agent_cli.bundles.mcp_merger import default_conflict_resolver
from kiro_agent_cli.bundles.mcp_merger import prompt_on_conflict
from kiro_agent_cli.bundles.mcp_merger import skip_on_conflict
from kiro_agent_cli.bundles.schema import MCPServerConfig


@pytest.fixture
def mcp_config_path(tmp_path):
    return tmp_path / "settings" / "mcp.json"


@pytest.fixture
def merger():
    return MCPConfigMerger(resolver=skip_on_conflict)


def write_config(path, config):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config))


def read_config(path):
    return json.loads(path.read_text())


def test_creates_config_when_missing(merger, mcp_config_path):
    merger.merge_servers(mcp_config_path, [MCPServerConfig(name="test-server", command="node", args=["server.js"])])

    config = read_config(mcp_config_path)
    assert config == {
        "mcpServers": {"test-server": {"name": "test-server", "command": "node", "args": ["server.js"]}}
    }


def test_merges_into_existing_config(merger, mcp_config_path):
    write_config(
        mcp_config_path,
        {"mcpServers": {"existing-server": {"name": "existing-server", "command": "python", "args": ["x.py"]}}},
    )

    outcome = merger.merge_servers(mcp_config_path, [MCPServerConfig(name="new-server", command="node", args=[])])

    config = read_config(mcp_config_path)
    assert set(config["mcpServers"]) == {"existing-server", "new-server"}
    assert outcome.added == ["new-server"]


def test_preserves_env_only_when_present(merger, mcp_config_path):
    merger.merge_servers(
        mcp_config_path,
        [
            MCPServerConfig(name="with-env", command="node", args=[], env={"API_KEY": "secret"}),
            MCPServerConfig(name="without-env", command="node", args=[]),
        ],
    )

    servers = read_config(mcp_config_path)["mcpServers"]
    assert servers["with-env"]["env"] == {"API_KEY": "secret"}
    assert "env" not in servers["without-env"]


def test_conflict_non_interactive_keeps_existing_entry(merger, mcp_config_path):
    """Test a name collision with the skip policy leaves the entry unchanged and does not raise."""
    existing = {"name": "shared", "command": "python", "args": ["original.py"], "env": {"KEEP": "1"}}
    write_config(mcp_config_path, {"mcpServers": {"shared": existing}})

    outcome = merger.merge_servers(mcp_config_path, [MCPServerConfig(name="shared", command="node", args=["new.js"])])

    assert read_config(mcp_config_path)["mcpServers"]["shared"] == existing
    assert outcome.skipped == ["shared"]
    assert outcome.added == []


def test_conflict_decisions_are_per_entry(mcp_config_path):
    """Test a single merge can overwrite some conflicts and skip others."""
    write_config(
        mcp_config_path,
        {
            "mcpServers": {
                "a": {"name": "a", "command": "old", "args": []},
                "b": {"name": "b", "command": "old", "args": []},
            }
        },
    )
    decisions = []

    def resolver(name, kind):
        decisions.append((name, kind))
        return name == "a"

    outcome = MCPConfigMerger(resolver=resolver).merge_servers(
        mcp_config_path,
        [
            MCPServerConfig(name="a", command="new", args=[]),
            MCPServerConfig(name="b", command="new", args=[]),
            MCPServerConfig(name="c", command="new", args=[]),
        ],
    )

    servers = read_config(mcp_config_path)["mcpServers"]
    assert servers["a"]["command"] == "new"
    assert servers["b"]["command"] == "old"
    assert servers["c"]["command"] == "new"
    assert decisions == [("a", "MCP server"), ("b", "MCP server")]
    assert outcome.overwritten == ["a"]
    assert outcome.skipped == ["b"]
    assert outcome.added == ["c"]


def test_invalid_json_is_replaced(merger, mcp_config_path):
    """Test a corrupt document is treated as empty so the install can heal it."""
    mcp_config_path.parent.mkdir(parents=True)
    mcp_config_path.write_text("{ this is not json")

    merger.merge_servers(mcp_config_path, [MCPServerConfig(name="fresh", command="node", args=[])])

    assert set(read_config(mcp_config_path)["mcpServers"]) == {"fresh"}


def test_missing_server_map_is_added_and_other_keys_kept(merger, mcp_config_path):
    write_config(mcp_config_path, {"otherSetting": True})

    merger.merge_servers(mcp_config_path, [MCPServerConfig(name="s", command="node", args=[])])

    config = read_config(mcp_config_path)
    assert config["otherSetting"] is True
    assert "s" in config["mcpServers"]


def test_remove_servers(merger, mcp_config_path):
    write_config(
        mcp_config_path,
        {
            "mcpServers": {
                "keep": {"name": "keep", "command": "a", "args": []},
                "drop": {"name": "drop", "command": "b", "args": []},
            }
        },
    )

    removed = merger.remove_servers(mcp_config_path, ["drop", "never-existed"])

    assert removed == ["drop"]
    assert set(read_config(mcp_config_path)["mcpServers"]) == {"keep"}


def test_remove_servers_without_file_is_noop(merger, mcp_config_path):
    assert merger.remove_servers(mcp_config_path, ["anything"]) == []
    assert not mcp_config_path.exists()


def test_remove_servers_without_map_does_not_write(merger, mcp_config_path):
    write_config(mcp_config_path, {"otherSetting": True})
    before = mcp_config_path.read_text()

    assert merger.remove_servers(mcp_config_path, ["anything"]) == []
    assert mcp_config_path.read_text() == before


def test_remove_servers_leaves_corrupt_file_alone(merger, mcp_config_path):
    mcp_config_path.parent.mkdir(parents=True)
    mcp_config_path.write_text("garbage")

    assert merger.remove_servers(mcp_config_path, ["anything"]) == []
    assert mcp_config_path.read_text() == "garbage"


def test_list_servers(merger, mcp_config_path):
    assert merger.list_servers(mcp_config_path) == {}

    merger.merge_servers(mcp_config_path, [MCPServerConfig(name="s", command="node", args=["x"])])

    assert merger.list_servers(mcp_config_path)["s"]["args"] == ["x"]


def test_prompt_on_conflict_asks_with_name():
    with patch("kiro_agent_cli.bundles.mcp_merger.Confirm.ask", return_value=True) as mock_ask:
        assert prompt_on_conflict("shared", "MCP server") is True

    prompt = mock_ask.call_args[0][0]
    assert "shared" in prompt
    assert mock_ask.call_args.kwargs["default"] is False


def test_default_resolver_skips_without_tty():
    with patch("kiro_agent_cli.bundles.mcp_merger.sys.stdin") as mock_stdin:
        mock_stdin.isatty.return_value = False
        assert default_conflict_resolver() is skip_on_conflict

        mock_stdin.isatty.return_value = True
        assert default_conflict_resolver() is prompt_on_conflict


def test_merger_without_resolver_never_prompts_when_not_a_tty(mcp_config_path):
    write_config(mcp_config_path, {"mcpServers": {"shared": {"name": "shared", "command": "old", "args": []}}})

    with (
        patch("kiro_agent_cli.bundles.mcp_merger.sys.stdin") as mock_stdin,
        patch("kiro_agent_cli.bundles.mcp_merger.Confirm.ask") as mock_ask,
    ):
        mock_stdin.isatty.return_value = False
        MCPConfigMerger().merge_servers(mcp_config_path, [MCPServerConfig(name="shared", command="new", args=[])])

    mock_ask.assert_not_called()
    assert read_config(mcp_config_path)["mcpServers"]["shared"]["command"] == "old"


def test_remove_servers_handles_null_entries(merger, mcp_config_path):
    write_config(mcp_config_path, {"mcpServers": {"a": None, "b": {"name": "b", "command": "x", "args": []}}})

    removed = merger.remove_servers(mcp_config_path, ["a"])

    assert removed == ["a"]
    assert set(read_config(mcp_config_path)["mcpServers"]) == {"b"}


def test_remove_servers_with_repeated_name(merger, mcp_config_path):
    write_config(mcp_config_path, {"mcpServers": {"a": {"name": "a", "command": "x", "args": []}}})

    assert merger.remove_servers(mcp_config_path, ["a", "a"]) == ["a"]
    assert read_config(mcp_config_path)["mcpServers"] == {}
