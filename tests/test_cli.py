"""
Tests for CLI commands: install, probe, history, and global options.
"""

import json
import textwrap
from pathlib import Path

import pytest
from click.testing import CliRunner

from levboot.adapters.mock import MockAdapter
from levboot.adapters.registry import AdapterRegistry
from levboot.main import cli

from conftest import FakeDevice, FakeGitAdapter


@pytest.fixture
def cfg_file(tmp_path: Path, home: Path) -> Path:
    path = tmp_path / "levboot.yml"
    path.write_text(textwrap.dedent(f"""\
        install_dir: {tmp_path / 'levanter'}
        state_dir: {tmp_path / 'state'}
        termux_prefix: {tmp_path / 'prefix'}
        autostart:
          startup_file: {home / '.bashrc'}
    """))
    return path


@pytest.fixture
def fake_tools(monkeypatch) -> dict:
    """Point the install use case at mock adapters and a fake PATH."""
    adapters = {
        "packages": MockAdapter(adapter_name="packages"),
        "node": MockAdapter(adapter_name="node"),
        "shell": MockAdapter(adapter_name="shell"),
        "git": FakeGitAdapter(),
    }

    def registry():
        r = AdapterRegistry()
        for adapter in adapters.values():
            r.register(adapter)
        return r

    device = FakeDevice(tools={"pkg", "git", "node", "npm", "yarn"})
    monkeypatch.setattr("levboot.core.use_cases.install.default_registry", registry)
    monkeypatch.setattr("levboot.core.use_cases.install.EnvironmentProber", device.prober)
    return adapters


class TestCLIGlobal:
    def test_help(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Install Levanter" in result.output
        for command in ("install", "probe", "history"):
            assert command in result.output

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_bad_config(self, tmp_path: Path, home: Path):
        bad = tmp_path / "levboot.yml"
        bad.write_text("profile: turbo\n")
        result = CliRunner().invoke(cli, ["--config", str(bad), "history"])
        assert result.exit_code == 1
        assert "Invalid installer configuration" in result.output


# ── Install Command Tests ───────────────────────────────────────────


class TestInstallCommand:
    def test_non_interactive(self, cfg_file, fake_tools, tmp_path):
        result = CliRunner().invoke(cli, ["--config", str(cfg_file), "install", "--yes"])
        assert result.exit_code == 0, result.output
        assert "[INFO]" in result.output
        assert "Next steps:" in result.output
        assert (tmp_path / "levanter" / "config.env").read_text() == "A=1\nB=2\nC=3\n"
        assert "node:global_install:pm2" in fake_tools["node"].action_ids

    def test_no_subcommand_runs_install(self, cfg_file, fake_tools, tmp_path):
        result = CliRunner().invoke(cli, ["--config", str(cfg_file)], input="\n2\n\n\n")
        assert result.exit_code == 0, result.output
        assert "Enter value for A (leave empty to keep default: 1)" in result.output
        assert (tmp_path / "levanter" / "config.env").read_text() == "A=1\nB=2\nC=3\n"

    def test_interactive_answers(self, cfg_file, fake_tools, tmp_path):
        result = CliRunner().invoke(cli, ["--config", str(cfg_file), "install"], input="\n9\n\nn\n")
        assert result.exit_code == 0, result.output
        assert (tmp_path / "levanter" / "config.env").read_text() == "A=1\nB=9\nC=3\n"
        assert "node:global_install:pm2" not in fake_tools["node"].action_ids

    def test_eof_at_prompt_aborts(self, cfg_file, fake_tools, tmp_path):
        result = CliRunner().invoke(cli, ["--config", str(cfg_file), "install"], input="")
        assert result.exit_code == 1
        assert "aborted" in result.output

    def test_clone_failure_exit_code(self, cfg_file, fake_tools):
        fake_tools["git"].fail = True
        result = CliRunner().invoke(cli, ["--config", str(cfg_file), "install", "--yes"])
        assert result.exit_code == 2
        assert "[ERROR]" in result.output
        assert "Next steps:" in result.output

    def test_json_report(self, cfg_file, fake_tools):
        result = CliRunner().invoke(cli, ["--config", str(cfg_file), "install", "--yes", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["status"] == "ok"
        assert data["exit_code"] == 0

    def test_json_report_with_warnings(self, cfg_file, fake_tools):
        fake_tools["packages"].set_failure("pkg:update", error="network down")
        result = CliRunner().invoke(cli, ["--config", str(cfg_file), "install", "--yes", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["status"] == "warnings"
        assert "[WARN] Package index update failed: network down." in result.stderr

    def test_json_report_after_fatal_step(self, cfg_file, fake_tools):
        fake_tools["git"].fail = True
        result = CliRunner().invoke(cli, ["--config", str(cfg_file), "install", "--yes", "--json"])
        assert result.exit_code == 2
        data = json.loads(result.stdout)
        assert data["fatal"]["step"] == "clone"
        assert "[ERROR]" in result.stderr

    def test_profile_override(self, cfg_file, fake_tools, tmp_path):
        result = CliRunner().invoke(cli, ["--config", str(cfg_file), "install", "--yes", "--profile", "native"])
        assert result.exit_code == 0
        manifest = json.loads((tmp_path / "levanter" / "package.json").read_text())
        assert "sqlite3" in manifest["dependencies"]

    def test_install_dir_override(self, cfg_file, fake_tools, tmp_path):
        other = tmp_path / "elsewhere"
        result = CliRunner().invoke(cli, ["--config", str(cfg_file), "install", "-y", "--install-dir", str(other)])
        assert result.exit_code == 0
        assert (other / "config.env").is_file()


# ── Probe & History Tests ───────────────────────────────────────────


class TestProbeCommand:
    def test_json(self, monkeypatch, home):
        tools = {"pkg", "git", "npm"}
        monkeypatch.setattr("levboot.core.services.prober.EnvironmentProber", FakeDevice(tools).prober)
        result = CliRunner().invoke(cli, ["probe", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["package_manager"] == "pkg"
        assert data["node_installer"] == "npm"
        present = {t["tool"] for t in data["tools"] if t["present"]}
        assert present == tools
        assert set(data["adapters"]) == {"shell", "packages", "git", "node"}

    def test_text(self, home):
        result = CliRunner().invoke(cli, ["probe"])
        assert result.exit_code == 0
        assert "Package manager:" in result.output
        assert "Adapters ready:" in result.output


class TestHistoryCommand:
    def test_empty(self, cfg_file):
        result = CliRunner().invoke(cli, ["--config", str(cfg_file), "history"])
        assert result.exit_code == 0
        assert "No install runs" in result.output

    def test_after_install(self, cfg_file, fake_tools):
        runner = CliRunner()
        runner.invoke(cli, ["--config", str(cfg_file), "install", "-y"])
        fake_tools["git"].fail = True
        runner.invoke(cli, ["--config", str(cfg_file), "install", "-y"])

        result = runner.invoke(cli, ["--config", str(cfg_file), "history"])
        assert result.exit_code == 0
        lines = result.output.strip().splitlines()
        assert len(lines) == 2
        assert "ok" in lines[0]
        assert "stopped at clone" in lines[1]

        data = json.loads(runner.invoke(cli, ["--config", str(cfg_file), "history", "--json", "-n", "1"]).output)
        assert len(data) == 1
        assert data[0]["exit_code"] == 2
