"""
Shared test fixtures and configuration.

No test touches a real package manager, git or npm: the registry is
filled with MockAdapters plus a fake git adapter that "clones" by
writing a small Levanter-shaped checkout.
"""

from __future__ import annotations

import json
import re
from pathlib import Path

import pytest

from levboot.adapters.base import Adapter, ExecutionContext
from levboot.adapters.mock import MockAdapter
from levboot.adapters.registry import AdapterRegistry
from levboot.core.engine.runner import InstallAborted, StepContext
from levboot.core.models.action import Receipt
from levboot.core.models.settings import AutostartSettings, InstallerConfig
from levboot.core.services.prober import EnvironmentProber

TERMUX_TOOLS = {
    "pkg",
    "git",
    "node",
    "npm",
    "yarn",
    "pgrep",
    "termux-setup-storage",
    "termux-wake-lock",
    "termux-wake-unlock",
}

PACKAGE_JSON = {
    "name": "levanter",
    "dependencies": {"baileys": "^6.0.0", "sqlite3": "^5.1.6"},
    "optionalDependencies": {"sqlite3": "^5.1.6"},
}

TEMPLATE = "A=1\nB=2\nC=3\n"


# ── Fakes ───────────────────────────────────────────────────────


class FakeDevice:
    """A PATH whose contents tests can change mid-run."""

    def __init__(self, tools: set[str] | None = None):
        self.tools = set(TERMUX_TOOLS if tools is None else tools)

    def which(self, tool: str) -> str | None:
        return f"/usr/bin/{tool}" if tool in self.tools else None

    def prober(self) -> EnvironmentProber:
        return EnvironmentProber(which=self.which)


class ScriptedPrompter:
    """Answers prompts from a dict keyed by config key name.

    Unknown keys get the prompt's default. Confirmations are popped in
    order; when the list runs out the default is used.
    """

    _KEY = re.compile(r"Enter (?:value for )?([A-Za-z_][A-Za-z0-9_]*)")

    def __init__(
        self,
        answers: dict[str, str] | None = None,
        confirms: list[bool] | None = None,
        abort_on: str | None = None,
    ):
        self.answers = dict(answers or {})
        self.confirms = list(confirms or [])
        self.abort_on = abort_on
        self.asked: list[str] = []
        self.confirmed: list[str] = []

    def ask(self, message: str, default: str = "") -> str:
        self.asked.append(message)
        m = self._KEY.match(message)
        key = m.group(1) if m else message
        if key == self.abort_on:
            raise InstallAborted(message)
        return self.answers.get(key, default)

    def confirm(self, message: str, default: bool = False) -> bool:
        self.confirmed.append(message)
        if self.confirms:
            return self.confirms.pop(0)
        return default


class RecordingReporter:
    def __init__(self):
        self.lines: list[tuple[str, str]] = []

    def info(self, message: str) -> None:
        self.lines.append(("info", message))

    def warn(self, message: str) -> None:
        self.lines.append(("warn", message))

    def error(self, message: str) -> None:
        self.lines.append(("error", message))

    def echo(self, message: str = "") -> None:
        self.lines.append(("echo", message))

    def messages(self, level: str) -> list[str]:
        return [msg for lvl, msg in self.lines if lvl == level]

    @property
    def text(self) -> str:
        return "\n".join(msg for _, msg in self.lines)


class FakeGitAdapter(Adapter):
    """Clones by writing a tiny checkout into ``dest``."""

    def __init__(
        self,
        files: dict[str, str] | None = None,
        fail: bool = False,
        create: bool = True,
    ):
        self.files = files if files is not None else {
            "package.json": json.dumps(PACKAGE_JSON, indent=2),
            "config.env.example": TEMPLATE,
        }
        self.fail = fail
        self.create = create
        self.clones: list[str] = []

    @property
    def name(self) -> str:
        return "git"

    def is_available(self) -> bool:
        return True

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        dest = Path(context.params["dest"])
        self.clones.append(str(dest))
        if self.fail:
            return Receipt.failure(
                adapter="git",
                action_id=context.action.id,
                error="fatal: unable to access repository",
                return_code=128,
            )
        if self.create:
            dest.mkdir(parents=True)
            for name, content in self.files.items():
                (dest / name).write_text(content)
        return Receipt.success(adapter="git", action_id=context.action.id)


# ── Fixtures ────────────────────────────────────────────────────


@pytest.fixture
def project_root() -> Path:
    return Path(__file__).parent.parent


@pytest.fixture
def home(tmp_path: Path, monkeypatch) -> Path:
    """A throwaway $HOME so nothing lands in the real one."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("LEVBOOT_CONFIG", raising=False)
    return home


@pytest.fixture
def config(tmp_path: Path) -> InstallerConfig:
    return InstallerConfig(
        install_dir=str(tmp_path / "levanter"),
        state_dir=str(tmp_path / "state"),
        termux_prefix=str(tmp_path / "prefix"),
        autostart=AutostartSettings(startup_file=str(tmp_path / "home" / ".bashrc")),
    )


@pytest.fixture
def device() -> FakeDevice:
    return FakeDevice()


@pytest.fixture
def git() -> FakeGitAdapter:
    return FakeGitAdapter()


@pytest.fixture
def adapters(git: FakeGitAdapter) -> dict[str, Adapter]:
    return {
        "packages": MockAdapter(adapter_name="packages"),
        "node": MockAdapter(adapter_name="node"),
        "shell": MockAdapter(adapter_name="shell"),
        "git": git,
    }


@pytest.fixture
def registry(adapters: dict[str, Adapter]) -> AdapterRegistry:
    registry = AdapterRegistry()
    for adapter in adapters.values():
        registry.register(adapter)
    return registry


@pytest.fixture
def prompter() -> ScriptedPrompter:
    return ScriptedPrompter()


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def step_ctx(config, registry, device, prompter, reporter) -> StepContext:
    return StepContext(
        config=config,
        registry=registry,
        prober=device.prober(),
        prompter=prompter,
        reporter=reporter,
    )
