"""
Installer settings — the validated shape of levboot.yml.

Every field has a default, so an absent config file means "install
Levanter into ~/levanter the way the safe profile does it".
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

DEFAULT_PACKAGES = [
    "git",
    "nodejs-lts",
    "python",
    "make",
    "clang",
    "pkg-config",
    "ffmpeg",
    "wget",
    "unzip",
    "tar",
]

# Extra toolchain for the native profile (compiles sqlite3 & friends)
NATIVE_PACKAGES = ["build-essential", "binutils", "libsqlite"]


class AutostartSettings(BaseModel):
    """Guard script and shell hook settings."""

    script_name: str = "autorun_levanter.sh"
    startup_file: str = "~/.bashrc"
    marker: str = "# levanter autorun (added by lev.sh)"
    process_pattern: str = "node .*levanter"
    pm2_name: str = "levanter"
    start_command: str = "npm start"

    def startup_path(self) -> Path:
        return Path(self.startup_file).expanduser()


class InstallerConfig(BaseModel):
    """Root installer configuration."""

    app_name: str = "levanter"
    repository: str = "https://github.com/lyfe00011/levanter.git"
    install_dir: str = "~/levanter"

    # safe: strip native deps, --ignore-scripts
    # native: full toolchain, keep every dependency, run lifecycle scripts
    profile: Literal["safe", "native"] = "safe"

    packages: list[str] = Field(default_factory=lambda: list(DEFAULT_PACKAGES))
    native_packages: list[str] = Field(default_factory=lambda: list(NATIVE_PACKAGES))
    remove_dependencies: list[str] = Field(default_factory=lambda: ["sqlite3"])

    config_template: str = "config.env.example"
    config_output: str = "config.env"
    fallback_keys: list[str] = Field(default_factory=lambda: ["SESSION_ID", "BOT_TOKEN"])

    state_dir: str = "~/.levboot"
    termux_prefix: str = "/data/data/com.termux/files/usr"

    autostart: AutostartSettings = Field(default_factory=AutostartSettings)

    # ── Derived paths ───────────────────────────────────────────

    def install_path(self) -> Path:
        return Path(self.install_dir).expanduser()

    def state_path(self) -> Path:
        return Path(self.state_dir).expanduser()

    def guard_script_path(self) -> Path:
        return self.install_path() / self.autostart.script_name

    def template_path(self) -> Path:
        return self.install_path() / self.config_template

    def output_path(self) -> Path:
        return self.install_path() / self.config_output

    def pm2_docker_path(self) -> Path:
        return Path(self.termux_prefix) / "bin" / "pm2-docker"

    # ── Profile-derived behaviour ───────────────────────────────

    @property
    def ignore_scripts(self) -> bool:
        return self.profile == "safe"

    def effective_packages(self) -> list[str]:
        """Packages to install, native extras appended for the native profile."""
        pkgs = list(self.packages)
        if self.profile == "native":
            pkgs.extend(p for p in self.native_packages if p not in pkgs)
        return pkgs

    def stripped_dependencies(self) -> list[str]:
        """Dependencies to delete from package.json (none for native)."""
        if self.profile == "native":
            return []
        return list(self.remove_dependencies)
