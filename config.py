# config.py
from __future__ import annotations
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, List, Optional
import yaml
from logger import log

CONFIG_FILE = Path("/etc/tui-installer/installer.yaml")
DATA_SUBDIR = "run/proxmox-installer"
REBOOT_DELAY_SECONDS = 5.0


@dataclass(frozen=True)
class InstallerConfig:
    in_test_mode: bool = False
    base_path: str = "/"
    worker_path: str = "proxmox-low-level-installer"
    worker_args: List[str] = field(default_factory=lambda: ["start-session"])
    worker_env: Dict[str, str] = field(default_factory=dict)
    reboot_delay: float = REBOOT_DELAY_SECONDS

    @property
    def confirm_abort(self) -> bool:
        """Aborting asks for confirmation only on real installs."""
        return not self.in_test_mode

    @property
    def data_dir(self) -> Path:
        return Path(self.base_path) / DATA_SUBDIR

    @property
    def worker_command(self) -> List[str]:
        return [self.worker_path, *self.worker_args]


PRODUCTION = InstallerConfig()

TEST = InstallerConfig(
    in_test_mode=True,
    base_path="./testdir",
    worker_path="./proxmox-low-level-installer",
    worker_args=["-t", "start-session-test"],
    worker_env={"PERL5LIB": "."},
)

_OVERRIDABLE = {"base_path", "worker_path", "worker_args", "worker_env", "reboot_delay"}


def _coerce(key: str, value):
    if key == "worker_args":
        if isinstance(value, str):
            raise TypeError("expected a list")
        return [str(a) for a in value]
    if key == "worker_env":
        return {str(k): str(v) for k, v in value.items()}
    if key == "reboot_delay":
        return float(value)
    return str(value)


def load_config(in_test_mode: bool, path: Optional[Path] = CONFIG_FILE) -> InstallerConfig:
    """Pick the production or test preset and apply overrides from a YAML file.

    The file is optional. Unknown keys are ignored, a malformed file is
    ignored entirely; both are logged.
    """
    config = TEST if in_test_mode else PRODUCTION
    if path is None or not Path(path).exists():
        return config

    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        log.warning("Ignoring unreadable config file %s: %s", path, e)
        return config

    if not isinstance(data, dict):
        log.warning("Ignoring config file %s: expected a mapping", path)
        return config

    overrides = {}
    for key, value in data.items():
        if key not in _OVERRIDABLE:
            log.warning("Unknown config key %r in %s", key, path)
            continue
        try:
            overrides[key] = _coerce(key, value)
        except (TypeError, ValueError, AttributeError) as e:
            log.warning("Ignoring bad value for %r in %s: %s", key, path, e)

    log.info("Config overrides from %s: %s", path, sorted(overrides))
    return replace(config, **overrides)
