from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .lib.env import BACKUP_SUFFIX, PATHS, REPO_NAME
from .lib.inventory import DEFAULT_PROBES, SubsystemProbe


@dataclass(frozen=True)
class Settings:
    host_root: str = PATHS.host_root
    repos_dir: str = PATHS.repos_dir
    repo_name: str = REPO_NAME
    mirror_type: str = "srv"
    fingerprints_dir: str = PATHS.fingerprints_dir
    etcupdate_db: str = PATHS.etcupdate_db
    backup_suffix: str = BACKUP_SUFFIX
    # Parent for the per-run scratch directory; None means the system temp dir.
    work_dir_parent: Optional[str] = None
    overwrite_repo_conf: bool = False
    probes: Tuple[SubsystemProbe, ...] = field(default=DEFAULT_PROBES)

    @property
    def alternate_root(self) -> bool:
        """True when converting a system mounted somewhere other than /."""
        return Path(self.host_root) != Path("/")

    def host(self, path: str) -> Path:
        """Resolve an absolute host path under host_root."""
        return Path(self.host_root) / path.lstrip("/")


def _coerce_probes(raw: Any) -> Tuple[SubsystemProbe, ...]:
    """Probe overrides are a mapping of probe name to marker path."""

    if not isinstance(raw, dict):
        raise ValueError("config.probes must be a mapping of probe name to path")
    unknown = set(raw) - {p.name for p in DEFAULT_PROBES}
    if unknown:
        raise ValueError(f"Unknown probe(s) in config: {', '.join(sorted(unknown))}")
    return tuple(SubsystemProbe(p.name, str(raw.get(p.name, p.path))) for p in DEFAULT_PROBES)


def settings_from_mapping(raw: Dict[str, Any], base: Optional[Settings] = None) -> Settings:
    settings = base or Settings()
    known = {f.name for f in fields(Settings)}
    unknown = set(raw) - known
    if unknown:
        raise ValueError(f"Unknown config key(s): {', '.join(sorted(unknown))}")

    values = dict(raw)
    if "probes" in values:
        values["probes"] = _coerce_probes(values["probes"])
    if "overwrite_repo_conf" in values:
        values["overwrite_repo_conf"] = bool(values["overwrite_repo_conf"])
    return replace(settings, **values)


def load_settings(path: Optional[str] = None, **overrides: Any) -> Settings:
    """Build settings from defaults, an optional YAML file, then overrides.

    ``overrides`` whose value is None are ignored so argparse defaults can be
    passed straight through.
    """

    settings = Settings()
    if path:
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(path)
        if p.suffix.lower() not in {".yaml", ".yml"}:
            raise ValueError("config file must be YAML")

        try:
            import yaml  # type: ignore
        except Exception as e:
            raise RuntimeError("PyYAML is required to read the config file") from e

        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
        if not isinstance(raw, dict):
            raise ValueError("config file must contain a mapping/object")
        settings = settings_from_mapping(raw, settings)

    given = {k: v for k, v in overrides.items() if v is not None}
    if given:
        settings = settings_from_mapping(given, settings)
    return settings
