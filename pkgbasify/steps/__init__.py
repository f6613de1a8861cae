from .step_10_preflight import PreflightStep
from .step_20_confirm_risk import ConfirmRiskStep
from .step_30_resolve_repository import ResolveRepositoryStep
from .step_40_check_version import CheckVersionStep
from .step_50_snapshot_configs import SnapshotConfigsStep
from .step_60_select_packages import SelectPackagesStep
from .step_70_install_packages import InstallPackagesStep
from .step_80_merge_configs import MergeConfigsStep
from .step_85_restart_sshd import RestartSshdStep
from .step_90_rebuild_databases import RebuildDatabasesStep
from .step_95_remove_linker_hints import RemoveLinkerHintsStep

__all__ = [
    "PreflightStep",
    "ConfirmRiskStep",
    "ResolveRepositoryStep",
    "CheckVersionStep",
    "SnapshotConfigsStep",
    "SelectPackagesStep",
    "InstallPackagesStep",
    "MergeConfigsStep",
    "RestartSshdStep",
    "RebuildDatabasesStep",
    "RemoveLinkerHintsStep",
]
