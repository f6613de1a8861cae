from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from .config import Settings, load_settings
from .errors import PkgbasifyError
from .lib.command import CommandRunner, SubprocessRunner
from .lib.confirm import AutoConfirmer, Confirmer, PromptConfirmer
from .logging_utils import configure_logging
from .pipeline import PipelineResult, run_pipeline
from .session import ConversionSession, Phase
from .state_store import save_report
from .steps import (
    CheckVersionStep,
    ConfirmRiskStep,
    InstallPackagesStep,
    MergeConfigsStep,
    PreflightStep,
    RebuildDatabasesStep,
    RemoveLinkerHintsStep,
    ResolveRepositoryStep,
    RestartSshdStep,
    SelectPackagesStep,
    SnapshotConfigsStep,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_UNCHANGED = 1
EXIT_COMPLETED_WITH_ERRORS = 2


def build_setup_steps():
    return [
        PreflightStep(),
        ConfirmRiskStep(),
        ResolveRepositoryStep(),
        CheckVersionStep(),
        SnapshotConfigsStep(),
        SelectPackagesStep(),
    ]


def build_commit_steps():
    return [
        InstallPackagesStep(),
        MergeConfigsStep(),
        RestartSshdStep(),
        RebuildDatabasesStep(),
        RemoveLinkerHintsStep(),
    ]


def _convert(session: ConversionSession, *, select_only: bool) -> int:
    try:
        result: PipelineResult = run_pipeline(
            session=session,
            setup_steps=build_setup_steps(),
            commit_steps=build_commit_steps(),
            stop_before_commit=select_only,
        )
    except PkgbasifyError as e:
        logger.error("Error: %s", e)
        logger.error("No changes were made to the system.")
        return EXIT_UNCHANGED
    except KeyboardInterrupt:
        logger.error("Interrupted; no changes were made to the system.")
        return EXIT_UNCHANGED

    if not result.committed:
        print(" ".join(session.selected or []))
        return EXIT_OK

    for err in session.commit_errors:
        logger.error("  %s: %s", err.operation, err.message)
    for conflict in session.merge_conflicts:
        logger.warning("  conflict: %s (local copy %s)", conflict.path, conflict.backup)

    if session.ok:
        logger.info("Conversion to pkgbase complete")
        return EXIT_OK
    logger.error(
        "Conversion to pkgbase applied with %d error(s) and %d merge conflict(s)",
        len(session.commit_errors),
        len(session.merge_conflicts),
    )
    return EXIT_COMPLETED_WITH_ERRORS


def _write_report(path: str, session: ConversionSession) -> bool:
    try:
        save_report(path, session.summary())
    except (OSError, RuntimeError) as e:
        logger.error("Error: could not write report %s: %s", path, e)
        return False
    return True


def run(
    settings: Settings,
    *,
    runner: Optional[CommandRunner] = None,
    confirmer: Optional[Confirmer] = None,
    report_path: Optional[str] = None,
    select_only: bool = False,
) -> int:
    """Run one conversion and return the process exit status."""

    session = ConversionSession.create(
        settings,
        runner or SubprocessRunner(),
        confirmer or PromptConfirmer(),
    )
    status: Optional[int] = None
    try:
        status = _convert(session, select_only=select_only)
    finally:
        try:
            if report_path and not _write_report(report_path, session):
                if status == EXIT_OK and session.phase is not Phase.SETUP:
                    status = EXIT_COMPLETED_WITH_ERRORS
        finally:
            session.close()
    return status


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="pkgbasify")
    p.add_argument("--config", default=None, help="YAML file overriding default paths and probes")
    p.add_argument("--log", default=None, help="Also write the log to this file")
    p.add_argument("--report", default=None, help="Write a session summary (json|yaml)")
    p.add_argument("--root", default=None, help="Alternate host root (default: /)")
    p.add_argument("-y", "--yes", action="store_true", help="Answer yes to every confirmation")
    p.add_argument(
        "--overwrite-repo-conf",
        action="store_true",
        default=None,
        help="Replace an existing FreeBSD-base.conf",
    )
    p.add_argument(
        "--dry-run-select",
        action="store_true",
        help="Stop before installing and print the selected packages",
    )
    p.add_argument("-v", "--verbose", action="store_true")

    args = p.parse_args(argv)

    configure_logging(log_path=args.log, level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        settings = load_settings(
            args.config,
            host_root=args.root,
            overwrite_repo_conf=args.overwrite_repo_conf,
        )
    except (OSError, ValueError, RuntimeError) as e:
        logger.error("Error: invalid configuration: %s", e)
        return EXIT_UNCHANGED

    return run(
        settings,
        confirmer=AutoConfirmer() if args.yes else PromptConfirmer(),
        report_path=args.report,
        select_only=bool(args.dry_run_select),
    )


if __name__ == "__main__":
    sys.exit(main())
