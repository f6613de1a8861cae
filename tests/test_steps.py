"""Tests for the individual conversion steps against a fake host."""

from dataclasses import replace

import pytest

from pkgbasify.errors import CommandError, InventoryMismatch, PreflightError, UnsupportedVersion, UserAbort
from pkgbasify.session import ConversionSession
from pkgbasify.steps import (
    CheckVersionStep,
    ConfirmRiskStep,
    InstallPackagesStep,
    PreflightStep,
    RebuildDatabasesStep,
    RemoveLinkerHintsStep,
    ResolveRepositoryStep,
    RestartSshdStep,
    SelectPackagesStep,
    SnapshotConfigsStep,
)

from conftest import ScriptedConfirmer, param_h, touch


def test_preflight_passes_on_fresh_host(session, runner):
    PreflightStep().run(session)
    assert runner.called("pkg", "which", "/usr/bin/uname")
    which = [c for c in runner.calls if "which" in c][0]
    assert which[1:3] == ["-r", session.settings.host_root]


def test_preflight_requires_root(session, runner):
    runner.on("id", "-u", stdout="1001\n")
    with pytest.raises(PreflightError, match="root"):
        PreflightStep().run(session)


def test_preflight_detects_pkgbase(session, runner):
    runner.on("pkg", "which", returncode=0)
    with pytest.raises(PreflightError, match="already using pkgbase"):
        PreflightStep().run(session)


def test_preflight_requires_bootstrapped_pkg(session, runner):
    runner.on("pkg", "-N", returncode=1)
    with pytest.raises(PreflightError, match="bootstrap"):
        PreflightStep().run(session)


def test_preflight_rejects_nonstandard_repos_dir(session, runner):
    runner.on("pkg", "config", "REPOS_DIR", stdout="/etc/pkg/, /opt/repos/\n")
    with pytest.raises(PreflightError, match="REPOS_DIR"):
        PreflightStep().run(session)


def test_preflight_existing_repo_conf_declined(session, host_root):
    touch(host_root, "/usr/local/etc/pkg/repos/FreeBSD-base.conf", "old\n")
    session.confirmer = ScriptedConfirmer(False)
    with pytest.raises(PreflightError, match="already exists"):
        PreflightStep().run(session)


def test_preflight_existing_repo_conf_accepted(session, host_root):
    touch(host_root, "/usr/local/etc/pkg/repos/FreeBSD-base.conf", "old\n")
    PreflightStep().run(session)
    assert session.decisions["overwrite_repo_conf"] is True
    assert (host_root / "usr/local/etc/pkg/repos/FreeBSD-base.conf").read_text() == "old\n"


def test_confirm_risk_declined(session):
    session.confirmer = ScriptedConfirmer(False)
    with pytest.raises(UserAbort):
        ConfirmRiskStep().run(session)


def test_resolve_repository_stays_in_work_dir(session, runner, host_root):
    ResolveRepositoryStep().run(session)

    assert session.decisions["repository_url"].endswith("base_release_2")
    assert [str(host_root / "bin/freebsd-version"), "-u"] in runner.calls
    assert (session.scratch_repos_dir / "FreeBSD-base.conf").exists()
    assert not (host_root / "usr/local/etc/pkg/repos").exists()
    update = [c for c in runner.calls if "update" in c][0]
    assert f"REPOS_DIR={session.scratch_repos_dir}" in update
    assert f"PKG_DBDIR={session.scratch_db_dir}" in update
    assert "-r" not in update[:update.index("update")]


def test_resolve_repository_unsupported(session, runner):
    runner.on("freebsd-version", stdout="13.2-RELEASE\n")
    with pytest.raises(UnsupportedVersion):
        ResolveRepositoryStep().run(session)


def test_check_version_equal(session):
    CheckVersionStep().run(session)
    assert session.decisions["osversion"]["compat"] == "equal"


def test_check_version_downgrade_declined(session, host_root):
    touch(host_root, "/usr/include/sys/param.h", param_h("1403000"))
    session.confirmer = ScriptedConfirmer(False)
    with pytest.raises(UserAbort):
        CheckVersionStep().run(session)


def test_check_version_reads_alternate_root(session, runner):
    CheckVersionStep().run(session)
    assert session.decisions["osversion"]["local"] == 1402000
    assert not runner.called("uname")


def test_check_version_alternate_root_without_headers(session, host_root):
    (host_root / "usr/include/sys/param.h").unlink()
    with pytest.raises(PreflightError, match="OS version"):
        CheckVersionStep().run(session)


def test_snapshot_step(session, host_root):
    touch(host_root, "/var/db/etcupdate/current/etc/group", "wheel:*:0:root\n")
    SnapshotConfigsStep().run(session)
    assert (session.snapshot_dir / "etc/group").read_text() == "wheel:*:0:root\n"


def test_snapshot_step_without_database(session):
    with pytest.raises(PreflightError):
        SnapshotConfigsStep().run(session)


def test_select_packages_step(session, host_root):
    touch(host_root, "/usr/src/Makefile")
    SelectPackagesStep().run(session)
    assert session.selected == [
        "FreeBSD-kernel-generic",
        "FreeBSD-runtime",
        "FreeBSD-utilities",
        "FreeBSD-src",
        "FreeBSD-src-sys",
    ]


def test_select_packages_step_mismatch(session, runner):
    runner.on("pkg", "rquery", "-r", "FreeBSD-base", "%n", stdout="FreeBSD-runtime\n")
    with pytest.raises(InventoryMismatch):
        SelectPackagesStep().run(session)


def test_install_writes_descriptor_and_installs(session, runner, host_root):
    session.repo_conf = "FreeBSD-base: {}\n"
    session.selected = ["FreeBSD-kernel-generic", "FreeBSD-runtime"]
    InstallPackagesStep().run(session)

    assert (host_root / "usr/local/etc/pkg/repos/FreeBSD-base.conf").read_text() == "FreeBSD-base: {}\n"
    install = [c for c in runner.calls if "install" in c][0]
    assert "BACKUP_LIBRARIES=yes" in install
    assert install[1:3] == ["-r", str(host_root)]
    assert install[-2:] == ["FreeBSD-kernel-generic", "FreeBSD-runtime"]


def test_install_failure_raises(session, runner):
    session.repo_conf = "FreeBSD-base: {}\n"
    session.selected = ["FreeBSD-runtime"]
    runner.on("pkg", "install", returncode=3)
    with pytest.raises(CommandError):
        InstallPackagesStep().run(session)


@pytest.fixture
def live_session(settings, runner, confirmer):
    s = ConversionSession.create(replace(settings, host_root="/"), runner, confirmer)
    yield s
    s.close()


def test_restart_sshd_only_when_running(live_session, runner):
    runner.on("service", "sshd", "status", returncode=1)
    RestartSshdStep().run(live_session)
    assert not runner.called("service", "sshd", "restart")


def test_restart_sshd_when_running(live_session, runner):
    RestartSshdStep().run(live_session)
    assert runner.called("service", "sshd", "restart")


def test_restart_sshd_skipped_for_alternate_root(session, runner):
    RestartSshdStep().run(session)
    assert not runner.called("service")


def test_check_version_live_system_uses_uname(live_session, runner):
    CheckVersionStep().run(live_session)
    assert runner.called("uname", "-U")
    assert live_session.decisions["osversion"]["local"] == 1402000


def test_resolve_repository_live_system_runs_freebsd_version(live_session, runner):
    ResolveRepositoryStep().run(live_session)
    assert ["freebsd-version"] in runner.calls


def test_rebuild_databases_best_effort(session, runner):
    session.commit()
    runner.on("pwd_mkdb", returncode=1)
    RebuildDatabasesStep().run(session)
    assert runner.called("cap_mkdb")
    assert [e.operation for e in session.commit_errors] == ["pwd_mkdb"]


def test_remove_linker_hints(session, host_root):
    hints = touch(host_root, "/boot/kernel/linker.hints", "x")
    RemoveLinkerHintsStep().run(session)
    assert not hints.exists()
    # missing file is fine
    RemoveLinkerHintsStep().run(session)
