from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Paths:
    host_root: str = "/"
    repos_dir: str = "/usr/local/etc/pkg/repos"
    etcupdate_db: str = "/var/db/etcupdate/current"
    fingerprints_dir: str = "/usr/share/keys/pkg"
    master_passwd: str = "/etc/master.passwd"
    login_conf: str = "/etc/login.conf"
    linker_hints: str = "/boot/kernel/linker.hints"
    freebsd_version: str = "/bin/freebsd-version"
    param_h: str = "/usr/include/sys/param.h"
    report_default: str = "/var/db/pkgbasify/report.json"


PATHS = Paths()

REPO_NAME = "FreeBSD-base"
BACKUP_SUFFIX = ".pkgsave"
WORK_DIR_PREFIX = "pkgbasify."

# Package whose FreeBSD_version annotation describes the repository's OS version.
REFERENCE_PACKAGE = "FreeBSD-runtime"
VERSION_ANNOTATION = "FreeBSD_version"
