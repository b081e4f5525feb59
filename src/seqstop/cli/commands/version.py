from __future__ import annotations

from seqstop.cli.bundle import package_version


def cmd_version(args) -> int:
    print(package_version())
    return 0
