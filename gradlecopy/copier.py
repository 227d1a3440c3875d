"""Copying of Gradle's module cache into a Maven layout, and scans for missing artifacts."""

from __future__ import annotations

import enum
import logging
import os
import shutil
import sys
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field

from gradlecopy.project_info import POM_BACKUP_EXTENSION, ProjectInfo

log = logging.getLogger(__name__)

StatusCallback = Callable[[str], None]

_POM_SUFFIXES = (".pom", POM_BACKUP_EXTENSION)


class Operation(enum.Enum):
    """What a CopyJob does when run."""

    NOTHING = "nothing"
    COPY_LIBRARIES = "copy"
    GET_LINK_LIST = "links"


@dataclass
class MissingList:
    """Artifacts whose POM exists but whose package file does not.

    ``remote_links`` are relative to the repository root, ``local_files``
    are the matching absolute paths.
    """

    remote_links: list[str] = field(default_factory=list)
    local_files: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.remote_links or self.local_files)


def _with_slash(path: str) -> str:
    path = str(path)
    return path if path.endswith("/") else path + "/"


def _children(directory: str, *, files: bool) -> list[str]:
    """Sorted names of the visible sub-directories (or files) of ``directory``."""
    try:
        with os.scandir(directory) as scan:
            entries = sorted(scan, key=lambda entry: entry.name)
    except OSError:
        return []
    wanted = []
    for entry in entries:
        if entry.name.startswith("."):
            continue
        try:
            matches = entry.is_file() if files else entry.is_dir()
        except OSError:
            continue
        if matches:
            wanted.append(entry.name)
    return wanted


def copy_libraries(
    source: str,
    target: str,
    dry_run: bool = False,
    on_domain: StatusCallback | None = None,
) -> list[tuple[str, str]]:
    """Copy ``domain/library/version/<hash>/file`` from the Gradle cache into a Maven tree.

    A domain such as ``com.example`` becomes ``com/example``. Files that already
    exist at the target with identical content are skipped, and existing files
    are never overwritten. Returns the ``(source, target)`` pairs that were
    copied, or that would be copied when ``dry_run`` is set.
    """
    source = str(source)
    target = _with_slash(target)
    copied: list[tuple[str, str]] = []

    for domain in _children(source, files=False):
        domain_dir = os.path.join(source, domain)
        domain_name = domain.replace(".", "/")
        domain_path = target + domain_name + "/"
        if on_domain is not None:
            on_domain(domain_name)

        for library in _children(domain_dir, files=False):
            library_dir = os.path.join(domain_dir, library)
            library_path = domain_path + library + "/"

            for version in _children(library_dir, files=False):
                version_dir = os.path.join(library_dir, version)
                version_path = library_path + version + "/"

                if not dry_run:
                    try:
                        os.makedirs(version_path, exist_ok=True)
                    except OSError:
                        log.warning("failed to make path: %s", version_path)

                for id_name in _children(version_dir, files=False):
                    id_dir = os.path.join(version_dir, id_name)
                    for file_name in _children(id_dir, files=True):
                        source_path = os.path.join(id_dir, file_name)
                        target_path = version_path + file_name

                        # Identical re-downloads are not even worth a log line.
                        if os.path.exists(target_path):
                            from gradlecopy.project_info import binary_same

                            if binary_same(target_path, source_path):
                                continue

                        if dry_run:
                            log.debug("copy: %s to: %s", source_path, target_path)
                            copied.append((source_path, target_path))
                        elif os.path.exists(target_path):
                            log.debug("not overwriting: %s", target_path)
                        else:
                            try:
                                shutil.copy(source_path, target_path)
                            except OSError:
                                log.warning("failed to copy: %s", source_path)
                            else:
                                copied.append((source_path, target_path))
    return copied


def _walk_poms(prefix: str) -> Iterator[str]:
    """Yield ``.pom`` and ``.pom.backup`` files below ``prefix`` (which ends with '/')."""
    directory = prefix.rstrip("/") or "/"
    for name in _children(directory, files=True):
        if name.lower().endswith(_POM_SUFFIXES):
            yield prefix + name
    for name in _children(directory, files=False):
        yield from _walk_poms(prefix + name + "/")


def _path_key(path: str) -> str:
    return path.casefold() if sys.platform.startswith("win") else path


def find_missing(target: str) -> MissingList:
    """Scan a Maven tree for POMs whose package file is missing.

    Backups left behind while the package is present are restored on the way.
    Pom-only packages are not listed.
    """
    target = _with_slash(target)
    result = MissingList()
    seen: set[str] = set()

    for pom_path in _walk_poms(target):
        info = ProjectInfo(pom_path)
        if info.parse():
            if info.is_backup and info.is_downloaded():
                info.verbose = False
                info.restore_incomplete()
                info.verbose = True
            if info.is_parent:
                continue

        if info.is_complete():
            continue
        path = info.package_path
        key = _path_key(path)
        if key in seen:
            continue
        seen.add(key)
        result.local_files.append(path)
        result.remote_links.append(path[len(target):])
    return result


class CopyJob:
    """One copy or scan operation, reporting its progress through callbacks."""

    def __init__(
        self,
        source: str,
        target: str,
        dry_run: bool = False,
        on_status: StatusCallback | None = None,
        on_domain: StatusCallback | None = None,
    ) -> None:
        self._on_status = on_status
        self._on_domain = on_domain
        self._status("preparing")
        self.source = str(source)
        self.target = str(target)
        self.dry_run = dry_run

    def _status(self, status: str) -> None:
        if self._on_status is not None:
            self._on_status(status)

    def run(self, operation: Operation) -> list[tuple[str, str]] | MissingList | None:
        """Perform ``operation`` and return what it produced."""
        self._status("running")
        self.target = _with_slash(self.target)

        result: list[tuple[str, str]] | MissingList | None = None
        if operation is Operation.COPY_LIBRARIES:
            result = copy_libraries(self.source, self.target, self.dry_run, self._on_domain)
        elif operation is Operation.GET_LINK_LIST:
            result = find_missing(self.target)

        self._status("finished")
        log.debug(
            "%s operation completed.",
            "Copy" if operation is Operation.COPY_LIBRARIES else "Scan-for-missing",
        )
        return result