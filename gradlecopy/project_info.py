"""Inspection and repair of Maven POM files in a local repository."""

from __future__ import annotations

import enum
import logging
import os
import sys
import xml.etree.ElementTree as ElementTree
from pathlib import Path

log = logging.getLogger(__name__)

POM_BACKUP_EXTENSION = ".pom.backup"

KB = 1024
MB = 1024 * KB
_MAX_COMPARE_SIZE = 100 * MB


class ThreeState(enum.IntEnum):
    """A boolean answer that may also be unknown."""

    UNKNOWN = -1
    FALSE = 0
    TRUE = 1


class PackageType(enum.Enum):
    """Packaging declared by a POM file."""

    UNKNOWN = "unknown"
    POM_ONLY = "pom"
    JAR = "jar"
    AAR = "aar"
    APK = "apk"
    # Same as a jar, but may ship -sources.jar or -javadoc.jar beside it.
    BUNDLE = "bundle"


_PACKAGING_TYPES = {
    "pom": PackageType.POM_ONLY,
    "jar": PackageType.JAR,
    "": PackageType.JAR,
    "aar": PackageType.AAR,
    "apk": PackageType.APK,
    "bundle": PackageType.BUNDLE,
}


def platform_suffix(extension: str) -> str:
    """Return the platform-specific artifact suffix, like ``-linux.jar``."""
    if sys.platform == "darwin":
        platform = "-osx."
    elif sys.platform.startswith("linux"):
        platform = "-linux."
    else:
        platform = "-windows."
    return platform + extension


def _file_size(path: str) -> int:
    try:
        return os.path.getsize(path)
    except OSError:
        return 0


def _read_all(path: str) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError:
        return b""


def binary_same(first_file: str, other_file: str) -> ThreeState:
    """Compare two files byte for byte.

    Files larger than 100 MB are not compared and give ``UNKNOWN``.
    """
    left_size = _file_size(first_file)
    if left_size > _MAX_COMPARE_SIZE:
        return ThreeState.UNKNOWN
    same = left_size == _file_size(other_file) and _read_all(first_file) == _read_all(other_file)
    return ThreeState.TRUE if same else ThreeState.FALSE


def restore_incomplete_lib(path: str) -> bool:
    """Restore the POM backup belonging to a ``.jar`` or ``.aar`` path."""
    return ProjectInfo(path[:-3] + "pom").restore_incomplete()


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1] if "}" in tag else tag


class ProjectInfo:
    """Information about one ``.pom`` or ``.pom.backup`` file and its artifacts."""

    def __init__(self, pom_or_backup_path: str) -> None:
        self.input_pom_path = str(pom_or_backup_path)
        self.base_path = self._base_from_pom(self.input_pom_path)
        self.verbose = True
        self.package_type = PackageType.UNKNOWN
        self.dependencies: list[str] = []
        self._parsed = ThreeState.UNKNOWN

    def __repr__(self) -> str:
        return f"ProjectInfo({self.input_pom_path!r})"

    @staticmethod
    def _base_from_pom(path: str) -> str:
        if path.lower().endswith(POM_BACKUP_EXTENSION):
            return path[: -len(POM_BACKUP_EXTENSION)]
        return path[:-4]

    def parse(self) -> bool:
        """Read the packaging type from the POM; the result is cached."""
        if self._parsed is not ThreeState.UNKNOWN:
            return bool(self._parsed)
        self._parsed = ThreeState.FALSE

        if not os.path.exists(self.input_pom_path):
            return False
        try:
            root = ElementTree.parse(self.input_pom_path).getroot()
        except (ElementTree.ParseError, OSError) as error:
            log.warning("Failed to parse: %s message: %s", self.input_pom_path, error)
            return False

        packaging = next(
            (child for child in root if isinstance(child.tag, str) and _local_name(child.tag) == "packaging"),
            None,
        )
        text = "".join(packaging.itertext()) if packaging is not None else ""
        self.package_type = _PACKAGING_TYPES.get(text.strip().lower(), PackageType.UNKNOWN)

        self._parsed = ThreeState.TRUE
        return True

    def reparse(self) -> bool:
        """Forget any cached result and parse again."""
        self._parsed = ThreeState.UNKNOWN
        return self.parse()

    @property
    def is_parent(self) -> bool:
        """True for pom-only packages, which have no artifact file."""
        return self.package_type is PackageType.POM_ONLY

    @property
    def is_jar(self) -> bool:
        return self.package_type in (PackageType.JAR, PackageType.BUNDLE)

    @property
    def is_aar(self) -> bool:
        return self.package_type is PackageType.AAR

    @property
    def is_apk(self) -> bool:
        return self.package_type is PackageType.APK

    @property
    def is_bundle(self) -> bool:
        return self.package_type is PackageType.BUNDLE

    @property
    def is_unknown(self) -> bool:
        return self.package_type is PackageType.UNKNOWN

    @property
    def is_backup(self) -> bool:
        """Whether the queried file is a ``.pom.backup`` file."""
        return self.input_pom_path.lower().endswith(POM_BACKUP_EXTENSION)

    @property
    def pom_path(self) -> str:
        return self.base_path + ".pom"

    @property
    def pom_backup_path(self) -> str:
        return self.base_path + POM_BACKUP_EXTENSION

    @property
    def jar_path(self) -> str:
        return self.base_path + ".jar"

    @property
    def aar_path(self) -> str:
        return self.base_path + ".aar"

    @property
    def apk_path(self) -> str:
        return self.base_path + ".apk"

    @property
    def package_path(self) -> str:
        """Path of the artifact the POM packages."""
        if self.is_jar:
            return self.jar_path
        if self.is_apk:
            return self.apk_path
        return self.aar_path

    @property
    def jar_path_for_platform(self) -> str:
        return self.base_path + platform_suffix("jar")

    @property
    def aar_path_for_platform(self) -> str:
        return self.base_path + platform_suffix("aar")

    @property
    def apk_path_for_platform(self) -> str:
        return self.base_path + platform_suffix("apk")

    def is_downloaded(self) -> bool:
        """Whether the artifact the POM requires exists. Requires parse()."""
        if self.is_parent:
            return True
        candidates: list[str] = []
        if self.is_jar or self.is_unknown:
            candidates += [self.jar_path, self.jar_path_for_platform]
        if self.is_aar or self.is_unknown:
            candidates += [self.aar_path, self.aar_path_for_platform]
        if self.is_apk:
            candidates += [self.apk_path, self.apk_path_for_platform]
        return any(os.path.exists(path) for path in candidates)

    def is_complete(self) -> bool:
        """Like is_downloaded(), but also requires the ``.pom`` file."""
        return os.path.exists(self.pom_path) and self.is_downloaded()

    def binary_same_to(self, other_file: str) -> ThreeState:
        return binary_same(self.input_pom_path, other_file)

    def restore_incomplete(self) -> bool:
        """Rename the ``.pom.backup`` back to ``.pom`` unless it is not needed."""
        pom_path = self.pom_path
        info = ProjectInfo(pom_path)
        if info.parse():
            # A backup that is identical or invalid is not worth keeping.
            if self.is_backup and (self.binary_same_to(pom_path) or not self.parse()):
                try:
                    os.remove(self.input_pom_path)
                except OSError:
                    return False
                return True
            if info.is_complete():
                return False

        backup_path = info.pom_backup_path
        if not os.path.exists(backup_path):
            return False
        if os.path.exists(pom_path):
            try:
                os.remove(pom_path)
            except OSError:
                log.warning("can not delete: %s", pom_path)
                return False
        try:
            os.rename(backup_path, pom_path)
        except OSError:
            log.warning("can not rename: %s", backup_path)
            return False
        if self.verbose:
            log.debug("restored: %s", backup_path)
        return True