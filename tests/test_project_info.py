import os

import pytest

from gradlecopy.project_info import (
    PackageType,
    ProjectInfo,
    ThreeState,
    binary_same,
    platform_suffix,
    restore_incomplete_lib,
)


def seed_pom(folder, name, packaging, siblings=()):
    base = os.path.join(str(folder), f"{name}-1.0")
    pom_path = base + ".pom"
    with open(pom_path, "w", encoding="utf-8") as handle:
        handle.write(f"<project><packaging>{packaging}</packaging></project>\n")
    for ext in siblings:
        with open(f"{base}.{ext}", "wb") as handle:
            handle.write(b"dummy")
    return pom_path


def write(path, data):
    with open(path, "wb") as handle:
        handle.write(data)
    return str(path)


def test_constructor_remembers_input_path(tmp_path):
    pom = str(tmp_path / "ctor-1.0.pom")
    assert ProjectInfo(pom).input_pom_path == pom


def test_parse_false_when_pom_missing(tmp_path):
    info = ProjectInfo(str(tmp_path / "does-not-exist-1.0.pom"))
    assert info.parse() is False
    assert info.is_unknown


def test_parse_detects_jar(tmp_path):
    info = ProjectInfo(seed_pom(tmp_path, "parsejar", "jar"))
    assert info.parse() is True
    assert info.package_type is PackageType.JAR


def test_reparse_reruns_detection(tmp_path):
    info = ProjectInfo(seed_pom(tmp_path, "reparse", "jar"))
    info.parse()
    assert info.reparse() is True
    assert info.package_type is PackageType.JAR


def test_parse_result_is_cached_until_reparse(tmp_path):
    pom = str(tmp_path / "late-1.0.pom")
    info = ProjectInfo(pom)
    assert info.parse() is False
    write(pom, b"<project><packaging>aar</packaging></project>")
    assert info.parse() is False
    assert info.reparse() is True
    assert info.is_aar


def test_parse_handles_namespaces_and_whitespace(tmp_path):
    pom = write(
        tmp_path / "ns-1.0.pom",
        b'<project xmlns="http://maven.apache.org/POM/4.0.0">'
        b"<packaging>  AAR \n</packaging></project>",
    )
    info = ProjectInfo(pom)
    assert info.parse()
    assert info.package_type is PackageType.AAR


def test_missing_packaging_means_jar(tmp_path):
    pom = write(tmp_path / "nopack-1.0.pom", b"<project><name>x</name></project>")
    info = ProjectInfo(pom)
    assert info.parse()
    assert info.is_jar


def test_malformed_pom_fails_to_parse(tmp_path):
    pom = write(tmp_path / "bad-1.0.pom", b"<project><packaging>jar</project>")
    info = ProjectInfo(pom)
    assert info.parse() is False
    assert info.is_unknown


def test_verbose_defaults_true_and_can_flip(tmp_path):
    info = ProjectInfo(str(tmp_path / "verbose-1.0.pom"))
    assert info.verbose is True
    info.verbose = False
    assert info.verbose is False


def test_type_unknown_before_parse(tmp_path):
    assert ProjectInfo(str(tmp_path / "type-1.0.pom")).package_type is PackageType.UNKNOWN


def test_is_parent_only_for_pom_packaging(tmp_path):
    info = ProjectInfo(seed_pom(tmp_path, "parent", "pom"))
    info.parse()
    assert info.is_parent
    assert not info.is_jar


def test_is_jar_for_jar_and_bundle(tmp_path):
    jar = ProjectInfo(seed_pom(tmp_path, "isjar", "jar"))
    jar.parse()
    assert jar.is_jar
    bundle = ProjectInfo(seed_pom(tmp_path, "isbundle-asjar", "bundle"))
    bundle.parse()
    assert bundle.is_jar


def test_is_aar_only(tmp_path):
    info = ProjectInfo(seed_pom(tmp_path, "isaar", "aar"))
    info.parse()
    assert info.is_aar
    assert not info.is_jar


def test_is_apk_only(tmp_path):
    info = ProjectInfo(seed_pom(tmp_path, "isapk", "apk"))
    info.parse()
    assert info.is_apk
    assert not info.is_jar


def test_is_bundle_only(tmp_path):
    info = ProjectInfo(seed_pom(tmp_path, "isbundle", "bundle"))
    info.parse()
    assert info.is_bundle
    assert not info.is_aar


def test_is_unknown_for_unrecognised_packaging(tmp_path):
    info = ProjectInfo(seed_pom(tmp_path, "unk", "zip"))
    info.parse()
    assert info.is_unknown


def test_is_backup(tmp_path):
    assert ProjectInfo(str(tmp_path / "bkp-1.0.pom.backup")).is_backup
    assert ProjectInfo(str(tmp_path / "bkp-1.0.POM.BACKUP")).is_backup
    assert not ProjectInfo(str(tmp_path / "bkp-1.0.pom")).is_backup


def test_is_downloaded_once_package_exists(tmp_path):
    info = ProjectInfo(seed_pom(tmp_path, "dl", "jar", ["jar"]))
    info.parse()
    assert info.is_downloaded()


def test_is_downloaded_false_without_artifact(tmp_path):
    info = ProjectInfo(seed_pom(tmp_path, "nodl", "jar"))
    info.parse()
    assert not info.is_downloaded()


def test_is_downloaded_accepts_platform_artifact(tmp_path):
    info = ProjectInfo(seed_pom(tmp_path, "plat", "jar"))
    info.parse()
    write(info.jar_path_for_platform, b"x")
    assert info.is_downloaded()


def test_unknown_type_accepts_aar(tmp_path):
    info = ProjectInfo(seed_pom(tmp_path, "unkaar", "zip", ["aar"]))
    info.parse()
    assert info.is_downloaded()


def test_parent_is_always_downloaded(tmp_path):
    info = ProjectInfo(seed_pom(tmp_path, "par", "pom"))
    info.parse()
    assert info.is_downloaded()


def test_is_complete_when_pom_and_package_exist(tmp_path):
    info = ProjectInfo(seed_pom(tmp_path, "complete", "jar", ["jar"]))
    info.parse()
    assert info.is_complete()


def test_is_complete_requires_pom(tmp_path):
    pom = seed_pom(tmp_path, "backuponly", "jar", ["jar"])
    backup = pom + ".backup"
    os.rename(pom, backup)
    info = ProjectInfo(backup)
    assert info.parse()
    assert info.is_downloaded()
    assert not info.is_complete()


def test_pom_path_from_backup(tmp_path):
    info = ProjectInfo(str(tmp_path / "p-1.0.pom.backup"))
    assert info.pom_path == str(tmp_path / "p-1.0.pom")


def test_artifact_paths(tmp_path):
    info = ProjectInfo(str(tmp_path / "p-1.0.pom"))
    base = str(tmp_path / "p-1.0")
    assert info.base_path == base
    assert info.pom_backup_path == base + ".pom.backup"
    assert info.jar_path == base + ".jar"
    assert info.aar_path == base + ".aar"
    assert info.apk_path == base + ".apk"


@pytest.mark.parametrize(
    ("packaging", "ext"), [("jar", "jar"), ("aar", "aar"), ("apk", "apk"), ("bundle", "jar")]
)
def test_package_path_by_packaging(tmp_path, packaging, ext):
    info = ProjectInfo(seed_pom(tmp_path, f"pkg{packaging}", packaging))
    info.parse()
    assert info.package_path == info.base_path + "." + ext


def test_platform_paths(tmp_path):
    info = ProjectInfo(str(tmp_path / "p-1.0.pom"))
    base = str(tmp_path / "p-1.0")
    assert info.jar_path_for_platform == base + platform_suffix("jar")
    assert info.aar_path_for_platform.endswith(".aar")
    assert info.apk_path_for_platform.endswith(".apk")


def test_platform_suffix():
    assert platform_suffix("jar") in {"-osx.jar", "-linux.jar", "-windows.jar"}


def test_base_path_strips_pom_extension(tmp_path):
    pom = str(tmp_path / "base-1.0.pom")
    info = ProjectInfo(pom)
    assert not info.base_path.endswith(".pom")
    assert pom.startswith(info.base_path)


def test_restore_incomplete_renames_backup(tmp_path):
    pom = str(tmp_path / "restore-1.0.pom")
    backup = write(tmp_path / "restore-1.0.pom.backup", b"<project><packaging>jar</packaging></project>")
    assert ProjectInfo(pom).restore_incomplete() is True
    assert os.path.exists(pom)
    assert not os.path.exists(backup)


def test_restore_incomplete_without_backup(tmp_path):
    assert ProjectInfo(str(tmp_path / "none-1.0.pom")).restore_incomplete() is False


def test_restore_incomplete_keeps_complete_pom(tmp_path):
    pom = seed_pom(tmp_path, "done", "jar", ["jar"])
    backup = write(pom + ".backup", b"<project><packaging>aar</packaging></project>")
    assert ProjectInfo(pom).restore_incomplete() is False
    assert os.path.exists(backup)


def test_restore_incomplete_drops_identical_backup(tmp_path):
    pom = seed_pom(tmp_path, "ident", "jar")
    with open(pom, "rb") as handle:
        backup = write(pom + ".backup", handle.read())
    assert ProjectInfo(backup).restore_incomplete() is True
    assert not os.path.exists(backup)
    assert os.path.exists(pom)


def test_binary_same_to_identical(tmp_path):
    a = write(tmp_path / "same-a.pom", b"identical")
    b = write(tmp_path / "same-b.pom", b"identical")
    assert ProjectInfo(a).binary_same_to(b) is ThreeState.TRUE


def test_restore_incomplete_lib_from_jar_path(tmp_path):
    base = str(tmp_path / "lib-static-1.0")
    write(base + ".pom.backup", b"<project><packaging>jar</packaging></project>")
    assert restore_incomplete_lib(base + ".jar") is True
    assert os.path.exists(base + ".pom")


def test_binary_same_differing(tmp_path):
    a = write(tmp_path / "diff-a.pom", b"alpha")
    b = write(tmp_path / "diff-b.pom", b"beta")
    assert binary_same(a, b) is ThreeState.FALSE


def test_binary_same_same_size_different_content(tmp_path):
    a = write(tmp_path / "x-a", b"abcd")
    b = write(tmp_path / "x-b", b"abce")
    assert binary_same(a, b) is ThreeState.FALSE