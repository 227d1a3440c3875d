# gradlecopy

Gradle keeps every library it downloads in its own cache
(`~/.gradle/caches/modules-2/files-2.1`), laid out as
`<group>/<artifact>/<version>/<hash>/<file>`. Tools that expect a Maven
repository, such as the Android SDK's `extras/m2repository`, cannot read that
layout. `gradlecopy` is a library that bridges the two.

## What it does

- **Copy** – `gradlecopy.copier.copy_libraries(source, target, dry_run=False, on_domain=None)`
  walks the Gradle cache and copies every file into a Maven layout
  (`com/example/lib/1.0/lib-1.0.jar`). A domain such as `com.example` becomes
  `com/example`. Files already present with identical contents are skipped and
  existing files are never overwritten. It returns the `(source, target)` pairs
  that were copied, or that would be copied when `dry_run` is set.
- **Find missing** – `gradlecopy.copier.find_missing(target)` scans a Maven
  repository for `.pom` and `.pom.backup` files whose `.jar`, `.aar` or `.apk`
  is absent. It returns a `MissingList` with `remote_links` (relative to the
  repository root) and the matching absolute `local_files`. Pom-only packages
  are not listed, and a backup whose package is already present is restored
  on the way.
- **Copy or scan with progress** – `gradlecopy.copier.CopyJob` runs either
  operation (`Operation.COPY_LIBRARIES` or `Operation.GET_LINK_LIST`) and
  reports `"preparing"`, `"running"` and `"finished"` through `on_status`, and
  each domain through `on_domain`.
- **Download** – `gradlecopy.downloader.DownloadJob` fetches relative links
  from one or more provider sites in turn. A link a provider serves is removed
  from the pending list; a failed link is retried once with the
  platform-specific artifact name (`-linux.`, `-osx.` or `-windows.`). Files
  are stored under the target folder, mirroring the repository layout. By
  default each link is fetched with `FileDownloader` (standard-library
  `urllib`, 30 second timeout); a `fetch` callable may be given instead.
  `abort()` stops the job and cancels the download in flight.
- **Inspect POMs** – `gradlecopy.project_info.ProjectInfo` reads the packaging
  type of a `.pom` or `.pom.backup` file and tells whether its package is
  downloaded (`is_downloaded()`) or complete (`is_complete()`).
  `restore_incomplete()` renames a `.pom.backup` back to `.pom`, and
  `restore_incomplete_lib(path)` does the same starting from a `.jar` or `.aar`
  path. `binary_same(a, b)` compares two files and returns a `ThreeState`.

## Installation

```
pip install .
```

No third-party libraries are required.

## Example

```python
from gradlecopy.copier import copy_libraries, find_missing
from gradlecopy.downloader import DownloadJob
from gradlecopy.project_info import ProjectInfo

copy_libraries("/home/me/.gradle/caches/modules-2/files-2.1",
               "/opt/android-sdk/extras/m2repository",
               dry_run=True, on_domain=print)

missing = find_missing("/opt/android-sdk/extras/m2repository")

job = DownloadJob(missing.remote_links, "downloads",
                  ["https://repo.example.com/maven2/"],
                  on_begin=lambda index, link: print(index + 1, link))
print(job.run(), "of", job.link_count(), "downloaded")

info = ProjectInfo("/opt/android-sdk/extras/m2repository/com/example/lib/1.0/lib-1.0.pom")
if info.parse() and not info.is_complete():
    print("missing:", info.package_path)
```

## What it does not do

- There is no command-line program and no graphical interface; the package is
  used from Python code.
- There is no helper to disable incomplete libraries (renaming a `.pom` with
  no package beside it to `.pom.backup`), to read a provider list from text,
  or to leave disabled packages out of a download list. Only restoring
  backups is provided.
- Downloaded files are not moved into the Maven repository; they stay under
  the target folder given to `DownloadJob`.

## Running the tests

```
pip install .[test]
pytest
```