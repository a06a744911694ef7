"""Find the files of a Perl distribution that may carry a ``# VERSION``.

Finders:
- install_modules: ``*.pm`` and ``*.pod`` under ``lib/``
- perl_exec_files: Perl scripts under the executable dirs (``bin/``,
  ``script/``), recognised by a ``.pl`` suffix or a perl shebang
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path

from ourpkgversion.core.errors import ConfigError
from ourpkgversion.core.model import DistFile, FileRole

INSTALL_MODULES = "install_modules"
PERL_EXEC_FILES = "perl_exec_files"
KNOWN_FINDERS = (INSTALL_MODULES, PERL_EXEC_FILES)
DEFAULT_EXEC_DIRS = ("bin", "script")


def detect_role(path: Path, exec_dirs: Sequence[str] = DEFAULT_EXEC_DIRS, root: Path | None = None) -> FileRole:
    """Guess the role of a file from its name and location."""
    if path.suffix.lower() == ".pod":
        return FileRole.DOC_ONLY
    parts = path.relative_to(root).parts if root is not None and path.is_relative_to(root) else path.parts
    if parts and parts[0] in exec_dirs:
        return FileRole.EXECUTABLE
    return FileRole.MODULE


def is_perl_script(path: Path) -> bool:
    if path.suffix == ".pl":
        return True
    try:
        with open(path, "rb") as f:
            first = f.readline(256)
    except OSError:
        return False
    return first.startswith(b"#!") and b"perl" in first


def _dist_file(root: Path, path: Path, role: FileRole) -> DistFile:
    return DistFile(path=path, name=path.relative_to(root).as_posix(), role=role)


def iter_install_modules(root: Path) -> Iterable[DistFile]:
    lib = root / "lib"
    if not lib.is_dir():
        return
    for path in sorted(lib.rglob("*")):
        if not path.is_file():
            continue
        if path.suffix == ".pm":
            yield _dist_file(root, path, FileRole.MODULE)
        elif path.suffix == ".pod":
            yield _dist_file(root, path, FileRole.DOC_ONLY)


def iter_perl_exec_files(root: Path, exec_dirs: Sequence[str] = DEFAULT_EXEC_DIRS) -> Iterable[DistFile]:
    for dirname in exec_dirs:
        base = root / dirname
        if not base.is_dir():
            continue
        for path in sorted(base.rglob("*")):
            if path.is_file() and is_perl_script(path):
                yield _dist_file(root, path, FileRole.EXECUTABLE)


def main_module_name(dist_name: str) -> str:
    """``Foo-Bar`` -> ``lib/Foo/Bar.pm``."""
    return "lib/" + "/".join(dist_name.split("-")) + ".pm"


def guess_main_module(files: Sequence[DistFile], dist_name: str | None = None) -> str | None:
    """Pick the main module: named after the dist, else the shortest .pm path."""
    modules = [f.name for f in files if f.name.endswith(".pm") and f.name.startswith("lib/")]
    if not modules:
        return None
    if dist_name:
        wanted = main_module_name(dist_name)
        if wanted in modules:
            return wanted
    return min(modules, key=lambda name: (len(name), name))


def find_files(
    root: Path,
    finders: Sequence[str] = KNOWN_FINDERS,
    exec_dirs: Sequence[str] = DEFAULT_EXEC_DIRS,
    *,
    skip_main_module: bool = False,
    main_module: str | None = None,
    dist_name: str | None = None,
) -> list[DistFile]:
    """Collect the candidate files, de-duplicated and sorted by name.

    Raises:
        ConfigError: If an unknown finder is requested
    """
    found: dict[str, DistFile] = {}
    for finder in finders:
        if finder == INSTALL_MODULES:
            batch = iter_install_modules(root)
        elif finder == PERL_EXEC_FILES:
            batch = iter_perl_exec_files(root, exec_dirs)
        else:
            allowed = ", ".join(KNOWN_FINDERS)
            raise ConfigError(f"Unknown finder: {finder!r}", f"Allowed finders: {allowed}")
        for f in batch:
            found.setdefault(f.name, f)

    files = [found[name] for name in sorted(found)]

    if skip_main_module:
        main = main_module or guess_main_module(files, dist_name)
        files = [f for f in files if f.name != main]

    return files
