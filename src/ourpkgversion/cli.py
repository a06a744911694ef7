from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path

from ourpkgversion.core.config import ConfigResolver, MungeSettings
from ourpkgversion.core.errors import ConfigError, OurPkgVersionError
from ourpkgversion.core.finder import detect_role, find_files
from ourpkgversion.core.logging import get_logger, set_colors, set_verbosity
from ourpkgversion.core.model import DistFile, Munged, Outcome
from ourpkgversion.core.munger import munge_files
from ourpkgversion.parallel import run_parallel

logger = get_logger(__name__)


@dataclass(frozen=True)
class CLIArgs:
    """Normalized CLI inputs. None means "not given on the command line"."""

    paths: tuple[str, ...]
    root: str
    config_path: str | None
    version: str | None
    is_trial: bool | None
    overwrite: bool | None
    underscore_eval_version: bool | None
    skip_main_module: bool | None
    main_module: str | None
    dist_name: str | None
    dry_run: bool | None
    jobs: int | None
    verbosity: str | None

    def as_config(self) -> dict[str, object]:
        cfg: dict[str, object] = {
            "version": self.version,
            "is_trial": self.is_trial,
            "overwrite": self.overwrite,
            "underscore_eval_version": self.underscore_eval_version,
            "skip_main_module": self.skip_main_module,
            "main_module": self.main_module,
            "dist_name": self.dist_name,
            "dry_run": self.dry_run,
            "jobs": self.jobs,
        }
        if self.verbosity is not None:
            cfg["logging"] = {"level": self.verbosity}
        return cfg


def parse_args(argv: list[str]) -> CLIArgs:
    p = argparse.ArgumentParser(
        prog="ourpkgversion",
        description="Replace '# VERSION' comments in Perl files with our $VERSION assignments.",
    )

    p.add_argument("paths", nargs="*", help="Files to munge (default: discover under --root)")
    p.add_argument("--root", default=".", help="Distribution root (default: current directory)")
    p.add_argument("--config", dest="config_path", metavar="PATH", default=None)
    p.add_argument("--dist-version", dest="version", metavar="VERSION", default=None)

    p.add_argument("--trial", dest="is_trial", action="store_true", default=None)
    p.add_argument("--overwrite", action="store_true", default=None)
    p.add_argument("--underscore-eval-version", action="store_true", default=None)
    p.add_argument("--skip-main-module", action="store_true", default=None)
    p.add_argument("--main-module", metavar="PATH", default=None)
    p.add_argument("--dist-name", metavar="NAME", default=None)
    p.add_argument("--dry-run", action="store_true", default=None, help="Report without writing")
    p.add_argument("-j", "--jobs", type=int, default=None, help="Files munged in parallel")

    v = p.add_mutually_exclusive_group()
    v.add_argument("-q", "--quiet", dest="verbosity", action="store_const", const="quiet")
    v.add_argument("-n", "--normal", dest="verbosity", action="store_const", const="normal")
    v.add_argument("-v", "--verbose", dest="verbosity", action="store_const", const="verbose")
    v.add_argument("-d", "--debug", dest="verbosity", action="store_const", const="debug")
    v.add_argument(
        "--verbosity",
        dest="verbosity",
        choices=["debug", "verbose", "normal", "quiet"],
        default=None,
    )

    ns = p.parse_args(argv)

    return CLIArgs(
        paths=tuple(str(x) for x in ns.paths),
        root=str(ns.root),
        config_path=str(ns.config_path) if ns.config_path is not None else None,
        version=str(ns.version) if ns.version is not None else None,
        is_trial=ns.is_trial,
        overwrite=ns.overwrite,
        underscore_eval_version=ns.underscore_eval_version,
        skip_main_module=ns.skip_main_module,
        main_module=ns.main_module,
        dist_name=ns.dist_name,
        dry_run=ns.dry_run,
        jobs=ns.jobs,
        verbosity=ns.verbosity,
    )


def build_settings(cli: CLIArgs) -> MungeSettings:
    root = Path(cli.root).resolve()
    config_path = Path(cli.config_path) if cli.config_path else None
    resolver = ConfigResolver(cli_args=cli.as_config(), root=root, project_config_path=config_path)
    return resolver.resolve_settings()


def select_files(cli: CLIArgs, settings: MungeSettings) -> list[DistFile]:
    if not cli.paths:
        return find_files(
            settings.root,
            settings.finders,
            settings.exec_dirs,
            skip_main_module=settings.skip_main_module,
            main_module=settings.main_module,
            dist_name=settings.dist_name,
        )

    files: list[DistFile] = []
    for raw in cli.paths:
        path = Path(raw).resolve()
        try:
            name = path.relative_to(settings.root).as_posix()
        except ValueError:
            name = str(path)
        files.append(DistFile(path=path, name=name, role=detect_role(path, settings.exec_dirs, settings.root)))
    return files


def render_summary(results: list[tuple[DistFile, Outcome]], dry_run: bool) -> str:
    munged = sum(1 for _f, o in results if isinstance(o, Munged))
    skipped = len(results) - munged
    suffix = " (dry run)" if dry_run else ""
    return f"munged={munged} skipped={skipped}{suffix}\n"


def main(argv: list[str] | None = None) -> int:
    cli = parse_args(sys.argv[1:] if argv is None else argv)

    try:
        settings = build_settings(cli)
    except ConfigError as e:
        logger.error(str(e))
        return 2

    set_verbosity(settings.logging_level)
    set_colors(settings.color)

    try:
        files = select_files(cli, settings)
        logger.verbose(f"{len(files)} candidate file(s) under {settings.root}")
        if settings.jobs > 1:
            results = run_parallel(
                files,
                settings.mode,
                max_concurrent=settings.jobs,
                dry_run=settings.dry_run,
            )
        else:
            results = munge_files(files, settings.mode, dry_run=settings.dry_run)
    except ConfigError as e:
        logger.error(str(e))
        return 2
    except OurPkgVersionError as e:
        logger.error(str(e))
        return 1

    sys.stdout.write(render_summary(results, settings.dry_run))
    return 0
