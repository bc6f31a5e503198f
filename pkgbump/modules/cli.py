# pkgbump/modules/cli.py
"""
CLI do pkgbump.

Uso:
  pkgbump 1.2.3                    # PKGBUILD atualizado em stdout
  pkgbump 1.2.3 --write --srcinfo  # grava PKGBUILD e .SRCINFO
  pkgbump 1.2.3 --commit           # grava e cria commit git

stdout recebe apenas o PKGBUILD; mensagens, progresso e erros vão para
stderr pelo console rich.
"""

from __future__ import annotations
import argparse
import os
import sys
from typing import List, Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
    TransferSpeedColumn,
)

from pkgbump import __version__
from pkgbump.modules import logger as _logger
from pkgbump.modules.bump import Bumper
from pkgbump.modules.config import config
from pkgbump.modules.errors import BumpError
from pkgbump.modules.post import PostActions
from pkgbump.modules.recipe import DEFAULT_RECIPE, Recipe


def make_console(no_color: bool) -> Console:
    if no_color:
        return Console(stderr=True, color_system=None, highlight=False, soft_wrap=True)
    return Console(stderr=True, highlight=False, soft_wrap=True)


def make_progress(console: Console, disable: bool) -> Progress:
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        DownloadColumn(),
        TransferSpeedColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=True,
        disable=disable,
    )


def build_argparser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="pkgbump",
                                 description="Update a PKGBUILD to a new upstream version")
    ap.add_argument("new_version", help="New value for pkgver")
    ap.add_argument("--recipe", help=f"Recipe file (default: {DEFAULT_RECIPE})")
    ap.add_argument("--reset-pkgrel", action="store_const", const=True, default=None,
                    help="Set pkgrel=1 when the version changes")
    ap.add_argument("--write", action="store_true", help="Overwrite the recipe file in place")
    ap.add_argument("--srcinfo", action="store_true",
                    help="Generate .SRCINFO with makepkg --printsrcinfo (implies --write)")
    ap.add_argument("--commit", action="store_true",
                    help="Commit the updated files with git (implies --write)")
    ap.add_argument("--report", metavar="PATH", help="Write a YAML report of the checksums")
    ap.add_argument("--config", "--conf", dest="config", help="Path to pkgbump.conf")
    ap.add_argument("--no-color", action="store_true", help="Disable color output")
    ap.add_argument("--quiet", action="store_true", help="Only print warnings and errors")
    ap.add_argument("--debug", action="store_true", help="Verbose output")
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return ap


def run(args: argparse.Namespace, console: Console) -> int:
    if args.config:
        config.reload([args.config], required=True)

    level = "debug" if args.debug else ("warning" if args.quiet else None)
    log = _logger.Logger("pkgbump", console=console, level=level)
    recipe_path = args.recipe or config.get("bump", "recipe_file", fallback=DEFAULT_RECIPE)
    recipe = Recipe.load(recipe_path)
    bumper = Bumper(logger=log, reset_pkgrel=args.reset_pkgrel)

    with make_progress(console, disable=args.quiet) as progress:
        def on_source(index, source):
            task = progress.add_task(source.filename, total=None)

            def update(done, total):
                progress.update(task, completed=done, total=total)
            return update

        result = bumper.bump(args.new_version, recipe=recipe, on_source=on_source)

    sys.stdout.write(result.recipe.text)
    sys.stdout.flush()

    if args.report:
        path = result.write_report(args.report)
        log.info(f"Relatório gravado em {path}")

    if args.write or args.srcinfo or args.commit:
        post = PostActions(cwd=os.path.dirname(os.path.abspath(recipe_path)), logger=log)
        files = [post.write_recipe(result.recipe)]
        if args.srcinfo:
            files.append(post.generate_srcinfo(os.path.basename(recipe_path)))
        if args.commit:
            post.git_commit(args.new_version, files)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    args = build_argparser().parse_args(argv)
    console = make_console(args.no_color)
    try:
        return run(args, console)
    except BumpError as e:
        console.print(f"Error: {e}", markup=False, style=None if args.no_color else "red")
        return 1
    except KeyboardInterrupt:
        console.print("Error: interrupted", markup=False)
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
