# -----------------------------------------------------------------------------
# Copyright (C) 2025 Iliyas Jorio.
# This file is part of SvnHistory, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

from __future__ import annotations as _annotations

import logging as _logging
import os as _os
import sys as _sys


def _driverFor(target: str):
    from svnhistory.svndriver import SvnDriver
    from svnhistory.svnri import isUrl

    if isUrl(target):
        return SvnDriver("", target)
    path = _os.path.abspath(target)
    return SvnDriver(path if _os.path.isdir(path) else _os.path.dirname(path))


def logCommandLineTool(args):  # pragma: no cover
    from svnhistory.history.common import commitLabel, commitDescription
    from svnhistory.history.logcache import CacheEntry, Persisted, fetchMore
    from svnhistory.settings import prefs
    from svnhistory.toolbox.benchmark import Benchmark

    prefs.logMergeInfo = args.merge_info
    driver = _driverFor(args.target)
    target = args.target if driver.isRemote else _os.path.abspath(args.target)
    entry = CacheEntry(target, driver, Persisted(commitFrom=args.revision))

    printed = 0
    for page in range(args.pages):
        with Benchmark(f"Page {page + 1}"):
            fetchMore(entry, args.limit)
        for commit in entry.entries[printed:]:
            merged = " (merged)" if commit.fromMerge else ""
            print(f"{commitLabel(commit)}{merged} -- {commitDescription(commit)}")
        printed = len(entry.entries)
        if entry.isComplete:
            print("-- end of history --")
            break


def blameCommandLineTool(args):  # pragma: no cover
    from svnhistory.blame import GutterBlame
    from svnhistory.settings import prefs

    prefs.blameMergeInfo = args.merge_info
    path = _os.path.abspath(args.path)
    gutter = GutterBlame(path, _driverFor(path))
    annotations = gutter.decorate()

    if args.ranges:
        for blame in gutter.blames:
            rev = f"r{blame.revision}" if blame.isCommitted else "uncommitted"
            print(f"[{blame.lineStart:5d}, {blame.lineEnd:5d}) {rev}")
        return

    with open(path, encoding="utf-8", errors="replace") as f:
        for annotation, text in zip(annotations, f):
            print(f"{annotation.text[:30]:30} {annotation.line + 1:5d} {text.rstrip()}")


def main():  # pragma: no cover
    from argparse import ArgumentParser

    from svnhistory.appconsts import APP_DISPLAY_NAME
    from svnhistory.exceptions import SvnHistoryError
    from svnhistory.qt import QCoreApplication
    from svnhistory.settings import prefs
    from svnhistory.toolbox.benchmark import BENCHMARK_LOGGING_LEVEL

    parser = ArgumentParser(description=f"{APP_DISPLAY_NAME} log/blame tool")
    parser.add_argument("-b", "--benchmark", action="store_true", help="Print timings")
    subparsers = parser.add_subparsers(dest="command", required=True)

    logParser = subparsers.add_parser("log", help="Print revision history, one page at a time")
    logParser.add_argument("target", help="Working copy path or repository URL")
    logParser.add_argument("-n", "--pages", type=int, default=1, help="Number of pages to fetch")
    logParser.add_argument("-l", "--limit", type=int, default=0, help="Page size (default: log.length preference)")
    logParser.add_argument("-r", "--revision", default="HEAD", help="Revision to start from")
    logParser.add_argument("-g", "--merge-info", action="store_true", help="Include merged revisions")
    logParser.set_defaults(func=logCommandLineTool)

    blameParser = subparsers.add_parser("blame", help="Print per-line authorship of a file")
    blameParser.add_argument("path", help="File path in a working copy")
    blameParser.add_argument("-g", "--merge-info", action="store_true", help="Include merged revisions")
    blameParser.add_argument("--ranges", action="store_true", help="Print aggregated ranges instead of annotated text")
    blameParser.set_defaults(func=blameCommandLineTool)

    args = parser.parse_args()

    app = QCoreApplication(_sys.argv)
    app.setApplicationName(APP_DISPLAY_NAME)

    prefs.load()
    _logging.basicConfig(level=prefs.verbosity)
    _logging.captureWarnings(True)
    if args.benchmark:
        _logging.root.setLevel(BENCHMARK_LOGGING_LEVEL)

    try:
        args.func(args)
    except SvnHistoryError as exc:
        print(f"{parser.prog}: {exc}", file=_sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    _sys.exit(main())
