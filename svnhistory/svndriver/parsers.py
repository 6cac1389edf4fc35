# -----------------------------------------------------------------------------
# Copyright (C) 2025 Iliyas Jorio.
# This file is part of SvnHistory, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

import logging
from xml.etree import ElementTree

from svnhistory.svndriver.svntypes import *

_logger = logging.getLogger(__name__)


def _text(element: ElementTree.Element | None, tag: str) -> str:
    if element is None:
        return ""
    child = element.find(tag)
    if child is None or child.text is None:
        return ""
    return child.text


def _parsePathAction(action: str) -> PathAction:
    try:
        return PathAction(action)
    except ValueError:
        _logger.warning(f"unknown svn path action '{action}'")
        return PathAction.Modified


def _parseNodeKind(kind: str | None) -> NodeKind:
    try:
        return NodeKind(kind or "")
    except ValueError:
        return NodeKind.Unknown


def _parseLogEntry(element: ElementTree.Element, fromMerge: bool) -> CommitRecord:
    paths = []
    for pathElement in element.iterfind("paths/path"):
        paths.append(PathChange(
            path=pathElement.text or "",
            action=_parsePathAction(pathElement.get("action", "M")),
            kind=_parseNodeKind(pathElement.get("kind")),
            copyFromPath=pathElement.get("copyfrom-path", ""),
            copyFromRevision=pathElement.get("copyfrom-rev", "")))

    return CommitRecord(
        revision=element.get("revision", ""),
        author=_text(element, "author"),
        date=_text(element, "date"),
        message=_text(element, "msg"),
        paths=tuple(paths),
        fromMerge=fromMerge)


def _flattenLogEntry(element: ElementTree.Element, fromMerge: bool):
    yield _parseLogEntry(element, fromMerge)

    # With --use-merge-history, merged revisions are nested inside the
    # entry that merged them. Hoist them up right after their parent.
    for subElement in element.iterfind("logentry"):
        yield from _flattenLogEntry(subElement, fromMerge=True)


def parseSvnLog(content: str) -> list[CommitRecord]:
    """
    Parse the output of `svn log --xml -v`, newest first.

    Merge-derived sub-entries are flattened into the list directly after
    the entry that pulled them in, and flagged with `fromMerge`.
    """
    root = ElementTree.fromstring(content)
    entries = []
    for element in root.iterfind("logentry"):
        entries.extend(_flattenLogEntry(element, fromMerge=False))
    return entries


def parseSvnBlame(content: str) -> list[BlameLine]:
    """
    Parse the output of `svn blame --xml`. Lines that have no commit are
    uncommitted local changes.

    With --use-merge-history, svn reports both the merge commit and the
    original commit (<merged>); the original commit wins.
    """
    root = ElementTree.fromstring(content)
    target = root.find("target")
    if target is None:
        return []

    lines = []
    for entry in target.iterfind("entry"):
        lineNumber = int(entry.get("line-number", "0"), 10)

        commitElement = entry.find("merged/commit")
        if commitElement is None:
            commitElement = entry.find("commit")

        commit = None
        if commitElement is not None:
            commit = BlameCommit(
                revision=commitElement.get("revision", ""),
                author=_text(commitElement, "author"),
                date=_text(commitElement, "date"))

        lines.append(BlameLine(lineNumber, commit))

    return lines


def parseSvnInfo(content: str) -> SvnInfo:
    root = ElementTree.fromstring(content)
    entry = root.find("entry")
    if entry is None:
        raise ValueError("svn info: no entry")

    return SvnInfo(
        url=_text(entry, "url"),
        revision=entry.get("revision", ""),
        repositoryRoot=_text(entry.find("repository"), "root"),
        kind=_parseNodeKind(entry.get("kind")),
        workingCopyRoot=_text(entry.find("wc-info"), "wcroot-abspath"))
