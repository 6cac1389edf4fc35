# -----------------------------------------------------------------------------
# Copyright (C) 2025 Iliyas Jorio.
# This file is part of SvnHistory, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
import shlex
from xml.etree.ElementTree import ParseError

from svnhistory import settings
from svnhistory.exceptions import BackendUnavailable
from svnhistory.localization import *
from svnhistory.qt import *
from svnhistory.svndriver.parsers import parseSvnBlame, parseSvnInfo, parseSvnLog
from svnhistory.svndriver.svntypes import BlameLine, CommitRecord, SvnInfo
from svnhistory.svnri import PathNormalizer
from svnhistory.toolbox.benchmark import Benchmark

logger = logging.getLogger(__name__)


def argsIf(condition: bool, *args: str) -> tuple[str, ...]:
    if condition:
        return args
    else:
        return ()


class SvnDriver:
    """
    Runs the svn command line and parses its XML output.

    One driver serves one working copy (`directory`), or a remote
    repository when `directory` is empty. All calls block until svn exits
    and raise BackendUnavailable if anything goes wrong.
    """

    timeoutMs = 60_000

    def __init__(self, directory: str = "", remoteRoot: str = ""):
        self.directory = directory
        self.remoteRoot = remoteRoot
        self._normalizer: PathNormalizer | None = None

    def __repr__(self):
        return f"SvnDriver({self.directory or self.remoteRoot!r})"

    @property
    def isRemote(self) -> bool:
        return not self.directory

    def commandStem(self) -> list[str]:
        return shlex.split(settings.prefs.svnPath) + ["--non-interactive"]

    def runSync(self, *args: str) -> str:
        command = tuple(self.commandStem() + list(args))

        process = QProcess(None)
        process.setProgram(command[0])
        process.setArguments(list(command[1:]))
        if self.directory:
            process.setWorkingDirectory(self.directory)

        logger.info(f"runSync: {shlex.join(command)}")
        process.start()

        if not process.waitForStarted() or not process.waitForFinished(self.timeoutMs):
            errorString = process.errorString()
            process.kill()
            raise BackendUnavailable(_("Couldn’t run svn: {0}", errorString), command)

        stdout = process.readAllStandardOutput().data().decode(errors="replace")
        stderr = process.readAllStandardError().data().decode(errors="replace")

        if process.exitStatus() != QProcess.ExitStatus.NormalExit or process.exitCode() != 0:
            logger.warning(f"svn exited with code {process.exitCode()}: {stderr.strip()}")
            raise BackendUnavailable(stderr.strip() or _("svn exited with code {0}", process.exitCode()),
                                     command, stderr)

        return stdout

    def log(
            self,
            rfrom: str,
            rto: str,
            limit: int | None = None,
            target: str = "",
            mergeInfo: bool = False,
    ) -> list[CommitRecord]:
        args = ["log", "--xml", "-v", "-r", f"{rfrom}:{rto}",
                *argsIf(limit is not None, "-l", str(limit)),
                *argsIf(mergeInfo, "-g"),
                *argsIf(bool(target), "--", target)]

        with Benchmark("svn log"):
            stdout = self.runSync(*args)

        try:
            return parseSvnLog(stdout)
        except ParseError as exc:
            raise BackendUnavailable(_("Unexpected output from svn log: {0}", exc), tuple(args)) from exc

    def blame(self, target: str, mergeInfo: bool = False) -> list[BlameLine]:
        args = ["blame", "--xml", *argsIf(mergeInfo, "-g"), "--", target]

        with Benchmark("svn blame"):
            stdout = self.runSync(*args)

        try:
            return parseSvnBlame(stdout)
        except ParseError as exc:
            raise BackendUnavailable(_("Unexpected output from svn blame: {0}", exc), tuple(args)) from exc

    def info(self, target: str = "", revision: str = "") -> SvnInfo:
        target = target or self.directory or self.remoteRoot
        args = ["info", "--xml", *argsIf(bool(revision), "-r", revision), "--", target]
        stdout = self.runSync(*args)

        try:
            return parseSvnInfo(stdout)
        except (ParseError, ValueError) as exc:
            raise BackendUnavailable(_("Unexpected output from svn info: {0}", exc), tuple(args)) from exc

    def getPathNormalizer(self) -> PathNormalizer:
        if self._normalizer is None:
            info = self.info()
            checkoutDir = info.workingCopyRoot if not self.isRemote else None
            branchRoot = info.url if not self.isRemote else (self.remoteRoot or info.url)
            self._normalizer = PathNormalizer(info.repositoryRoot, branchRoot, checkoutDir)
        return self._normalizer
