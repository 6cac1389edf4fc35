# -----------------------------------------------------------------------------
# Copyright (C) 2025 Iliyas Jorio.
# This file is part of SvnHistory, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

import dataclasses
import enum
import logging

from svnhistory.appconsts import *
from svnhistory.exceptions import ConfigurationInvalid
from svnhistory.localization import *
from svnhistory.prefsfile import PrefsFile
from svnhistory.toolbox.benchmark import BENCHMARK_LOGGING_LEVEL

logger = logging.getLogger(__name__)

DEFAULT_LOG_LENGTH = 50


class LoggingLevel(enum.IntEnum):
    Benchmark = BENCHMARK_LOGGING_LEVEL
    Debug = logging.DEBUG
    Info = logging.INFO
    Warning = logging.WARNING


@dataclasses.dataclass
class Prefs(PrefsFile):
    _filename = "prefs.json"

    _category_log               : int                   = 0
    logLength                   : int | str             = DEFAULT_LOG_LENGTH
    gravatarsEnabled            : bool                  = True
    logMergeInfo                : bool                  = False

    _category_blame             : int                   = 0
    blameMergeInfo              : bool                  = False

    _category_advanced          : int                   = 0
    svnPath                     : str                   = "svn"
    verbosity                   : LoggingLevel          = LoggingLevel.Debug if APP_TESTMODE else LoggingLevel.Warning

    def pageSize(self) -> int:
        """
        Number of revisions to fetch per page ("log.length").

        Raises ConfigurationInvalid instead of silently falling back to
        the default if the user has typed in garbage.
        """
        raw = self.logLength
        if raw == "" or raw is None:
            return DEFAULT_LOG_LENGTH

        if isinstance(raw, bool):
            limit = -1
        elif isinstance(raw, int):
            limit = raw
        else:
            try:
                limit = int(str(raw).strip(), 10)
            except ValueError:
                limit = -1

        if limit <= 0:
            raise ConfigurationInvalid(_("Invalid log.length setting value: {0}", raw))
        return limit

    def applyVerbosity(self):
        logging.root.setLevel(self.verbosity)


prefs = Prefs()
