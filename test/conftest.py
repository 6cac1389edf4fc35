# -----------------------------------------------------------------------------
# Copyright (C) 2025 Iliyas Jorio.
# This file is part of SvnHistory, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Generator

import pytest


@pytest.fixture(scope='session', autouse=True)
def setUpLogging():
    rootLogger = logging.root
    rootLogger.setLevel(logging.DEBUG)

    yield

    # Chatty destructors may cause spam after pytest has wound down.
    # Work around https://github.com/pytest-dev/pytest/issues/5502
    for handler in rootLogger.handlers:
        rootLogger.removeHandler(handler)


@pytest.fixture
def tempDir() -> Generator[tempfile.TemporaryDirectory, None, None]:
    location = os.environ.get("SVNHISTORY_TEMPDIR", None)

    td = tempfile.TemporaryDirectory(prefix="svnhistorytest-", dir=location)
    yield td
    td.cleanup()


@pytest.fixture(autouse=True)
def freshPrefs():
    """ Give each test factory-default prefs, and never touch the user's actual prefs file. """
    from svnhistory import qt
    from svnhistory.appconsts import APP_TESTMODE
    from svnhistory.settings import prefs

    assert APP_TESTMODE
    qt.QStandardPaths.setTestModeEnabled(True)

    prefs.reset()
    yield prefs
    prefs.reset()
