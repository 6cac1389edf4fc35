# -----------------------------------------------------------------------------
# Copyright (C) 2025 Iliyas Jorio.
# This file is part of SvnHistory, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

"""
Errors that may cross the boundary of the history and blame components.

The host editor is expected to turn these into user-visible messages;
the message text is already localized.
"""


class SvnHistoryError(Exception):
    pass


class BackendUnavailable(SvnHistoryError):
    """ An svn log/blame/info call failed. """

    def __init__(self, message: str, command: tuple[str, ...] = (), stderr: str = ""):
        super().__init__(message)
        self.command = command
        self.stderr = stderr


class ConfigurationInvalid(SvnHistoryError, ValueError):
    """ A preference has a value that we refuse to interpret. """


class AmbiguousDiffTarget(SvnHistoryError):
    """ There's no previous commit to diff a path against. Not fatal. """


class NotAFile(SvnHistoryError):
    """ Diff/open requested on a directory, or on a path that only exists remotely. """


class InvalidTarget(SvnHistoryError):
    """ A path, URL or revision typed in by the user can't be tracked. """
