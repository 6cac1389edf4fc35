# -----------------------------------------------------------------------------
# Copyright (C) 2025 Iliyas Jorio.
# This file is part of SvnHistory, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

from __future__ import annotations

import dataclasses
import enum
import json
import logging
import os

from svnhistory.appconsts import *
from svnhistory.qt import *

logger = logging.getLogger(__name__)


class PrefsFile:
    """
    Dataclass mix-in that (de)serializes its public fields to a JSON file.

    Fields whose names start with an underscore are never written.
    Unknown keys in the file are ignored; values whose type doesn't match
    the field's default are dropped with a warning.
    """

    _filename = ""
    _allowMakeDirs = True
    _dirty = False

    def getParentDir(self) -> str:
        location = QStandardPaths.StandardLocation.AppConfigLocation
        path = QStandardPaths.writableLocation(location)
        return os.path.join(path, APP_SYSTEM_NAME) if path else ""

    def fullPath(self) -> str:
        parentDir = self.getParentDir()
        if not parentDir:
            return ""
        return os.path.join(parentDir, self._filename)

    def setDirty(self):
        self._dirty = True

    def isDirty(self) -> bool:
        return self._dirty

    def write(self, force=False) -> str:
        if not force and not self._dirty:
            return ""

        path = self.fullPath()
        if not path:
            logger.warning(f"Cannot write {self._filename}: no parent directory")
            return ""

        if self._allowMakeDirs:
            os.makedirs(os.path.dirname(path), exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(self._toDict(), f, indent="\t")

        self._dirty = False
        return path

    def load(self) -> bool:
        path = self.fullPath()
        if not path:
            return False

        try:
            with open(path, encoding="utf-8") as f:
                obj = json.load(f)
        except FileNotFoundError:
            return False
        except (OSError, ValueError) as exc:
            logger.warning(f"Cannot load {path}: {exc}")
            return False

        self._fromDict(obj)
        self._dirty = False
        return True

    def reset(self):
        defaults = type(self)()
        for field in self._publicFields():
            setattr(self, field.name, getattr(defaults, field.name))
        self.setDirty()

    def _publicFields(self):
        return [f for f in dataclasses.fields(self) if not f.name.startswith("_")]

    def _toDict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in self._publicFields()}

    def _fromDict(self, obj: dict):
        for field in self._publicFields():
            try:
                value = obj[field.name]
            except KeyError:
                continue

            default = getattr(self, field.name)
            if isinstance(default, enum.Enum):
                try:
                    value = type(default)(value)
                except ValueError:
                    logger.warning(f"{self._filename}: bad enum value for {field.name}: {value!r}")
                    continue
            elif default is not None and not isinstance(value, type(default)):
                # Let the consumer validate strings typed into numeric settings
                if not isinstance(value, str):
                    logger.warning(f"{self._filename}: type mismatch for {field.name}: {value!r}")
                    continue

            setattr(self, field.name, value)
