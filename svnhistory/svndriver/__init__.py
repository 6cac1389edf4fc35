# -----------------------------------------------------------------------------
# Copyright (C) 2025 Iliyas Jorio.
# This file is part of SvnHistory, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

from .svntypes import BlameCommit, BlameLine, CommitRecord, NodeKind, PathAction, PathChange, SvnInfo, normalizeRepoPath
from .svndriver import SvnDriver
from .svndriver import argsIf
