# -----------------------------------------------------------------------------
# Copyright (C) 2025 Iliyas Jorio.
# This file is part of SvnHistory, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

from .logcache import HEAD, GENESIS, CacheEntry, LogCache, Persisted, fetchMore, needFetch
from .logitem import ActionData, ItemPresentation, LogItem, LogItemKind
from .difftarget import DiffRequest, OpenRequest, findPreviousCommit, findSimilarPath, resolveDiffTarget
from .repolog import RepoLog
from .itemlog import ItemLog
