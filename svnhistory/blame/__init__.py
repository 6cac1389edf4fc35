# -----------------------------------------------------------------------------
# Copyright (C) 2025 Iliyas Jorio.
# This file is part of SvnHistory, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

from .blameranges import BlameRange, BlameRangeCommit, transformBlames, commitRange, rangeAt, siblingRanges, selectionLines
from .gutterblame import GutterAnnotation, GutterBlame, blameCurrentFile, getRevisionMessages
