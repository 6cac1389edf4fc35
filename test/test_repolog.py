# -----------------------------------------------------------------------------
# Copyright (C) 2025 Iliyas Jorio.
# This file is part of SvnHistory, distributed under the GNU GPL v3.
# For full terms, see the included LICENSE file.
# -----------------------------------------------------------------------------

import os

import pytest

from svnhistory.exceptions import AmbiguousDiffTarget, InvalidTarget, NotAFile
from svnhistory.history import *
from .util import *

TRUNK = REPO_ROOT + "/trunk"


def scenarioHistory():
    # /trunk/a.c is touched at positions 3 and 7 (r7 and r3)
    history = []
    for rev in range(10, 0, -1):
        if rev in (7, 3):
            history.append(commit(rev, f"Touch a.c in r{rev}", change("/trunk/a.c"), change("/trunk/b.c")))
        else:
            history.append(commit(rev, f"Other work in r{rev}", change("/trunk/other.c")))
    return history


def setUpRepoLog(tempDir, history, baseRevision=8, workspaceRoot=False):
    wc = makeWorkingCopy(tempDir, "proj", {"a.c": "int main;\n", "src/util.c": "\n"})
    backend = FakeSvnBackend(history, directory=wc, branchUrl=TRUNK, baseRevision=baseRevision)
    model = makeModel({wc: backend})
    model.scanWorkspace([wc if workspaceRoot else os.path.realpath(tempDir.name)])
    repoLog = RepoLog(model)
    return repoLog, model, backend, wc


def expand(repoLog, target=TRUNK) -> list[LogItem]:
    return repoLog.children(LogItem.repo(target))


def findCommitItem(items: list[LogItem], rev: int) -> LogItem:
    return next(i for i in items if i.kind == LogItemKind.Commit and i.commit.revisionNumber == rev)


def findPathItem(repoLog, items: list[LogItem], rev: int, path: str) -> LogItem:
    commitItem = findCommitItem(items, rev)
    return next(i for i in repoLog.children(commitItem) if i.pathChange.path == path)


def testAutoDiscoveredRoot(tempDir):
    repoLog, model, backend, wc = setUpRepoLog(tempDir, scenarioHistory())

    roots = repoLog.children()
    assert [r.kind for r in roots] == [LogItemKind.Repo]
    assert roots[0].target == TRUNK

    p = repoLog.describe(roots[0])
    assert p.label == TRUNK
    assert p.contextValue == "repo"
    assert p.iconName == "folder"
    assert p.collapsible

    # Nothing is fetched until the root is expanded
    assert backend.logCalls == []


def testExpandRootFetchesFirstPage(tempDir, freshPrefs):
    freshPrefs.logLength = 5
    repoLog, model, backend, wc = setUpRepoLog(tempDir, scenarioHistory(), baseRevision=8)

    items = expand(repoLog)
    assert len(backend.logCalls) == 1
    assert backend.logCalls[0][1:] == ("HEAD", "1", 5, TRUNK)

    kinds = [i.kind for i in items]
    assert kinds == [LogItemKind.Commit] * 2 + [LogItemKind.Action] + [LogItemKind.Commit] * 3 + [LogItemKind.Action]

    # BASE marker right above the working copy's base revision
    assert items[2].action.label == "BASE"
    assert items[3].commit.revision == "8"

    # Load more at the bottom
    loadMore = repoLog.describe(items[-1])
    assert loadMore.label == "Load another 5 revisions"
    assert loadMore.command == "loadMore"
    assert loadMore.iconName == "icon-unfold"

    # Expanding again doesn't fetch again
    expand(repoLog)
    assert len(backend.logCalls) == 1


def testLoadMore(tempDir, qtbot, freshPrefs):
    freshPrefs.logLength = 4
    repoLog, model, backend, wc = setUpRepoLog(tempDir, scenarioHistory(), baseRevision=10)

    items = expand(repoLog)
    assert [i.commit.revision for i in items if i.kind == LogItemKind.Commit] == ["10", "9", "8", "7"]

    with qtbot.waitSignal(repoLog.changed):
        assert repoLog.loadMore(TRUNK)

    items = expand(repoLog)
    assert [i.commit.revision for i in items if i.kind == LogItemKind.Commit] == [str(r) for r in range(10, 2, -1)]
    assert backend.logCalls[1][1] == "6"

    # No BASE marker: the working copy is up to date
    assert not any(i.kind == LogItemKind.Action and i.action.label == "BASE" for i in items)


def testCommitItems(tempDir):
    repoLog, model, backend, wc = setUpRepoLog(tempDir, scenarioHistory())
    items = expand(repoLog)
    commitItem = findCommitItem(items, 7)

    p = repoLog.describe(commitItem)
    assert p.label == "Touch a.c in r7 • r7"
    assert p.contextValue == "commit"
    assert p.iconName.startswith("https://www.gravatar.com/avatar/")
    assert "Author: alice" in p.tooltip

    details = repoLog.children(commitItem)
    assert [d.kind for d in details] == [LogItemKind.CommitDetail] * 2
    assert all(d.revision == "7" and d.target == TRUNK for d in details)
    assert repoLog.commitFor(details[0]) is commitItem.commit

    p = repoLog.describe(details[0])
    assert p.label == "a.c"
    assert p.tooltip == "a.c"
    assert p.iconName == "status-modified"
    assert p.contextValue == "diffable"
    assert p.command == "openDiff"


def testOpenDiffFromCache(tempDir):
    repoLog, model, backend, wc = setUpRepoLog(tempDir, scenarioHistory())
    items = expand(repoLog)
    callsBefore = len(backend.calls)

    request = repoLog.openDiff(findPathItem(repoLog, items, 7, "/trunk/a.c"))
    assert request == DiffRequest(TRUNK + "/a.c", "3", TRUNK + "/a.c", "7")
    assert len(backend.calls) == callsBefore


def testOpenDiffFallsBackToBackend(tempDir, freshPrefs):
    freshPrefs.logLength = 5
    repoLog, model, backend, wc = setUpRepoLog(tempDir, scenarioHistory())
    items = expand(repoLog)  # r10...r6 only

    request = repoLog.openDiff(findPathItem(repoLog, items, 7, "/trunk/a.c"))
    assert request == DiffRequest(TRUNK + "/a.c", "3", TRUNK + "/a.c", "7")
    assert backend.logCalls[-1][1:] == ("7", "1", 2, TRUNK + "/a.c@7")


def testOpenDiffOnFirstRevisionOfFile(tempDir):
    history = [
        commit(3, "", change("/trunk/a.c")),
        commit(2, "", change("/trunk/a.c", "A")),
        commit(1, "", change("/trunk", "A", "dir")),
    ]
    repoLog, model, backend, wc = setUpRepoLog(tempDir, history)
    items = expand(repoLog)

    with pytest.raises(AmbiguousDiffTarget):
        repoLog.openDiff(findPathItem(repoLog, items, 2, "/trunk/a.c"))

    with pytest.raises(NotAFile):
        repoLog.openDiff(findPathItem(repoLog, items, 1, "/trunk"))

    # Cache is untouched by failed diff requests
    assert revs(repoLog.cache[TRUNK].entries) == [3, 2, 1]


def testOpenDiffFollowsCopy(tempDir):
    history = [
        commit(9, "", change("/trunk/a.c", "A", copyFrom="/branches/x/a.c", copyRev="6")),
        commit(5, "", change("/branches/x/a.c")),
        commit(4, "", change("/branches/x/a.c", "A")),
    ]
    repoLog, model, backend, wc = setUpRepoLog(tempDir, history)
    items = expand(repoLog)

    request = repoLog.openDiff(findPathItem(repoLog, items, 9, "/trunk/a.c"))
    assert request == DiffRequest(REPO_ROOT + "/branches/x/a.c", "5", TRUNK + "/a.c", "9")


def testOpenDiffDoesntCrossDeletion(tempDir):
    history = [
        commit(9, "", change("/trunk/a.c")),
        commit(8, "", change("/trunk/a.c", "D")),
        commit(7, "", change("/trunk/a.c")),
    ]
    repoLog, model, backend, wc = setUpRepoLog(tempDir, history)
    items = expand(repoLog)

    with pytest.raises(AmbiguousDiffTarget):
        repoLog.openDiff(findPathItem(repoLog, items, 9, "/trunk/a.c"))

    with pytest.raises(AmbiguousDiffTarget):
        repoLog.openDiff(findPathItem(repoLog, items, 8, "/trunk/a.c"))


def testOpenFile(tempDir):
    history = [
        commit(5, "", change("/trunk/a.c"), change("/trunk/src", "A", "dir"), change("/branches/x/z.c")),
    ]
    repoLog, model, backend, wc = setUpRepoLog(tempDir, history)
    items = expand(repoLog)

    fileItem = findPathItem(repoLog, items, 5, "/trunk/a.c")
    assert repoLog.openFileRemote(fileItem) == OpenRequest(TRUNK + "/a.c", "5")
    assert repoLog.openFileLocal(fileItem) == os.path.join(wc, "a.c")

    dirItem = findPathItem(repoLog, items, 5, "/trunk/src")
    with pytest.raises(NotAFile):
        repoLog.openFileRemote(dirItem)
    with pytest.raises(NotAFile):
        repoLog.openFileLocal(dirItem)

    remoteOnlyItem = findPathItem(repoLog, items, 5, "/branches/x/z.c")
    assert repoLog.openFileRemote(remoteOnlyItem) == OpenRequest(REPO_ROOT + "/branches/x/z.c", "5")
    with pytest.raises(NotAFile):
        repoLog.openFileLocal(remoteOnlyItem)


def testAddRemoteUrl(tempDir, qtbot):
    repoLog, model, backend, wc = setUpRepoLog(tempDir, scenarioHistory())
    url = REPO_ROOT + "/branches/feature"

    with qtbot.waitSignal(repoLog.changed):
        entry = repoLog.addRepolike(url)

    assert entry.persisted.userAdded
    assert entry.persisted.commitFrom == "HEAD"
    assert repoLog.cache.targets() == [TRUNK, url]

    p = repoLog.describe(LogItem.repo(url))
    assert p.label == "∘ " + url
    assert p.contextValue == "userrepo"
    assert p.iconName == "icon-repo"

    with pytest.raises(InvalidTarget):
        repoLog.addRepolike(url)


def testAddRemoteUrlWithRevision(tempDir):
    repoLog, model, backend, wc = setUpRepoLog(tempDir, scenarioHistory())
    url = REPO_ROOT + "/tags/1.0"

    with pytest.raises(InvalidTarget):
        repoLog.addRepolike(url, "yesterday")
    assert url not in repoLog.cache

    entry = repoLog.addRepolike(url, "42")
    assert entry.persisted.commitFrom == "42"


def testAddPathInWorkingCopy(tempDir):
    repoLog, model, backend, wc = setUpRepoLog(tempDir, scenarioHistory())

    entry = repoLog.addRepolike(os.path.join("proj", "src"))
    assert entry.target == TRUNK + "/src"
    assert entry.backend is backend
    assert entry.persisted.userAdded
    assert entry.persisted.baseRevision == 8


def testAddRepoRootRelativePath(tempDir):
    repoLog, model, backend, wc = setUpRepoLog(tempDir, scenarioHistory(), workspaceRoot=True)
    backend.infos["^/branches/x"] = SvnInfo(REPO_ROOT + "/branches/x", "9", REPO_ROOT)

    entry = repoLog.addRepolike("^/branches/x")
    assert entry.target == REPO_ROOT + "/branches/x"
    assert entry.backend.isRemote


def testAddRepoRootRelativePathWithoutWorkspaceRepo(tempDir):
    repoLog, model, backend, wc = setUpRepoLog(tempDir, scenarioHistory())
    with pytest.raises(InvalidTarget, match="workspace root"):
        repoLog.addRepolike("^/branches/x")


def testAddBogusPath(tempDir):
    repoLog, model, backend, wc = setUpRepoLog(tempDir, scenarioHistory())
    with pytest.raises(InvalidTarget):
        repoLog.addRepolike(os.path.join(os.path.realpath(tempDir.name), "not-a-working-copy"))


def testRefreshOnRepositoryChange(tempDir, qtbot):
    repoLog, model, backend, wc = setUpRepoLog(tempDir, scenarioHistory())
    url = REPO_ROOT + "/branches/feature"
    repoLog.addRepolike(url)

    with qtbot.waitSignal(repoLog.changed):
        model.closeWorkingCopy(wc)

    assert repoLog.cache.targets() == [url]

    repoLog.removeRepo(url)
    assert repoLog.children() == []


def testRefreshEntry(tempDir, freshPrefs):
    freshPrefs.logLength = 3
    repoLog, model, backend, wc = setUpRepoLog(tempDir, scenarioHistory())
    expand(repoLog)
    repoLog.loadMore(TRUNK)
    assert len(repoLog.cache[TRUNK].entries) == 6

    repoLog.refreshEntry(TRUNK)
    assert repoLog.cache[TRUNK].entries == []

    expand(repoLog)
    assert revs(repoLog.cache[TRUNK].entries) == [10, 9, 8]
    assert backend.logCalls[-1][1] == "HEAD"


def testOpenMergedCommit(tempDir):
    repoLog, model, backend, wc = setUpRepoLog(tempDir, [])
    backend.pages = [[
        commit(20, "Merge x", change("/trunk/a.c")),
        commit(15, "Fix on x", change("/branches/x/a.c"), fromMerge=True),
        commit(14, "", change("/branches/x/a.c")),
    ]]
    items = expand(repoLog)

    mergedItem = findCommitItem(items, 15)
    assert mergedItem.commit.fromMerge
    [pathItem] = repoLog.children(mergedItem)

    assert repoLog.commitFor(pathItem) is mergedItem.commit
    request = repoLog.openDiff(pathItem)
    assert request == DiffRequest(REPO_ROOT + "/branches/x/a.c", "14", REPO_ROOT + "/branches/x/a.c", "15")
    assert repoLog.openFileRemote(pathItem) == OpenRequest(REPO_ROOT + "/branches/x/a.c", "15")


def testStaleItemsAfterRefresh(tempDir):
    repoLog, model, backend, wc = setUpRepoLog(tempDir, scenarioHistory())
    items = expand(repoLog)
    pathItem = findPathItem(repoLog, items, 7, "/trunk/a.c")

    repoLog.refreshEntry(TRUNK)
    with pytest.raises(InvalidTarget):
        repoLog.openDiff(pathItem)

    repoLog.removeRepo(TRUNK)
    with pytest.raises(InvalidTarget):
        repoLog.openFileRemote(pathItem)
