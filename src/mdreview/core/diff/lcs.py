"""Sequence alignment: LCS anchors for blocks and minimal-record alignment for tokens"""

import difflib
from typing import Hashable, Sequence

from mdreview.core.models import ChangeKind


# Above this many DP cells the token aligner falls back to difflib.
MAX_DP_CELLS = 250_000

_START, _MATCH, _GAP = 0, 1, 2


def lcs_pairs(a: Sequence[Hashable], b: Sequence[Hashable]) -> list[tuple[int, int]]:
    """Index pairs (i, j) of one longest common subsequence of a and b, in order."""
    n, m = len(a), len(b)
    length = [[0] * (m + 1) for _ in range(n + 1)]
    for i in range(n - 1, -1, -1):
        row, below = length[i], length[i + 1]
        for j in range(m - 1, -1, -1):
            row[j] = below[j + 1] + 1 if a[i] == b[j] else max(below[j], row[j + 1])

    pairs = []
    i = j = 0
    while i < n and j < m:
        if a[i] == b[j]:
            pairs.append((i, j))
            i += 1
            j += 1
        elif length[i + 1][j] >= length[i][j + 1]:
            i += 1
        else:
            j += 1
    return pairs


def align_tokens(a: Sequence[str], b: Sequence[str]) -> list[tuple[ChangeKind, str]]:
    """Align two token sequences into (equal|delete|insert, token) steps.

    Maximises matched tokens; among maximal alignments picks the one with the
    fewest change records, where a maximal run of equal steps is one record and
    a maximal run of delete/insert steps is one record (it renders as a single
    delete, insert, or substitute). Remaining ties prefer match, then delete,
    then insert at the earliest position.
    """
    n, m = len(a), len(b)
    pre = 0
    while pre < n and pre < m and a[pre] == b[pre]:
        pre += 1
    suf = 0
    while suf < n - pre and suf < m - pre and a[n - 1 - suf] == b[m - 1 - suf]:
        suf += 1

    mid_a, mid_b = a[pre:n - suf], b[pre:m - suf]
    steps = [(ChangeKind.equal, t) for t in a[:pre]]
    if len(mid_a) * len(mid_b) > MAX_DP_CELLS:
        steps.extend(_matcher_steps(mid_a, mid_b))
    else:
        steps.extend(_min_record_steps(mid_a, mid_b, after_equal=pre > 0, before_equal=suf > 0))
    steps.extend((ChangeKind.equal, t) for t in a[n - suf:])
    return steps


def _min_record_steps(
    a: Sequence[str],
    b: Sequence[str],
    after_equal: bool,
    before_equal: bool,
    ) -> list[tuple[ChangeKind, str]]:
    n, m = len(a), len(b)
    if not n or not m:
        return [(ChangeKind.delete, t) for t in a] + [(ChangeKind.insert, t) for t in b]

    # cost[i][j][prev] = (-matches, records) for aligning a[i:] with b[j:]
    # when the step before position (i, j) was in state prev
    tail = 1 if before_equal else 0
    cost = [[None] * (m + 1) for _ in range(n + 1)]
    for i in range(n, -1, -1):
        for j in range(m, -1, -1):
            if i == n and j == m:
                cost[i][j] = ((0, tail), (0, 0), (0, tail))
                continue
            cost[i][j] = tuple(
                min(_candidates(a, b, cost, i, j, prev), key=lambda c: c[0])[0]
                for prev in (_START, _MATCH, _GAP)
            )

    steps = []
    i = j = 0
    prev = _MATCH if after_equal else _START
    while i < n or j < m:
        _, state, kind = min(_candidates(a, b, cost, i, j, prev), key=lambda c: c[0])
        if kind == ChangeKind.equal:
            steps.append((kind, a[i]))
            i += 1
            j += 1
        elif kind == ChangeKind.delete:
            steps.append((kind, a[i]))
            i += 1
        else:
            steps.append((kind, b[j]))
            j += 1
        prev = state
    return steps


def _candidates(a, b, cost, i, j, prev):
    """Moves from (i, j) in preference order: match, delete, insert."""
    n, m = len(a), len(b)
    out = []
    if i < n and j < m and a[i] == b[j]:
        neg, records = cost[i + 1][j + 1][_MATCH]
        out.append(((neg - 1, records + (prev != _MATCH)), _MATCH, ChangeKind.equal))
    if i < n:
        neg, records = cost[i + 1][j][_GAP]
        out.append(((neg, records + (prev != _GAP)), _GAP, ChangeKind.delete))
    if j < m:
        neg, records = cost[i][j + 1][_GAP]
        out.append(((neg, records + (prev != _GAP)), _GAP, ChangeKind.insert))
    return out


def _matcher_steps(a: Sequence[str], b: Sequence[str]) -> list[tuple[ChangeKind, str]]:
    matcher = difflib.SequenceMatcher(None, a, b, autojunk=False)
    steps = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            steps.extend((ChangeKind.equal, t) for t in a[i1:i2])
            continue
        steps.extend((ChangeKind.delete, t) for t in a[i1:i2])
        steps.extend((ChangeKind.insert, t) for t in b[j1:j2])
    return steps
