"""
区间匹配模块 - 贪心的不可嵌套区间选择与括号配对

Both inline parsing and the highlighter need to pick a consistent set of
non-overlapping spans out of many overlapping candidates: backtick runs,
comments and strings. ``match_spans`` implements the greedy rule shared by
all of them, ``match_brackets`` the balanced pairing used for links.
"""

from bisect import bisect_right
from typing import Sequence


def match_spans(starts: Sequence[int], ends: Sequence[int]) -> list[tuple[int, int]]:
    """
    选择从左到右的贪心区间链

    The first candidate is always accepted; after an accepted candidate the
    next one to be accepted is the first whose start lies strictly after the
    accepted end. Reachability along that chain is found by pointer doubling,
    so the work stays ``O(n log n)`` even on alternating patterns.

    Args:
        starts: 候选区间起点，严格递增
        ends: 对应的终点（包含），``ends[i] >= starts[i]``

    Returns:
        被接受的 ``(start, end)`` 列表，按起点排序
    """
    n = len(starts)
    if n == 0:
        return []

    # nxt[i]: first candidate starting after ends[i]; n is the stop sentinel
    nxt = [bisect_right(starts, e) for e in ends]
    nxt.append(n)

    reached = [False] * (n + 1)
    reached[0] = True
    jump = nxt
    while True:
        frontier = [i for i in range(n) if reached[i] and jump[i] != n]
        if not frontier:
            break
        for i in frontier:
            reached[jump[i]] = True
        jump = [jump[j] for j in jump]

    return [(starts[i], ends[i]) for i in range(n) if reached[i]]


def match_brackets(positions: Sequence[int], opening: Sequence[bool]) -> list[tuple[int, int]]:
    """
    配对一类括号

    Each bracket gets an adjusted depth: the running depth after an opening
    bracket, and the running depth plus one after a closing bracket. After a
    stable sort by that depth, matching pairs sit next to each other as an
    opening bracket followed by a closing one.

    Args:
        positions: 括号在文本中的位置，递增
        opening: 每个括号是否为开括号

    Returns:
        ``(open_pos, close_pos)`` 列表，按开括号位置排序
    """
    depth = 0
    adjusted: list[int] = []
    for is_open in opening:
        if is_open:
            depth += 1
            adjusted.append(depth)
        else:
            adjusted.append(depth)
            depth -= 1

    order = sorted(range(len(positions)), key=lambda k: adjusted[k])
    pairs: list[tuple[int, int]] = []
    for a, b in zip(order, order[1:]):
        if adjusted[a] == adjusted[b] and opening[a] and not opening[b]:
            pairs.append((positions[a], positions[b]))
    pairs.sort()
    return pairs
