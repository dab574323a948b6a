"""단어 단위 텍스트 diff 엔진입니다. I/O 없이 두 평문 추출본을 비교해 변경 조각과 요약을 만듭니다.

비교 단위는 공백으로 분리한 단어이며, Myers 최단 편집 스크립트로 최장 공통 부분열(LCS)을 구한다.
전체 편집 경로를 저장하지 않고 중간 지점에서 구간을 나눠 재귀하므로 메모리는 입력 길이에 비례한다.
같은 종류의 연속 토큰은 하나의 조각으로 합치고, 변경 구간 안에서는 삭제 조각이 추가 조각보다 먼저 온다.

요약 규칙은 기존 요약 값과의 호환을 위해 그대로 유지한다.
  modified_count = min(added_count, removed_count)
  actual_added   = added_count - modified_count
  actual_removed = removed_count - modified_count
  total_changes  = actual_added + actual_removed + modified_count
추가/삭제 구간을 실제로 짝지어 정렬하지 않는 개수 기반 근사치다.
"""

import re
import time
from typing import List, Optional, Tuple

from manuscript_workflow.schemas.diff import DiffPart, DiffResult, DiffSummary

_TOKEN_RE = re.compile(r"\S+\s*")

EQUAL = "equal"
INSERT = "insert"
DELETE = "delete"

# 이 시간을 넘기면 남은 구간은 최소 diff 대신 삭제 + 추가로 처리한다.
DIFF_TIMEOUT_SECONDS = 10.0


def tokenize(text: str) -> List[str]:
    """단어 + 뒤따르는 공백 단위로 자른다. 선행 공백은 버린다."""
    return _TOKEN_RE.findall(str(text or ""))


def _bisect(
    a: List[str], a_lo: int, a_hi: int,
    b: List[str], b_lo: int, b_hi: int,
    deadline: Optional[float],
) -> Optional[Tuple[int, int]]:
    """정방향/역방향 탐색이 겹치는 지점(최적 경로 위의 한 점)을 찾는다. 메모리는 O(N+M)."""
    n = a_hi - a_lo
    m = b_hi - b_lo
    max_d = (n + m + 1) // 2
    offset = max_d
    size = 2 * max_d + 2
    forward = [-1] * size
    reverse = [-1] * size
    forward[offset + 1] = 0
    reverse[offset + 1] = 0
    delta = n - m
    # delta 가 홀수면 정방향 탐색에서, 짝수면 역방향 탐색에서 겹침을 확인한다.
    check_forward = delta % 2 != 0
    k1_start = k1_end = k2_start = k2_end = 0

    for d in range(max_d):
        if deadline is not None and time.monotonic() > deadline:
            break

        for k1 in range(-d + k1_start, d + 1 - k1_end, 2):
            k1_offset = offset + k1
            if k1 == -d or (k1 != d and forward[k1_offset - 1] < forward[k1_offset + 1]):
                x1 = forward[k1_offset + 1]
            else:
                x1 = forward[k1_offset - 1] + 1
            y1 = x1 - k1
            while x1 < n and y1 < m and a[a_lo + x1] == b[b_lo + y1]:
                x1 += 1
                y1 += 1
            forward[k1_offset] = x1
            if x1 > n:
                k1_end += 2
            elif y1 > m:
                k1_start += 2
            elif check_forward:
                k2_offset = offset + delta - k1
                if 0 <= k2_offset < size and reverse[k2_offset] != -1:
                    if x1 >= n - reverse[k2_offset]:
                        return a_lo + x1, b_lo + y1

        for k2 in range(-d + k2_start, d + 1 - k2_end, 2):
            k2_offset = offset + k2
            if k2 == -d or (k2 != d and reverse[k2_offset - 1] < reverse[k2_offset + 1]):
                x2 = reverse[k2_offset + 1]
            else:
                x2 = reverse[k2_offset - 1] + 1
            y2 = x2 - k2
            while x2 < n and y2 < m and a[a_hi - 1 - x2] == b[b_hi - 1 - y2]:
                x2 += 1
                y2 += 1
            reverse[k2_offset] = x2
            if x2 > n:
                k2_end += 2
            elif y2 > m:
                k2_start += 2
            elif not check_forward:
                k1_offset = offset + delta - k2
                if 0 <= k1_offset < size and forward[k1_offset] != -1:
                    x1 = forward[k1_offset]
                    y1 = x1 - (k1_offset - offset)
                    if x1 >= n - x2:
                        return a_lo + x1, b_lo + y1
    return None


def _collect_matches(
    a: List[str], a_lo: int, a_hi: int,
    b: List[str], b_lo: int, b_hi: int,
    deadline: Optional[float],
    matches: List[Tuple[int, int]],
) -> None:
    while a_lo < a_hi and b_lo < b_hi and a[a_lo] == b[b_lo]:
        matches.append((a_lo, b_lo))
        a_lo += 1
        b_lo += 1
    suffix: List[Tuple[int, int]] = []
    while a_lo < a_hi and b_lo < b_hi and a[a_hi - 1] == b[b_hi - 1]:
        a_hi -= 1
        b_hi -= 1
        suffix.append((a_hi, b_hi))

    if a_lo < a_hi and b_lo < b_hi:
        split = _bisect(a, a_lo, a_hi, b, b_lo, b_hi, deadline)
        # 시간 초과 시 이 구간은 전부 삭제 + 추가로 남긴다.
        if split is not None and split not in ((a_lo, b_lo), (a_hi, b_hi)):
            x, y = split
            _collect_matches(a, a_lo, x, b, b_lo, y, deadline, matches)
            _collect_matches(a, x, a_hi, b, y, b_hi, deadline, matches)

    matches.extend(reversed(suffix))


def _lcs_pairs(old_words: List[str], new_words: List[str], deadline: Optional[float]) -> List[Tuple[int, int]]:
    """LCS 를 이루는 (old 위치, new 위치) 쌍을 순서대로 반환한다."""
    prefix = 0
    limit = min(len(old_words), len(new_words))
    while prefix < limit and old_words[prefix] == new_words[prefix]:
        prefix += 1
    suffix = 0
    while (
        suffix < limit - prefix
        and old_words[len(old_words) - 1 - suffix] == new_words[len(new_words) - 1 - suffix]
    ):
        suffix += 1
    old_end = len(old_words) - suffix
    new_end = len(new_words) - suffix

    # 반대편에 한 번도 나오지 않는 단어는 절대 짝지어지지 않으므로 탐색 전에 뺀다.
    old_vocab = set(old_words[prefix:old_end])
    new_vocab = set(new_words[prefix:new_end])
    old_keep = [i for i in range(prefix, old_end) if old_words[i] in new_vocab]
    new_keep = [j for j in range(prefix, new_end) if new_words[j] in old_vocab]
    old_core = [old_words[i] for i in old_keep]
    new_core = [new_words[j] for j in new_keep]

    core: List[Tuple[int, int]] = []
    _collect_matches(old_core, 0, len(old_core), new_core, 0, len(new_core), deadline, core)

    pairs = [(i, i) for i in range(prefix)]
    pairs.extend((old_keep[i], new_keep[j]) for i, j in core)
    pairs.extend((old_end + i, new_end + i) for i in range(suffix))
    return pairs


def _edit_script(
    old_words: List[str],
    new_words: List[str],
    timeout: Optional[float] = None,
) -> List[Tuple[str, int, int]]:
    deadline = time.monotonic() + timeout if timeout is not None and timeout > 0 else None
    ops: List[Tuple[str, int, int]] = []
    i = j = 0
    for old_i, new_j in _lcs_pairs(old_words, new_words, deadline):
        ops.extend((DELETE, x, -1) for x in range(i, old_i))
        ops.extend((INSERT, -1, y) for y in range(j, new_j))
        ops.append((EQUAL, old_i, new_j))
        i, j = old_i + 1, new_j + 1
    ops.extend((DELETE, x, -1) for x in range(i, len(old_words)))
    ops.extend((INSERT, -1, y) for y in range(j, len(new_words)))
    return ops


def _coalesce(ops: List[Tuple[str, int, int]], old_tokens: List[str], new_tokens: List[str]) -> List[DiffPart]:
    parts: List[DiffPart] = []
    equal_run: List[str] = []
    removed_run: List[str] = []
    added_run: List[str] = []

    def flush_changes():
        if removed_run:
            parts.append(DiffPart(value="".join(removed_run), removed=True))
            removed_run.clear()
        if added_run:
            parts.append(DiffPart(value="".join(added_run), added=True))
            added_run.clear()

    def flush_equal():
        if equal_run:
            parts.append(DiffPart(value="".join(equal_run)))
            equal_run.clear()

    for kind, i, j in ops:
        if kind == EQUAL:
            flush_changes()
            equal_run.append(new_tokens[j])
        else:
            flush_equal()
            if kind == DELETE:
                removed_run.append(old_tokens[i])
            else:
                added_run.append(new_tokens[j])
    flush_changes()
    flush_equal()
    return parts


def count_words(value: str) -> int:
    return len(str(value or "").split())


def summarize(parts: List[DiffPart]) -> DiffSummary:
    added = removed = unchanged = 0
    for part in parts:
        words = count_words(part.value)
        if part.added:
            added += words
        elif part.removed:
            removed += words
        else:
            unchanged += words

    modified = min(added, removed)
    actual_added = added - modified
    actual_removed = removed - modified
    return DiffSummary(
        added_count=added,
        removed_count=removed,
        unchanged_count=unchanged,
        modified_count=modified,
        actual_added=actual_added,
        actual_removed=actual_removed,
        total_changes=actual_added + actual_removed + modified,
    )


def diff_texts(old_text: str, new_text: str, timeout: Optional[float] = DIFF_TIMEOUT_SECONDS) -> DiffResult:
    old_tokens = tokenize(old_text)
    new_tokens = tokenize(new_text)
    old_words = [token.rstrip() for token in old_tokens]
    new_words = [token.rstrip() for token in new_tokens]

    ops = _edit_script(old_words, new_words, timeout)
    parts = _coalesce(ops, old_tokens, new_tokens)
    return DiffResult(parts=parts, summary=summarize(parts))


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'s' if count != 1 else ''}"


def describe_summary(summary: DiffSummary) -> str:
    phrases = []
    if summary.actual_added > 0:
        phrases.append(f"{_plural(summary.actual_added, 'word')} added")
    if summary.actual_removed > 0:
        phrases.append(f"{_plural(summary.actual_removed, 'word')} removed")
    if summary.modified_count > 0:
        phrases.append(f"{_plural(summary.modified_count, 'word')} modified")
    if not phrases:
        return "No changes detected"
    return ", ".join(phrases)
