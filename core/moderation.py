"""
Sensitive-word matching and automatic comment audit.

The word filter is a character trie keyed on lower-cased characters. Scanning
tries the longest word starting at each position and resumes after a match,
so overlapping words are reported once.
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from core.domain.content import AuditStatus, RiskLevel, SensitiveAction, SensitiveLevel

REPEATED_RUN_THRESHOLD = 3
UPPERCASE_RATIO = 0.8
MIN_MEANINGFUL_LENGTH = 5


@dataclass(frozen=True)
class WordEntry:
    """A word list entry as loaded from storage."""

    word: str
    level: int = SensitiveLevel.NORMAL
    action: int = SensitiveAction.REPLACE
    replacement: Optional[str] = None


@dataclass(frozen=True)
class WordMatch:
    """A span of scanned text that matched a word list entry."""

    start: int
    end: int
    entry: WordEntry


@dataclass
class _Node:
    children: dict[str, "_Node"] = field(default_factory=dict)
    entry: Optional[WordEntry] = None


class SensitiveWordFilter:
    """Case-insensitive longest-match word filter."""

    def __init__(self, entries: Iterable[WordEntry] = ()):
        self._root = _Node()
        self._size = 0
        for entry in entries:
            self.add(entry)

    def __len__(self) -> int:
        return self._size

    def add(self, entry: WordEntry) -> None:
        """Insert a word. Re-adding a word replaces its entry."""
        word = entry.word.strip()
        if not word:
            return
        node = self._root
        for ch in word:
            node = node.children.setdefault(ch.lower(), _Node())
        if node.entry is None:
            self._size += 1
        node.entry = entry

    def _longest_at(self, text: str, start: int) -> Optional[WordMatch]:
        node = self._root
        found = None
        for pos in range(start, len(text)):
            node = node.children.get(text[pos].lower())
            if node is None:
                break
            if node.entry is not None:
                found = WordMatch(start=start, end=pos + 1, entry=node.entry)
        return found

    def find_all(self, text: str) -> list[WordMatch]:
        """Return non-overlapping matches, scanning left to right."""
        matches = []
        pos = 0
        while pos < len(text):
            match = self._longest_at(text, pos)
            if match is None:
                pos += 1
                continue
            matches.append(match)
            pos = match.end
        return matches

    def contains(self, text: str) -> bool:
        return any(self._longest_at(text, pos) for pos in range(len(text)))

    def replace(self, text: str) -> str:
        """Mask words whose action is REPLACE.

        Uses the entry's replacement when set, otherwise one ``*`` per
        character of the matched text.
        """
        pieces = []
        last = 0
        for match in self.find_all(text):
            if match.entry.action != SensitiveAction.REPLACE:
                continue
            pieces.append(text[last:match.start])
            pieces.append(match.entry.replacement or "*" * (match.end - match.start))
            last = match.end
        pieces.append(text[last:])
        return "".join(pieces)

    def blocked_words(self, text: str) -> list[str]:
        """Distinct BLOCK-action words present in text, in order of appearance."""
        seen: list[str] = []
        for match in self.find_all(text):
            if match.entry.action == SensitiveAction.BLOCK and match.entry.word not in seen:
                seen.append(match.entry.word)
        return seen

    def highest_level(self, text: str) -> int:
        """Highest severity level found in text, 0 when clean."""
        return max((m.entry.level for m in self.find_all(text)), default=0)


@dataclass(frozen=True)
class AuditResult:
    status: AuditStatus
    risk_level: RiskLevel
    matches: tuple[WordMatch, ...] = ()


def has_repeated_run(content: str, threshold: int = REPEATED_RUN_THRESHOLD) -> bool:
    """True when one character repeats ``threshold`` times after itself."""
    repeated = 0
    for prev, cur in zip(content, content[1:]):
        if cur == prev:
            repeated += 1
            if repeated >= threshold:
                return True
        else:
            repeated = 0
    return False


def is_mostly_uppercase(content: str, ratio: float = UPPERCASE_RATIO) -> bool:
    letters = [ch for ch in content if ch.isascii() and ch.isalpha()]
    if not letters:
        return False
    upper = sum(1 for ch in letters if ch.isupper())
    return upper / len(letters) > ratio


def audit_content(content: str, word_filter: SensitiveWordFilter) -> AuditResult:
    """Grade comment text and decide whether it passes automatic review.

    Each rule can only raise the risk level; a serious word also rejects
    the content.
    """
    status = AuditStatus.APPROVED
    risk = RiskLevel.NORMAL

    if len(content) < MIN_MEANINGFUL_LENGTH:
        risk = max(risk, RiskLevel.LOW)

    matches = tuple(word_filter.find_all(content))
    if any(m.entry.level >= SensitiveLevel.SERIOUS for m in matches):
        status = AuditStatus.REJECTED
        risk = RiskLevel.HIGH
    elif matches:
        risk = max(risk, RiskLevel.MEDIUM)

    if has_repeated_run(content):
        risk = max(risk, RiskLevel.MEDIUM)

    if "http://" in content or "https://" in content:
        risk = max(risk, RiskLevel.MEDIUM)

    if is_mostly_uppercase(content):
        risk = max(risk, RiskLevel.LOW)

    return AuditResult(status=status, risk_level=RiskLevel(risk), matches=matches)
