"""
Aggregation Buckets
===================
Evidence accumulated for one normalized source location.

    LineBucket - test-definition clustering: the line numbers of every test
                 in the file that skipped / failed.
    SiteBucket - failure-site clustering: how many failures triggered at the
                 same location, plus the message of the FIRST occurrence.

Both expose ``count`` so the ranking policy can treat them alike.
"""
from dataclasses import dataclass, field


@dataclass
class LineBucket:
    lines: list[int] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.lines)

    def sorted_lines(self) -> list[int]:
        return sorted(self.lines)


@dataclass
class SiteBucket:
    count: int = 0
    message: str = ""
