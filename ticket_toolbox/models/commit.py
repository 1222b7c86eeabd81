"""Commit and mention models"""

from dataclasses import dataclass, field
from typing import List, Optional

SHORT_HASH_LENGTH = 8
TITLE_MAX_LENGTH = 72
TITLE_ELLIPSIS = "..."


class Commit:
    """A git commit identified by its full hash.

    The title is filled in once, from the first message line seen while
    scanning the log; after that the commit is immutable.
    """

    __slots__ = ("_hash", "_title")

    def __init__(self, commit_hash: str, title: Optional[str] = None):
        self._hash = commit_hash
        self._title = title

    @property
    def hash(self) -> str:
        return self._hash

    @property
    def short_hash(self) -> str:
        return self._hash[:SHORT_HASH_LENGTH]

    @property
    def title(self) -> Optional[str]:
        return self._title

    @title.setter
    def title(self, value: str) -> None:
        if self._title is not None:
            raise AttributeError(f"title of commit {self.short_hash} is already set")
        self._title = value

    @staticmethod
    def make_title(message_line: str) -> str:
        """Title from an already unindented message line, truncated to 72 chars + ellipsis"""
        if len(message_line) > TITLE_MAX_LENGTH:
            return message_line[:TITLE_MAX_LENGTH] + TITLE_ELLIPSIS
        return message_line

    def __eq__(self, other):
        if not isinstance(other, Commit):
            return NotImplemented
        return self._hash == other._hash

    def __hash__(self):
        return hash(self._hash)

    def __str__(self):
        if self._title is None:
            return self.short_hash
        return f"{self.short_hash} {self._title}"

    def __repr__(self):
        return f"<Commit(hash={self._hash!r}, title={self._title!r})>"


@dataclass(frozen=True)
class Mention:
    """An issue key found in a commit message"""

    commit: Commit
    issue_key: str


@dataclass
class MentionGroup:
    """All distinct commits mentioning one issue key, in first-seen order"""

    issue_key: str
    commits: List[Commit] = field(default_factory=list)
