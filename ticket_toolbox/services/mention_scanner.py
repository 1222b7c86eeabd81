"""Extract issue mentions from `git log` output"""

from typing import Dict, Iterable, Iterator, List, Optional, Pattern, Tuple

from ticket_toolbox.models import Commit, Mention, MentionGroup

COMMIT_HEADER = "commit "
MESSAGE_INDENT = "    "


def parse_log(lines: Iterable[str]) -> Iterator[Tuple[Commit, str]]:
    """Yield (commit, message line) pairs from default-format log text.

    Message lines are yielded with their indentation intact. Lines that are
    neither a commit header nor indented message text (Author:, Date:,
    blank separators) are skipped, as is anything before the first header.
    The first non-empty message line of each commit becomes its title.
    """
    commit: Optional[Commit] = None

    for line in lines:
        if line.startswith(COMMIT_HEADER):
            commit_hash = line[len(COMMIT_HEADER):].split(" ", 1)[0]
            commit = Commit(commit_hash) if commit_hash else None
        elif line.startswith(MESSAGE_INDENT) and commit is not None:
            text = line[len(MESSAGE_INDENT):]
            if commit.title is None and text.strip():
                commit.title = Commit.make_title(text)
            yield commit, line


def scan_mentions(records: Iterable[Tuple[Commit, str]], pattern: Pattern[str]) -> Iterator[Mention]:
    for commit, line in records:
        for match in pattern.finditer(line):
            yield Mention(commit, match.group(0))


def read_mentions(lines: Iterable[str], pattern: Pattern[str]) -> Iterator[Mention]:
    return scan_mentions(parse_log(lines), pattern)


def group_mentions(mentions: Iterable[Mention]) -> List[MentionGroup]:
    """Group by exact issue key, keeping first-seen order of keys and commits"""
    groups: Dict[str, MentionGroup] = {}
    seen: Dict[str, set] = {}

    for mention in mentions:
        group = groups.get(mention.issue_key)
        if group is None:
            group = groups[mention.issue_key] = MentionGroup(mention.issue_key)
            seen[mention.issue_key] = set()
        if mention.commit not in seen[mention.issue_key]:
            seen[mention.issue_key].add(mention.commit)
            group.commits.append(mention.commit)

    return list(groups.values())
