"""Post "related commits" comments on Jira issues mentioned in git history"""

import logging
from typing import Callable, Iterable, List, Optional, Pattern, Sequence, Tuple

from ticket_toolbox.config import COMMIT_HASH_PLACEHOLDER, RunOptions
from ticket_toolbox.console import echo as default_echo
from ticket_toolbox.errors import UsageError
from ticket_toolbox.models import Commit, JiraIssue, MentionGroup
from ticket_toolbox.services.git import GitClient, repo_name_from_remote
from ticket_toolbox.services.jira_client import JiraClient
from ticket_toolbox.services.mention_scanner import group_mentions, read_mentions

logger = logging.getLogger(__name__)


def commit_link(link_format: str, commit: Commit) -> str:
    return link_format.replace(COMMIT_HASH_PLACEHOLDER, commit.hash)


def partition_commits(
    issue: JiraIssue, commits: Iterable[Commit]
) -> Tuple[List[Commit], List[Commit]]:
    """Split commits into (already mentioned, to mention), keeping order.

    A commit counts as mentioned when its short hash occurs anywhere in the
    issue description or comments. Unrelated text containing the same eight
    characters is a false positive; the comment format depends on the short
    hash so there is no better key to match on.
    """
    already: List[Commit] = []
    to_mention: List[Commit] = []
    for commit in commits:
        if issue.mentions(commit.short_hash):
            already.append(commit)
        else:
            to_mention.append(commit)
    return already, to_mention


def check_refs(refs: Sequence[str]) -> None:
    """Reject refs that git would parse as options"""
    bad_ref = next((r for r in refs if r.startswith("-")), None)
    if bad_ref is not None:
        raise UsageError(f"bad ref name: {bad_ref}")


def compose_comment(repo_name: str, commits: Sequence[Commit], link_format: str) -> str:
    lines = [f"Related commits in {repo_name}:", ""]
    for commit in commits:
        link = commit_link(link_format, commit)
        lines.append(f" * [{commit.short_hash} - {commit.title or ''}|{link}]")
    return "\n".join(lines) + "\n"


class LinkCommitsService:
    """Drives fetch -> filter -> compose -> post for every mentioned issue"""

    def __init__(
        self,
        jira: JiraClient,
        git: GitClient,
        issue_pattern: Pattern[str],
        link_format: str,
        options: Optional[RunOptions] = None,
        echo: Callable[..., None] = default_echo,
    ):
        self.jira = jira
        self.git = git
        self.issue_pattern = issue_pattern
        self.link_format = link_format
        self.options = options or RunOptions()
        self.echo = echo

    def collect_groups(self, refs: Sequence[str]) -> List[MentionGroup]:
        # Grouping consumes the whole log, so git's exit status is known here.
        return group_mentions(read_mentions(self.git.log_lines(refs), self.issue_pattern))

    def run(self, refs: Sequence[str] = ()) -> None:
        check_refs(refs)

        repo_name = repo_name_from_remote(self.git.get_origin())

        for group in self.collect_groups(refs):
            self.link_group(group, repo_name)

    def link_group(self, group: MentionGroup, repo_name: str) -> Optional[str]:
        """Comment on one issue; returns the composed body or None if nothing was due"""
        issue = self.jira.get_issue(group.issue_key)
        if issue is None:
            self.echo(f"{group.issue_key} (not found)")
            return None

        self.echo(f"{group.issue_key} {issue.summary or '(no title)'}")

        already, to_mention = partition_commits(issue, group.commits)
        for commit in already:
            self.echo(f"  already mentioned: {commit}")

        if not to_mention:
            self.echo("  nothing to do for issue")
            return None

        for commit in to_mention:
            self.echo(f"  {commit}")

        comment = compose_comment(repo_name, to_mention, self.link_format)

        if self.options.verbose:
            self.echo()
            self.echo(comment)

        if self.options.dry_run:
            logger.info(f"Dry run: not posting comment on {issue.key}")
            return comment

        self.jira.post_comment(issue.key, comment)
        return comment
