"""Reconcile Jira issue links against Azure DevOps work item relations.

Jira issues are matched to work items by finding the Jira key inside the
work item title. Several titles can contain the same key (ABC-1 is a
substring of ABC-12 too); the first work item in listing order wins.

Reconciliation only classifies. Creating the relations reported as ADD is
left to the caller.
"""

import logging
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Pattern, Sequence

from ticket_toolbox.config import RunOptions
from ticket_toolbox.console import echo as default_echo, warn as default_warn
from ticket_toolbox.models import (
    JiraIssue,
    LinkSyncResult,
    RelationType,
    SyncAction,
    WorkItem,
)
from ticket_toolbox.services.ado_client import AdoClient
from ticket_toolbox.services.jira_client import JiraClient

logger = logging.getLogger(__name__)

RELATION_TYPES: Dict[str, RelationType] = {
    "clones": RelationType.DUPLICATE_FORWARD,
    "duplicates": RelationType.DUPLICATE_FORWARD,
    "blocks": RelationType.SUCCESSOR,
}


def map_relation_type(outward_verb: str) -> RelationType:
    return RELATION_TYPES.get(outward_verb, RelationType.RELATED)


def find_by_issue_key(work_items: Iterable[WorkItem], key: str) -> Optional[WorkItem]:
    return next((w for w in work_items if key in w.title), None)


class LinkReconciler:
    """Classifies each outward Jira link as KEEP or ADD on the ADO side"""

    def __init__(
        self,
        work_items: Sequence[WorkItem],
        issue_pattern: Pattern[str],
        echo: Callable[..., None] = default_echo,
        warn: Callable[[str], None] = default_warn,
    ):
        self.work_items = list(work_items)
        self.issue_pattern = issue_pattern
        self.echo = echo
        self.warn = warn

    def reconcile_issue(self, issue: JiraIssue) -> List[LinkSyncResult]:
        links = issue.outward_links
        if not links:
            return []

        source = find_by_issue_key(self.work_items, issue.key)
        if source is None:
            self.echo(issue.key)
            self.warn(f"no ADO match for {issue.key}")
            return []

        self.echo(f"{issue.key} (#{source.id})")

        results = []
        for link in links:
            verb = link.link_type.outward
            target = find_by_issue_key(self.work_items, link.outward_issue_key)
            if target is None:
                self.warn(f"no ADO match for {link.outward_issue_key} ({verb})")
                continue

            rel = map_relation_type(verb)
            action = SyncAction.KEEP if source.has_relation(rel.value, target.url) else SyncAction.ADD
            result = LinkSyncResult(
                issue_key=issue.key,
                work_item_id=source.id,
                linked_issue_key=link.outward_issue_key,
                link_verb=verb,
                target_work_item_id=target.id,
                target_url=target.url,
                relation_type=rel,
                action=action,
            )
            self.echo(f"  {action.value}:  {result.describe()}")
            results.append(result)

        return results

    def reconcile(self, issues: Iterable[JiraIssue]) -> Iterator[LinkSyncResult]:
        for issue in issues:
            if not self.issue_pattern.search(issue.key):
                continue
            yield from self.reconcile_issue(issue)


class LinkSyncService:
    """Lists both trackers and reports which ADO relations are missing"""

    SEARCH_FIELDS = ("issuelinks",)

    def __init__(
        self,
        jira: JiraClient,
        ado: AdoClient,
        issue_pattern: Pattern[str],
        jql: str = "",
        options: Optional[RunOptions] = None,
        echo: Callable[..., None] = default_echo,
        warn: Callable[[str], None] = default_warn,
    ):
        self.jira = jira
        self.ado = ado
        self.issue_pattern = issue_pattern
        self.jql = jql
        self.options = options or RunOptions()
        self.echo = echo
        self.warn = warn

    def run(self) -> List[LinkSyncResult]:
        # Work items are looked up repeatedly, Jira issues are streamed.
        work_items = self.ado.list_work_items()
        self.echo(f"{len(work_items)} ADO tickets")

        reconciler = LinkReconciler(work_items, self.issue_pattern, echo=self.echo, warn=self.warn)
        results = list(reconciler.reconcile(self.jira.search(self.jql, fields=self.SEARCH_FIELDS)))

        to_add = sum(1 for r in results if r.action == SyncAction.ADD)
        logger.info(f"Link sync classified {len(results)} relations, {to_add} missing")
        return results
