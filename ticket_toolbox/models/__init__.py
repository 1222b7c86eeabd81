"""Data models"""

from ticket_toolbox.models.ado import WorkItem, WorkItemRelation
from ticket_toolbox.models.commit import Commit, Mention, MentionGroup
from ticket_toolbox.models.jira import IssueLink, IssueLinkType, JiraIssue
from ticket_toolbox.models.link_sync import LinkSyncResult, RelationType, SyncAction

__all__ = [
    "Commit",
    "Mention",
    "MentionGroup",
    "JiraIssue",
    "IssueLink",
    "IssueLinkType",
    "WorkItem",
    "WorkItemRelation",
    "SyncAction",
    "RelationType",
    "LinkSyncResult",
]
