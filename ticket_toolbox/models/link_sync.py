"""Cross-tracker link classification results"""

import enum
from dataclasses import dataclass


class SyncAction(str, enum.Enum):
    """Verdict for one desired relation"""
    KEEP = "keep"
    ADD = "add"


class RelationType(str, enum.Enum):
    """ADO relation reference names used for Jira links"""
    DUPLICATE_FORWARD = "System.LinkTypes.Duplicate-Forward"
    SUCCESSOR = "System.LinkTypes.Successor"
    RELATED = "System.LinkTypes.Related"


@dataclass(frozen=True)
class LinkSyncResult:
    """A classified relation from one ADO work item to another"""

    issue_key: str
    work_item_id: int
    linked_issue_key: str
    link_verb: str
    target_work_item_id: int
    target_url: str
    relation_type: RelationType
    action: SyncAction

    def describe(self) -> str:
        return (
            f"{self.relation_type.value} #{self.target_work_item_id} "
            f"({self.link_verb} {self.linked_issue_key})"
        )
