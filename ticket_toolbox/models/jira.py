"""Jira issue models"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional


@dataclass(frozen=True)
class IssueLinkType:
    """Link type with its forward/backward verb pair (blocks / is blocked by)"""

    name: str
    outward: str
    inward: str


@dataclass(frozen=True)
class IssueLink:
    """A link as seen from one issue; exactly one side is normally set"""

    link_type: IssueLinkType
    outward_issue_key: Optional[str] = None
    inward_issue_key: Optional[str] = None


@dataclass
class JiraIssue:
    key: str
    summary: Optional[str] = None
    description: Optional[str] = None
    comments: List[str] = field(default_factory=list)
    links: List[IssueLink] = field(default_factory=list)

    @property
    def outward_links(self) -> List[IssueLink]:
        return [link for link in self.links if link.outward_issue_key is not None]

    def all_text(self) -> Iterator[str]:
        """Description followed by every comment body"""
        if self.description is not None:
            yield self.description
        yield from self.comments

    def mentions(self, text: str) -> bool:
        return any(text in chunk for chunk in self.all_text())

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "JiraIssue":
        """Build from a Jira REST v2 issue payload"""
        fields = data.get("fields") or {}

        comment_field = fields.get("comment") or {}
        comments = [c.get("body") or "" for c in comment_field.get("comments") or []]

        links = []
        for raw in fields.get("issuelinks") or []:
            raw_type = raw.get("type") or {}
            link_type = IssueLinkType(
                name=raw_type.get("name", ""),
                outward=raw_type.get("outward", ""),
                inward=raw_type.get("inward", ""),
            )
            outward = raw.get("outwardIssue")
            inward = raw.get("inwardIssue")
            links.append(
                IssueLink(
                    link_type=link_type,
                    outward_issue_key=outward.get("key") if outward else None,
                    inward_issue_key=inward.get("key") if inward else None,
                )
            )

        return cls(
            key=data["key"],
            summary=fields.get("summary"),
            description=fields.get("description"),
            comments=comments,
            links=links,
        )
