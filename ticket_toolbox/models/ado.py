"""Azure DevOps work item models"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

TITLE_FIELD = "System.Title"


@dataclass(frozen=True)
class WorkItemRelation:
    rel: str
    url: str


@dataclass
class WorkItem:
    id: int
    title: str
    url: str
    relations: List[WorkItemRelation] = field(default_factory=list)

    def has_relation(self, rel: str, url: str) -> bool:
        return any(r.rel == rel and r.url == url for r in self.relations)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "WorkItem":
        """Build from a work item payload fetched with $expand=all"""
        fields = data.get("fields") or {}
        relations = [
            WorkItemRelation(rel=r.get("rel", ""), url=r.get("url", ""))
            for r in data.get("relations") or []
        ]
        return cls(
            id=int(data["id"]),
            title=str(fields.get(TITLE_FIELD) or ""),
            url=data.get("url", ""),
            relations=relations,
        )
