import re
import unittest
from unittest.mock import Mock

ISSUE_RE = re.compile(r"ABC-\d+")
ADO = "https://dev.azure.com/org/_apis/wit/workItems"


def _work_item(item_id, title, relations=()):
    from ticket_toolbox.models import WorkItem, WorkItemRelation

    return WorkItem(
        id=item_id,
        title=title,
        url=f"{ADO}/{item_id}",
        relations=[WorkItemRelation(rel, url) for rel, url in relations],
    )


def _issue(key, *links):
    from ticket_toolbox.models import IssueLink, IssueLinkType, JiraIssue

    return JiraIssue(
        key=key,
        links=[
            IssueLink(IssueLinkType(name=verb.title(), outward=verb, inward=f"is {verb} by"), outward_issue_key=to)
            for verb, to in links
        ],
    )


class _Recorder:
    def __init__(self):
        self.out = []
        self.err = []

    def echo(self, message=""):
        self.out.append(message)

    def warn(self, message):
        self.err.append(message)


def _reconciler(work_items, recorder):
    from ticket_toolbox.services.link_sync_service import LinkReconciler

    return LinkReconciler(work_items, ISSUE_RE, echo=recorder.echo, warn=recorder.warn)


class RelationMapperTests(unittest.TestCase):
    def test_mapping_table(self):
        from ticket_toolbox.models import RelationType
        from ticket_toolbox.services.link_sync_service import map_relation_type

        self.assertIs(map_relation_type("clones"), RelationType.DUPLICATE_FORWARD)
        self.assertIs(map_relation_type("duplicates"), RelationType.DUPLICATE_FORWARD)
        self.assertIs(map_relation_type("blocks"), RelationType.SUCCESSOR)
        self.assertIs(map_relation_type("relates to"), RelationType.RELATED)
        self.assertIs(map_relation_type("is blocked by"), RelationType.RELATED)
        self.assertEqual(RelationType.SUCCESSOR.value, "System.LinkTypes.Successor")


class LinkReconcilerTests(unittest.TestCase):
    def test_unresolved_link_target_is_skipped_but_issue_is_reported(self):
        rec = _Recorder()
        work_items = [_work_item(1, "Implement ABC-1 login")]

        results = list(_reconciler(work_items, rec).reconcile([_issue("ABC-1", ("blocks", "ABC-2"))]))

        self.assertEqual(results, [])
        self.assertEqual(rec.out, ["ABC-1 (#1)"])
        self.assertEqual(rec.err, ["no ADO match for ABC-2 (blocks)"])

    def test_keep_when_relation_exists_add_otherwise(self):
        from ticket_toolbox.models import RelationType, SyncAction

        rec = _Recorder()
        work_items = [
            _work_item(1, "ABC-1 source", relations=[("System.LinkTypes.Successor", f"{ADO}/2")]),
            _work_item(2, "ABC-2 blocked"),
            _work_item(3, "ABC-3 clone"),
        ]
        issue = _issue("ABC-1", ("blocks", "ABC-2"), ("clones", "ABC-3"))

        results = list(_reconciler(work_items, rec).reconcile([issue]))

        self.assertEqual([r.action for r in results], [SyncAction.KEEP, SyncAction.ADD])
        self.assertEqual(results[1].relation_type, RelationType.DUPLICATE_FORWARD)
        self.assertEqual(results[1].target_url, f"{ADO}/3")
        self.assertEqual(
            rec.out,
            [
                "ABC-1 (#1)",
                "  keep:  System.LinkTypes.Successor #2 (blocks ABC-2)",
                "  add:  System.LinkTypes.Duplicate-Forward #3 (clones ABC-3)",
            ],
        )

    def test_existing_relation_must_match_type_and_url(self):
        from ticket_toolbox.models import SyncAction

        rec = _Recorder()
        work_items = [
            _work_item(1, "ABC-1", relations=[("System.LinkTypes.Related", f"{ADO}/2")]),
            _work_item(2, "ABC-2"),
        ]

        results = list(_reconciler(work_items, rec).reconcile([_issue("ABC-1", ("blocks", "ABC-2"))]))

        self.assertEqual([r.action for r in results], [SyncAction.ADD])

    def test_issue_without_work_item_is_reported_and_skipped(self):
        rec = _Recorder()

        results = list(_reconciler([_work_item(2, "ABC-2")], rec).reconcile([_issue("ABC-1", ("blocks", "ABC-2"))]))

        self.assertEqual(results, [])
        self.assertEqual(rec.out, ["ABC-1"])
        self.assertEqual(rec.err, ["no ADO match for ABC-1"])

    def test_issues_without_outward_links_or_matching_key_are_ignored(self):
        from ticket_toolbox.models import IssueLink, IssueLinkType, JiraIssue

        rec = _Recorder()
        inward_only = JiraIssue(
            key="ABC-1",
            links=[IssueLink(IssueLinkType("Blocks", "blocks", "is blocked by"), inward_issue_key="ABC-2")],
        )
        other_project = _issue("OTHER-1", ("blocks", "ABC-2"))

        results = list(_reconciler([_work_item(1, "ABC-1"), _work_item(2, "ABC-2")], rec).reconcile([inward_only, other_project]))

        self.assertEqual(results, [])
        self.assertEqual(rec.out, [])
        self.assertEqual(rec.err, [])

    def test_first_title_match_wins(self):
        from ticket_toolbox.services.link_sync_service import find_by_issue_key

        items = [_work_item(7, "ABC-12 other"), _work_item(8, "ABC-1 exact")]

        self.assertEqual(find_by_issue_key(items, "ABC-1").id, 7)
        self.assertIsNone(find_by_issue_key(items, "ABC-3"))


class LinkSyncServiceTests(unittest.TestCase):
    def test_run_lists_work_items_then_streams_jira_issues(self):
        from ticket_toolbox.models import SyncAction
        from ticket_toolbox.services.link_sync_service import LinkSyncService

        rec = _Recorder()
        ado = Mock()
        ado.list_work_items = Mock(return_value=[_work_item(1, "ABC-1"), _work_item(2, "ABC-2")])
        jira = Mock()
        jira.search = Mock(return_value=iter([_issue("ABC-1", ("relates to", "ABC-2"))]))

        service = LinkSyncService(jira, ado, ISSUE_RE, jql="project = ABC", echo=rec.echo, warn=rec.warn)
        results = service.run()

        jira.search.assert_called_once_with("project = ABC", fields=("issuelinks",))
        self.assertEqual(rec.out[0], "2 ADO tickets")
        self.assertEqual([(r.relation_type.value, r.action) for r in results], [("System.LinkTypes.Related", SyncAction.ADD)])


if __name__ == "__main__":
    unittest.main()
