import logging
import unittest
from unittest.mock import Mock

logging.disable(logging.CRITICAL)


def _response(status_code=200, payload=None, text=""):
    return Mock(
        status_code=status_code,
        ok=200 <= status_code < 300,
        json=Mock(return_value=payload),
        text=text,
    )


def _work_item(i):
    return {
        "id": i,
        "url": f"https://dev.azure.com/org/_apis/wit/workItems/{i}",
        "fields": {"System.Title": f"Item {i}"},
        "relations": [{"rel": "System.LinkTypes.Related", "url": "https://x/1"}],
    }


def _client(session):
    from ticket_toolbox.services.ado_client import AdoClient

    return AdoClient("https://dev.azure.com/org/proj/", "pat", session=session)


class AdoClientTests(unittest.TestCase):
    def test_init_uses_pat_with_empty_user(self):
        session = Mock(headers={})
        _client(session)
        # base64(":pat")
        self.assertEqual(session.headers["Authorization"], "Basic OnBhdA==")

    def test_query_ids_posts_wiql(self):
        session = Mock(headers={})
        session.post = Mock(return_value=_response(payload={"workItems": [{"id": 3}, {"id": 1}]}))

        ids = _client(session).query_ids()

        self.assertEqual(ids, [3, 1])
        args, kwargs = session.post.call_args
        self.assertEqual(args[0], "https://dev.azure.com/org/proj/_apis/wit/wiql")
        self.assertEqual(kwargs["json"], {"query": "select [Id] from WorkItems"})
        self.assertEqual(kwargs["params"], {"api-version": "7.0"})

    def test_list_work_items_fetches_in_batches_of_100(self):
        ids = list(range(1, 251))
        session = Mock(headers={})
        session.post = Mock(return_value=_response(payload={"workItems": [{"id": i} for i in ids]}))

        def get(url, params):
            batch = [int(i) for i in params["ids"].split(",")]
            return _response(payload={"count": len(batch), "value": [_work_item(i) for i in batch]})

        session.get = Mock(side_effect=get)

        items = _client(session).list_work_items()

        self.assertEqual([w.id for w in items], ids)
        sizes = [len(c.kwargs["params"]["ids"].split(",")) for c in session.get.call_args_list]
        self.assertEqual(sizes, [100, 100, 50])
        self.assertEqual(session.get.call_args_list[0].kwargs["params"]["$expand"], "all")
        self.assertEqual(items[0].title, "Item 1")
        self.assertEqual(items[0].relations[0].rel, "System.LinkTypes.Related")

    def test_no_ids_means_no_batch_calls(self):
        session = Mock(headers={})
        session.post = Mock(return_value=_response(payload={"workItems": []}))
        session.get = Mock()

        self.assertEqual(_client(session).list_work_items(), [])
        session.get.assert_not_called()

    def test_get_work_items_rejects_oversized_batch(self):
        with self.assertRaises(ValueError):
            _client(Mock(headers={})).get_work_items(list(range(101)))

    def test_query_failure_raises_transport_failure(self):
        from ticket_toolbox.errors import TransportFailure

        session = Mock(headers={})
        session.post = Mock(return_value=_response(401, text="unauthorized"))

        with self.assertRaises(TransportFailure) as ctx:
            _client(session).query_ids()
        self.assertEqual(ctx.exception.status_code, 401)


if __name__ == "__main__":
    unittest.main()
