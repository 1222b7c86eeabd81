"""Azure DevOps work item tracking client (read-only)"""

import base64
import logging
from itertools import islice
from typing import Iterable, Iterator, List, NoReturn, Optional, Sequence

import requests

from ticket_toolbox.config import RunOptions
from ticket_toolbox.errors import TransportFailure
from ticket_toolbox.models import WorkItem

logger = logging.getLogger(__name__)


def _batched(items: Iterable[int], size: int) -> Iterator[List[int]]:
    it = iter(items)
    while True:
        batch = list(islice(it, size))
        if not batch:
            return
        yield batch


class AdoClient:
    """Lists work items of an organization/project via WIQL + batch get"""

    API_VERSION = "7.0"
    BATCH_SIZE = 100
    ALL_WORK_ITEMS_QUERY = "select [Id] from WorkItems"

    def __init__(
        self,
        base_url: str,
        pat: str,
        options: Optional[RunOptions] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.options = options or RunOptions()

        # PAT auth: basic auth with an empty user name.
        key = base64.b64encode(f":{pat}".encode("utf-8")).decode("ascii")
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Basic {key}",
                "Accept": "application/json",
            }
        )

    @staticmethod
    def _raise_error(response: requests.Response, message: str) -> NoReturn:
        logger.error(f"{message}: HTTP {response.status_code}")
        raise TransportFailure(message, response.status_code, response.text)

    def query_ids(self, query: str = ALL_WORK_ITEMS_QUERY) -> List[int]:
        if self.options.verbose:
            logger.info("ADO: get ticket IDs")

        response = self.session.post(
            f"{self.base_url}/_apis/wit/wiql",
            params={"api-version": self.API_VERSION},
            json={"query": query},
        )
        if not response.ok:
            self._raise_error(response, "Failed to query work items")

        return [int(w["id"]) for w in response.json().get("workItems") or []]

    def get_work_items(self, ids: Sequence[int]) -> List[WorkItem]:
        """Fetch full records (fields + relations) for at most BATCH_SIZE ids"""
        if len(ids) > self.BATCH_SIZE:
            raise ValueError(f"at most {self.BATCH_SIZE} ids per call, got {len(ids)}")

        response = self.session.get(
            f"{self.base_url}/_apis/wit/workitems",
            params={
                "ids": ",".join(str(i) for i in ids),
                "$expand": "all",
                "api-version": self.API_VERSION,
            },
        )
        if not response.ok:
            self._raise_error(response, "Failed to get work items")

        return [WorkItem.from_api(raw) for raw in response.json().get("value") or []]

    def iter_work_items(self, query: str = ALL_WORK_ITEMS_QUERY) -> Iterator[WorkItem]:
        ids = self.query_ids(query)
        for i, batch in enumerate(_batched(ids, self.BATCH_SIZE)):
            if self.options.verbose:
                logger.info(f"ADO: get ticket batch {i}")
            yield from self.get_work_items(batch)

    def list_work_items(self, query: str = ALL_WORK_ITEMS_QUERY) -> List[WorkItem]:
        return list(self.iter_work_items(query))
