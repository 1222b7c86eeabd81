"""Jira REST API client"""

import base64
import logging
from typing import Iterator, NoReturn, Optional, Sequence
from urllib.parse import quote

import requests

from ticket_toolbox.config import RunOptions
from ticket_toolbox.errors import TransportFailure
from ticket_toolbox.models import JiraIssue

logger = logging.getLogger(__name__)


class JiraClient:
    """Wrapper for the few Jira REST v2 calls the toolbox needs"""

    ISSUE_FIELDS = "summary,description,comment"
    SEARCH_PAGE_SIZE = 50

    def __init__(
        self,
        base_url: str,
        username: str,
        token: str,
        options: Optional[RunOptions] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_url = f"{self.base_url}/rest/api/2"
        self.options = options or RunOptions()

        key = base64.b64encode(f"{username}:{token}".encode("utf-8")).decode("ascii")
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Basic {key}",
                "Accept": "application/json",
            }
        )

    def _trace(self, method: str, url: str) -> None:
        if self.options.verbose:
            logger.info(f"> {method} {url}")

    @staticmethod
    def _raise_error(response: requests.Response, message: str) -> NoReturn:
        logger.error(f"{message}: HTTP {response.status_code}")
        raise TransportFailure(message, response.status_code, response.text)

    def get_issue(self, key: str) -> Optional[JiraIssue]:
        """Fetch an issue with its description and comments; None if it does not exist"""
        url = f"{self.api_url}/issue/{quote(key, safe='')}"
        self._trace("GET", f"{url}?fields={self.ISSUE_FIELDS}")

        response = self.session.get(url, params={"fields": self.ISSUE_FIELDS})
        if response.status_code == 404:
            return None
        if not response.ok:
            self._raise_error(response, f"Failed to get {key}")

        return JiraIssue.from_api(response.json())

    def post_comment(self, key: str, body: str) -> None:
        url = f"{self.api_url}/issue/{quote(key, safe='')}/comment"
        self._trace("POST", url)

        response = self.session.post(url, json={"body": body})
        if not response.ok:
            self._raise_error(response, f"Failed to post comment on {key}")
        logger.info(f"Posted comment on {key}")

    def search(self, jql: str = "", fields: Sequence[str] = ()) -> Iterator[JiraIssue]:
        """Iterate over every issue matching `jql`, one page at a time.

        The total from the first page bounds the loop; the offset advances
        by the number of issues actually returned.
        """
        url = f"{self.api_url}/search"
        start_at = 0
        total: Optional[int] = None

        while total is None or start_at < total:
            params = {
                "jql": jql,
                "fields": ",".join(fields),
                "startAt": start_at,
                "maxResults": self.SEARCH_PAGE_SIZE,
            }
            self._trace("GET", f"{url}?startAt={start_at}")

            response = self.session.get(url, params=params)
            if not response.ok:
                self._raise_error(response, "Failed to search issues")

            page = response.json()
            if total is None:
                total = int(page.get("total") or 0)

            issues = page.get("issues") or []
            if not issues:
                # Server reported more than it serves; stop instead of spinning.
                logger.warning(f"Jira search returned an empty page at {start_at} of {total}")
                break

            for raw in issues:
                yield JiraIssue.from_api(raw)
            start_at += len(issues)
