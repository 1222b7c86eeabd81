"""Tool configuration

Secrets and log level come from the environment (or a local ``.env``);
per-repository settings live in ``git config`` and are passed in by
``load_settings``.
"""

import re
from dataclasses import dataclass
from typing import Dict, Optional, Pattern
from urllib.parse import urlparse

from pydantic_settings import BaseSettings, SettingsConfigDict

from ticket_toolbox.errors import UsageError

JIRA_USER_KEY = "JIRA_USER"
JIRA_SECRET_KEY = "JIRA_SECRET"
ADO_PAT_KEY = "ADO_PAT"

JIRA_BASE_URL_KEY = "jira.baseUrl"
JIRA_ISSUE_REGEX_KEY = "jira.issueRegex"
JIRA_COMMIT_LINK_FORMAT_KEY = "jira.commitLinkFormat"
JIRA_SYNC_JQL_KEY = "jira.syncJql"
ADO_BASE_URL_KEY = "ado.baseUrl"

COMMIT_HASH_PLACEHOLDER = "{commitHash}"

# Settings field -> git config key
GIT_CONFIG_KEYS: Dict[str, str] = {
    "jira_base_url": JIRA_BASE_URL_KEY,
    "issue_regex": JIRA_ISSUE_REGEX_KEY,
    "commit_link_format": JIRA_COMMIT_LINK_FORMAT_KEY,
    "jira_sync_jql": JIRA_SYNC_JQL_KEY,
    "ado_base_url": ADO_BASE_URL_KEY,
}


@dataclass(frozen=True)
class RunOptions:
    """Per-run switches from the command line"""

    verbose: bool = False
    dry_run: bool = False


class ToolSettings(BaseSettings):
    """Tool settings"""

    # Jira
    jira_user: Optional[str] = None
    jira_secret: Optional[str] = None
    jira_base_url: Optional[str] = None
    issue_regex: Optional[str] = None
    commit_link_format: Optional[str] = None
    # Empty JQL searches every issue visible to the user.
    jira_sync_jql: str = ""

    # Azure DevOps
    ado_pat: Optional[str] = None
    ado_base_url: Optional[str] = None

    # Logging
    log_level: str = "WARNING"

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    def compile_issue_regex(self) -> Pattern[str]:
        if self.issue_regex is None:
            raise UsageError(f"{JIRA_ISSUE_REGEX_KEY} must be set")
        try:
            return re.compile(self.issue_regex)
        except re.error as e:
            raise UsageError(f"{JIRA_ISSUE_REGEX_KEY}: {e}") from e

    @staticmethod
    def _check_url(value: Optional[str], key: str) -> None:
        if value is None:
            raise UsageError(f"{key} must be set")
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise UsageError(f"{key}: invalid URL '{value}'")

    def validate_for_jira_access(self) -> None:
        if self.jira_user is None:
            raise UsageError(f"{JIRA_USER_KEY} must be set")
        if self.jira_secret is None:
            raise UsageError(f"{JIRA_SECRET_KEY} must be set")
        self._check_url(self.jira_base_url, JIRA_BASE_URL_KEY)

    def validate_for_ado_access(self) -> None:
        if self.ado_pat is None:
            raise UsageError(f"{ADO_PAT_KEY} must be set")
        self._check_url(self.ado_base_url, ADO_BASE_URL_KEY)

    def validate_for_jira_linking(self) -> None:
        self.compile_issue_regex()
        if self.commit_link_format is None:
            raise UsageError(f"{JIRA_COMMIT_LINK_FORMAT_KEY} must be set")
        if COMMIT_HASH_PLACEHOLDER not in self.commit_link_format:
            raise UsageError(
                f"{JIRA_COMMIT_LINK_FORMAT_KEY} must contain {COMMIT_HASH_PLACEHOLDER}"
            )

    def validate_for_syncing_links(self) -> None:
        self.compile_issue_regex()


def load_settings(git) -> ToolSettings:
    """Build settings from the environment plus the repository's git config"""
    overrides = {}
    for field, key in GIT_CONFIG_KEYS.items():
        value = git.get_config(key)
        # Leave unset keys to the environment / defaults.
        if value is not None:
            overrides[field] = value
    return ToolSettings(**overrides)
