"""Services"""

from ticket_toolbox.services.ado_client import AdoClient
from ticket_toolbox.services.git import GitClient
from ticket_toolbox.services.jira_client import JiraClient
from ticket_toolbox.services.link_commits_service import LinkCommitsService
from ticket_toolbox.services.link_sync_service import LinkReconciler, LinkSyncService

__all__ = [
    "AdoClient",
    "GitClient",
    "JiraClient",
    "LinkCommitsService",
    "LinkReconciler",
    "LinkSyncService",
]
