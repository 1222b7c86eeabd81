"""Link git commits to Jira issues and reconcile Jira links with Azure DevOps"""

__version__ = "1.0.0"
