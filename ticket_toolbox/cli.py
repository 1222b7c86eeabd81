"""Command line entry point"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from ticket_toolbox.config import (
    ADO_PAT_KEY,
    JIRA_SECRET_KEY,
    RunOptions,
    ToolSettings,
    load_settings,
)
from ticket_toolbox.console import PROG, warn
from ticket_toolbox.credentials import get_secret
from ticket_toolbox.errors import (
    EX_FAILURE,
    SubprocessFailure,
    ToolboxError,
    TransportFailure,
    UsageError,
)
from ticket_toolbox.services import (
    AdoClient,
    GitClient,
    JiraClient,
    LinkCommitsService,
    LinkSyncService,
)
from ticket_toolbox.services.link_commits_service import check_refs

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class _ArgumentParser(argparse.ArgumentParser):
    """argparse that reports errors as UsageError instead of exiting with 2"""

    def error(self, message):
        raise UsageError(message)


def build_parser() -> argparse.ArgumentParser:
    # Options are accepted both before and after the subcommand.
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-v",
        "--interactive",
        dest="verbose",
        action="store_true",
        default=argparse.SUPPRESS,
        help="echo outbound calls and composed comments",
    )
    common.add_argument(
        "-n",
        "--dry-run",
        dest="dry_run",
        action="store_true",
        default=argparse.SUPPRESS,
        help="do everything except writing to Jira",
    )

    parser = _ArgumentParser(
        prog=PROG,
        parents=[common],
        description="Link git commits to Jira issues and reconcile Jira links with Azure DevOps",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="command")
    subparsers.required = True

    link_commits = subparsers.add_parser(
        "link-commits",
        parents=[common],
        help="comment on Jira issues mentioned in git log",
    )
    link_commits.add_argument("refs", nargs="*", help="revisions passed to git log")

    subparsers.add_parser(
        "sync-links",
        parents=[common],
        help="report Jira links missing from Azure DevOps",
    )
    return parser


def _configure_logging(options: RunOptions, log_level: Optional[str]) -> None:
    # Called again once settings are loaded; basicConfig only installs the handler once.
    logging.basicConfig(format=LOG_FORMAT)
    if options.verbose:
        level = logging.INFO
    else:
        level = getattr(logging, (log_level or "WARNING").upper(), logging.WARNING)
    logging.getLogger().setLevel(level)


def _is_blank(value: Optional[str]) -> bool:
    return not value or not value.strip()


def _jira_client(settings: ToolSettings, options: RunOptions) -> JiraClient:
    return JiraClient(settings.jira_base_url, settings.jira_user, settings.jira_secret, options=options)


def run_link_commits(refs: List[str], settings: ToolSettings, options: RunOptions, git: GitClient) -> None:
    check_refs(refs)

    if _is_blank(settings.jira_secret):
        settings.jira_secret = get_secret(JIRA_SECRET_KEY, "Jira client secret", options)

    settings.validate_for_jira_access()
    settings.validate_for_jira_linking()

    service = LinkCommitsService(
        _jira_client(settings, options),
        git,
        settings.compile_issue_regex(),
        settings.commit_link_format,
        options=options,
    )
    service.run(refs)


def run_sync_links(settings: ToolSettings, options: RunOptions) -> None:
    if _is_blank(settings.jira_secret):
        settings.jira_secret = get_secret(JIRA_SECRET_KEY, "Jira client secret", options)
    if _is_blank(settings.ado_pat):
        settings.ado_pat = get_secret(ADO_PAT_KEY, "ADO PAT", options)

    settings.validate_for_jira_access()
    settings.validate_for_ado_access()
    settings.validate_for_syncing_links()

    service = LinkSyncService(
        _jira_client(settings, options),
        AdoClient(settings.ado_base_url, settings.ado_pat, options=options),
        settings.compile_issue_regex(),
        jql=settings.jira_sync_jql,
        options=options,
    )
    service.run()


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    options = RunOptions()

    try:
        args = parser.parse_args(argv)
        options = RunOptions(
            verbose=getattr(args, "verbose", False),
            dry_run=getattr(args, "dry_run", False),
        )

        _configure_logging(options, os.environ.get("LOG_LEVEL"))
        git = GitClient(options)
        settings = load_settings(git)
        _configure_logging(options, settings.log_level)

        if args.command == "link-commits":
            run_link_commits(args.refs, settings, options, git)
        else:
            run_sync_links(settings, options)
        return 0

    except UsageError as e:
        warn(str(e))
        print(parser.format_usage().rstrip(), file=sys.stderr)
        return e.exit_code
    except SubprocessFailure as e:
        warn(str(e))
        return e.exit_code
    except TransportFailure as e:
        print(f"< HTTP {e.status_code}", file=sys.stderr)
        print("<", file=sys.stderr)
        if options.verbose and e.response_body:
            for line in e.response_body.split("\n"):
                print(f"< {line}", file=sys.stderr)
        warn(str(e))
        return e.exit_code
    except ToolboxError as e:
        warn(str(e))
        return e.exit_code
    except Exception as e:
        logger.debug("Unhandled error", exc_info=True)
        warn(str(e))
        return EX_FAILURE
