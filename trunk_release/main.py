# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Main entry point for the Trunk Release Action.

This module parses action inputs, runs the requested engine action against
the working copy, publishes the result and writes the action outputs.

References:
    - GitHub Actions Environment Variables:
      https://docs.github.com/en/actions/writing-workflows/choosing-what-your-workflow-does/store-information-in-variables#default-environment-variables
    - GitHub Actions Outputs:
      https://docs.github.com/en/actions/writing-workflows/choosing-what-your-workflow-does/passing-information-between-jobs#setting-an-output-parameter
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import dataclass

from trunk_release.branch import compile_release_pattern, validate_branch_name
from trunk_release.engine import SUPPORTED_ACTIONS, BranchPolicy, ReleaseResult, run_action
from trunk_release.errors import ConfigurationError, ReleaseError
from trunk_release.github_api import DEFAULT_API_URL, resolve_push_url
from trunk_release.store import GitStore, RefStore, redact_url

logger = logging.getLogger(__name__)

DEFAULT_TRUNK_BRANCH_NAME = "main"
DEFAULT_RELEASE_BRANCH_PATTERN = r"^release-(0|[1-9]\d*)\.(0|[1-9]\d*)\.x$"
DEFAULT_RELEASE_BRANCH_TEMPLATE = "release-${major}.${minor}.x"


@dataclass
class ActionInputs:
    """Parsed action inputs from CLI arguments or environment variables."""

    action: str
    trunk_branch_name: str = DEFAULT_TRUNK_BRANCH_NAME
    release_branch_pattern: str = DEFAULT_RELEASE_BRANCH_PATTERN
    release_branch_template: str = DEFAULT_RELEASE_BRANCH_TEMPLATE
    dry_run: bool = False
    debug: bool = False
    token: str = ""
    repository: str = ""
    api_url: str = DEFAULT_API_URL
    repo_path: str = "."

    def policy(self) -> BranchPolicy:
        """Build the branch policy the engine runs with."""
        return BranchPolicy(
            trunk_branch_name=self.trunk_branch_name,
            release_pattern=compile_release_pattern(self.release_branch_pattern),
            release_branch_template=self.release_branch_template,
        )


@dataclass
class ActionOutputs:
    """Action outputs to be written to GITHUB_OUTPUT."""

    next_version: str = ""
    previous_version: str = ""
    previous_stable_version: str = ""

    @classmethod
    def from_result(cls, result: ReleaseResult) -> ActionOutputs:
        return cls(
            next_version=result.next_version,
            previous_version=result.previous_version,
            previous_stable_version=result.previous_stable_version,
        )


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "false").lower() == "true"


def parse_inputs(args: list[str] | None = None) -> ActionInputs:
    """Parse action inputs from CLI arguments or environment variables.

    CLI arguments take precedence over environment variables.
    When run as a GitHub Action, environment variables are used.
    When run from CLI, arguments can be provided directly.

    Args:
        args: Optional list of CLI arguments. If None, uses environment
              variables only (GitHub Actions mode). Pass sys.argv[1:] for
              CLI mode.

    Returns:
        ActionInputs with parsed values.

    Raises:
        ConfigurationError: If an input is unsupported or malformed.
    """
    parser = argparse.ArgumentParser(
        description="Trunk Release Action - Cut release branches and promote release candidates",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment Variables (used as defaults when CLI args not provided):
  INPUT_ACTION                   Action to run (release, release-cut)
  INPUT_TRUNK_BRANCH_NAME        Name of the trunk branch
  INPUT_RELEASE_BRANCH_PATTERN   Regular expression matching release branches
  INPUT_RELEASE_BRANCH_TEMPLATE  Template for new release branch names
  INPUT_DRY_RUN                  Dry-run mode, don't push (true/false)
  INPUT_DEBUG                    Enable debug logging (true/false)
  INPUT_TOKEN, GH_TOKEN, GITHUB_TOKEN  Token used to push

Examples:
  # Run with environment variables (GitHub Actions mode)
  python -m trunk_release.main

  # Propose the next version locally without pushing
  python -m trunk_release.main --action release-cut --dry-run --debug

  # Promote the release candidate on the current release branch
  python -m trunk_release.main --action release --repository owner/repo
        """,
    )

    parser.add_argument(
        "--action",
        default=os.environ.get("INPUT_ACTION", ""),
        help="Action to run: release or release-cut",
    )
    parser.add_argument(
        "--trunk-branch-name",
        default=os.environ.get("INPUT_TRUNK_BRANCH_NAME", DEFAULT_TRUNK_BRANCH_NAME),
        help=f"Name of the trunk branch (default: {DEFAULT_TRUNK_BRANCH_NAME})",
    )
    parser.add_argument(
        "--release-branch-pattern",
        default=os.environ.get("INPUT_RELEASE_BRANCH_PATTERN", DEFAULT_RELEASE_BRANCH_PATTERN),
        help="Regular expression matching release branch names",
    )
    parser.add_argument(
        "--release-branch-template",
        default=os.environ.get("INPUT_RELEASE_BRANCH_TEMPLATE", DEFAULT_RELEASE_BRANCH_TEMPLATE),
        help="Template for release branch names, with ${major}, ${minor}, ${patch} and ${prerelease}",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=_env_flag("INPUT_DRY_RUN"),
        help="Dry-run mode - don't push branches and tags",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=_env_flag("INPUT_DEBUG"),
        help="Enable debug logging",
    )
    parser.add_argument(
        "--token",
        default=os.environ.get("INPUT_TOKEN", os.environ.get("GH_TOKEN", os.environ.get("GITHUB_TOKEN", ""))),
        help="GitHub token used to push (default: from INPUT_TOKEN, GH_TOKEN or GITHUB_TOKEN env)",
    )
    parser.add_argument(
        "--repository",
        default=os.environ.get("GITHUB_REPOSITORY", ""),
        help="Repository in 'owner/repo' format (default: from GITHUB_REPOSITORY env)",
    )
    parser.add_argument(
        "--api-url",
        default=os.environ.get("GITHUB_API_URL", DEFAULT_API_URL),
        help=f"GitHub REST API URL (default: from GITHUB_API_URL env or {DEFAULT_API_URL})",
    )
    parser.add_argument(
        "--repo-path",
        default=os.environ.get("GITHUB_WORKSPACE", "."),
        help="Path to the git working copy (default: from GITHUB_WORKSPACE env or '.')",
    )

    # Use empty list for GitHub Actions mode (env vars only), or provided args for CLI
    parsed = parser.parse_args(args if args is not None else [])

    inputs = ActionInputs(
        action=parsed.action,
        trunk_branch_name=parsed.trunk_branch_name,
        release_branch_pattern=parsed.release_branch_pattern,
        release_branch_template=parsed.release_branch_template,
        dry_run=parsed.dry_run,
        debug=parsed.debug,
        token=parsed.token,
        repository=parsed.repository,
        api_url=parsed.api_url,
        repo_path=parsed.repo_path,
    )
    validate_inputs(inputs)
    return inputs


def validate_inputs(inputs: ActionInputs) -> None:
    """Validate parsed inputs.

    Raises:
        ConfigurationError: Naming the first offending input.
    """
    if inputs.action not in SUPPORTED_ACTIONS:
        raise ConfigurationError(
            f"Not supported action: '{inputs.action}'. Expected one of: {', '.join(SUPPORTED_ACTIONS)}"
        )

    if not validate_branch_name(inputs.trunk_branch_name):
        raise ConfigurationError(f"Invalid trunk-branch-name '{inputs.trunk_branch_name}'")

    if not validate_branch_name(inputs.release_branch_template):
        raise ConfigurationError(f"Invalid release-branch-template '{inputs.release_branch_template}'")

    compile_release_pattern(inputs.release_branch_pattern)

    if not inputs.dry_run:
        if not inputs.token:
            raise ConfigurationError("GitHub token is required. Set INPUT_TOKEN, GH_TOKEN or GITHUB_TOKEN.")
        if not inputs.repository:
            raise ConfigurationError("Repository is required. Set GITHUB_REPOSITORY or pass --repository.")


def set_outputs(outputs: ActionOutputs) -> None:
    """Write action outputs to GITHUB_OUTPUT file.

    Args:
        outputs: ActionOutputs to write.

    References:
        - https://docs.github.com/en/actions/writing-workflows/choosing-what-your-workflow-does/passing-information-between-jobs#setting-an-output-parameter
    """
    output_file = os.environ.get("GITHUB_OUTPUT", "")
    if not output_file:
        logger.warning("GITHUB_OUTPUT not set, outputs will not be written")
        return

    with open(output_file, "a") as f:
        f.write(f"next-version={outputs.next_version}\n")
        f.write(f"previous-version={outputs.previous_version}\n")
        f.write(f"previous-stable-version={outputs.previous_stable_version}\n")

    logger.info(
        "Set outputs: next-version=%s, previous-version=%s, previous-stable-version=%s",
        outputs.next_version,
        outputs.previous_version,
        outputs.previous_stable_version,
    )


def configure_logging(debug: bool) -> None:
    """Configure logging based on debug flag.

    Args:
        debug: If True, enable DEBUG level logging.
    """
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def publish(store: RefStore, inputs: ActionInputs) -> None:
    """Push all branches and tags to the repository's remote.

    Does nothing in dry-run mode.

    Raises:
        PublishError: If the remote cannot be resolved or the push fails.
    """
    if inputs.dry_run:
        logger.info("[DRY-RUN] Would push all branches and tags to '%s'", inputs.repository or "remote")
        return

    remote_url = resolve_push_url(inputs.token, inputs.repository, inputs.api_url)
    logger.info("Pushing changes to '%s'...", redact_url(remote_url))
    store.push(remote_url)


def run(inputs: ActionInputs, store: RefStore | None = None) -> ActionOutputs:
    """Run the configured action and publish its result.

    Args:
        inputs: Validated action inputs.
        store: Ref store to operate on. Defaults to a GitStore at repo_path.

    Returns:
        ActionOutputs for the successful run.
    """
    if store is None:
        store = GitStore(inputs.repo_path)

    result = run_action(store, inputs.action, inputs.policy())
    publish(store, inputs)
    return ActionOutputs.from_result(result)


def main(args: list[str] | None = None) -> None:
    """Main entry point for the action."""
    try:
        inputs = parse_inputs(args if args is not None else sys.argv[1:])
    except ConfigurationError as e:
        configure_logging(_env_flag("INPUT_DEBUG"))
        logger.error("%s", e)
        sys.exit(1)

    configure_logging(inputs.debug)
    logger.debug("Action: %s, trunk: %s, path: %s", inputs.action, inputs.trunk_branch_name, inputs.repo_path)

    try:
        outputs = run(inputs)
    except ReleaseError as e:
        logger.error("%s", e)
        sys.exit(1)

    set_outputs(outputs)


if __name__ == "__main__":  # pragma: no cover
    main()
