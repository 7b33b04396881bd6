"""
Git Operations for Plugin Installation.

This module provides the git operations used to build plugins from source.

Key features:
- Clone plugin repositories into a build directory
- Checkout branches or tags, tracking the matching remote branch
- GitClient wrapper so builders can take the git client as a collaborator
"""

import subprocess
from enum import Enum
from pathlib import Path

from plugsmith.plugin.errors import InstallFailure


class GitError(InstallFailure):
    """Base exception for git-related errors."""

    pass


class UpstreamMode(Enum):
    """How a newly created local branch relates to its remote branch."""

    TRACK = "track"
    NOTRACK = "no-track"
    SET_UPSTREAM = "set-upstream"


def _run_git(args: list[str], cwd: Path | None = None) -> subprocess.CompletedProcess:
    try:
        return subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError as e:
        raise GitError("git command not found. Please install git.") from e
    except OSError as e:
        raise GitError(f"Failed to run git {args[0]}: {e}") from e


def _ref_exists(repo_dir: Path, ref: str) -> bool:
    result = _run_git(["rev-parse", "--verify", "--quiet", ref], cwd=repo_dir)
    return result.returncode == 0


def clone(target_dir: Path, repo_url: str) -> Path:
    """
    Clone a plugin repository.

    Args:
        target_dir: Target directory for clone (must be empty or absent)
        repo_url: Git repository URL

    Returns:
        The cloned repository directory

    Raises:
        GitError: If clone operation fails
    """
    target_dir.parent.mkdir(parents=True, exist_ok=True)

    result = _run_git(["clone", repo_url, str(target_dir)])

    if result.returncode != 0:
        raise GitError(
            f"Failed to clone repository {repo_url}: {result.stderr or result.stdout}"
        )

    return target_dir


def checkout(
    repo_dir: Path,
    ref: str,
    create_branch: bool = False,
    upstream: UpstreamMode = UpstreamMode.SET_UPSTREAM,
    force: bool = False,
) -> None:
    """
    Checkout a branch or tag.

    When ``ref`` names a branch that only exists on ``origin``, a local branch
    is created from it, tracking the remote one unless ``upstream`` is NOTRACK.
    Tags and commits are checked out detached.

    Args:
        repo_dir: Repository directory
        ref: Branch, tag or commit to checkout
        create_branch: Create a new local branch named ``ref``
        upstream: Tracking mode for a newly created branch
        force: Discard local changes

    Raises:
        GitError: If the ref cannot be found or checkout fails
    """
    remote_ref = f"refs/remotes/origin/{ref}"
    has_local = _ref_exists(repo_dir, f"refs/heads/{ref}")
    has_remote = _ref_exists(repo_dir, remote_ref)

    cmd = ["checkout"]
    if force:
        cmd.append("--force")

    if create_branch or (has_remote and not has_local):
        cmd.extend(["-b", ref])
        if has_remote:
            cmd.append("--no-track" if upstream is UpstreamMode.NOTRACK else "--track")
            cmd.append(f"origin/{ref}")
    else:
        if not has_local and not _ref_exists(repo_dir, f"{ref}^{{commit}}"):
            raise GitError(f"Failed to checkout {ref}: no such branch or tag")
        cmd.append(ref)

    result = _run_git(cmd, cwd=repo_dir)

    if result.returncode != 0:
        raise GitError(f"Failed to checkout {ref}: {result.stderr or result.stdout}")


class GitClient:
    """Source-control client used by the source builder."""

    def clone(self, target_dir: Path, repo_url: str) -> Path:
        return clone(target_dir, repo_url)

    def checkout(
        self,
        repo_dir: Path,
        ref: str,
        create_branch: bool = False,
        upstream: UpstreamMode = UpstreamMode.SET_UPSTREAM,
        force: bool = False,
    ) -> None:
        checkout(repo_dir, ref, create_branch, upstream, force)
