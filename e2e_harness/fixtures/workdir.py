"""Working-directory helpers for devfile component scenarios.

odo reads its component configuration from the current directory, so
linking scenarios run inside a throwaway context directory that holds a
copy of an example devfile. ``--from-file`` scenarios also need service
manifests on disk; write_manifest puts them in a caller-owned directory.

Functions:
    create_new_context: Create a temporary context directory
    delete_dir: Remove a directory tree
    copy_example_devfile: Copy an example devfile into place
    enter_devfile_workspace: Set up a context with a devfile and chdir into it
    leave_devfile_workspace: Restore the working directory and remove the context
    write_manifest: Write a YAML manifest to a uniquely named file
"""

from __future__ import annotations

import os
import shutil
import tempfile
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog
import yaml

from e2e_harness.fixtures.namespaces import random_name

logger = structlog.get_logger(__name__)

DEVFILE_NAME = "devfile.yaml"


class ExamplesNotFoundError(FileNotFoundError):
    """Raised when an example source file does not exist."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(
            f"Example file not found: {path}\n"
            f"Set E2E_EXAMPLES_DIR or run pytest from the repository root"
        )


@dataclass(frozen=True)
class DevfileWorkspace:
    """A context directory the test process has changed into.

    Attributes:
        context: Temporary context directory.
        devfile: Path of the copied devfile inside the context.
        previous_cwd: Working directory to restore on leave.
    """

    context: Path
    devfile: Path
    previous_cwd: Path


def create_new_context() -> Path:
    """Create a new temporary context directory."""
    context = Path(tempfile.mkdtemp(prefix="odo-e2e-"))
    logger.debug("context_created", context=str(context))
    return context


def delete_dir(path: Path) -> None:
    """Remove a directory tree. A missing directory is not an error."""
    if not path.exists():
        return
    shutil.rmtree(path)
    logger.debug("context_deleted", context=str(path))


def copy_example_devfile(relative: str | Path, destination: Path, examples_dir: Path) -> Path:
    """Copy an example devfile to ``destination``.

    Args:
        relative: Path of the devfile under ``examples_dir``
            (e.g., "source/devfiles/nodejs/devfile.yaml").
        destination: Target file path.
        examples_dir: Root directory of the example sources.

    Returns:
        The destination path.

    Raises:
        ExamplesNotFoundError: If the example devfile does not exist.
    """
    source = examples_dir / relative
    if not source.is_file():
        raise ExamplesNotFoundError(source)
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, destination)
    return destination


def enter_devfile_workspace(
    examples_dir: Path,
    relative_devfile: str | Path,
) -> DevfileWorkspace:
    """Create a context holding an example devfile and change into it.

    If copying the devfile fails, the context is removed and the working
    directory is left unchanged.

    Returns:
        DevfileWorkspace to pass to leave_devfile_workspace.
    """
    previous_cwd = Path.cwd()
    context = create_new_context()
    devfile = context / DEVFILE_NAME
    try:
        copy_example_devfile(relative_devfile, devfile, examples_dir.resolve())
    except BaseException:
        delete_dir(context)
        raise
    os.chdir(context)
    return DevfileWorkspace(context=context, devfile=devfile, previous_cwd=previous_cwd)


def leave_devfile_workspace(workspace: DevfileWorkspace) -> None:
    """Change back to the previous working directory and remove the context."""
    os.chdir(workspace.previous_cwd)
    delete_dir(workspace.context)


def write_manifest(
    content: str | Mapping[str, Any],
    directory: Path,
) -> Path:
    """Write a YAML manifest for ``--from-file`` to a randomly named file.

    Args:
        content: Raw YAML text (written verbatim, e.g. dry-run output) or a
            mapping dumped with PyYAML.
        directory: Target directory, owned by the caller (e.g. pytest's
            ``tmp_path``), which removes it.

    Returns:
        Path of the written file.
    """
    path = directory / f"{random_name(6)}.yaml"
    if isinstance(content, str):
        text = content
    else:
        text = yaml.safe_dump(dict(content), sort_keys=False)
    path.write_text(text, encoding="utf-8")
    logger.debug("manifest_written", path=str(path))
    return path


# Module exports
__all__ = [
    "DEVFILE_NAME",
    "DevfileWorkspace",
    "ExamplesNotFoundError",
    "copy_example_devfile",
    "create_new_context",
    "delete_dir",
    "enter_devfile_workspace",
    "leave_devfile_workspace",
    "write_manifest",
]
