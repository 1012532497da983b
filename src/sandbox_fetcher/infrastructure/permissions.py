"""
Permission management for fetched artifacts.
"""

import grp
import os
import pwd
import stat
from pathlib import Path

import structlog

from sandbox_fetcher.errors import PermissionSetError

logger = structlog.get_logger(__name__)

EXECUTE_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


def grant_execute(path: Path) -> None:
    """
    Add execute permission for owner, group and others (``chmod a+x``).

    Read/write and special bits are preserved.

    Raises:
        PermissionSetError: If the mode cannot be read or changed
    """
    try:
        mode = stat.S_IMODE(os.stat(path).st_mode)
        os.chmod(path, mode | EXECUTE_BITS)
    except OSError as e:
        raise PermissionSetError(
            "Failed to set execute permission",
            detail=str(e),
            path=str(path),
        ) from e
    logger.info("Granted execute permission", path=str(path))


def chown_tree(path: Path, user: str) -> None:
    """
    Recursively hand ``path`` over to ``user`` and its primary group.

    Symlinks are changed themselves, never followed.

    Raises:
        PermissionSetError: For an unknown user or a failed chown
    """
    try:
        entry = pwd.getpwnam(user)
    except KeyError as e:
        raise PermissionSetError(
            "Unknown user",
            detail=f"no passwd entry for '{user}'",
            path=str(path),
            user=user,
        ) from e

    uid, gid = entry.pw_uid, entry.pw_gid
    try:
        os.chown(path, uid, gid, follow_symlinks=False)
        for root, dirs, files in os.walk(path):
            for name in dirs + files:
                os.chown(os.path.join(root, name), uid, gid, follow_symlinks=False)
    except OSError as e:
        raise PermissionSetError(
            "Failed to change ownership of the work directory",
            detail=str(e),
            path=str(path),
            user=user,
        ) from e

    logger.info("Changed ownership", path=str(path), user=user, group=_group_name(gid))


def _group_name(gid: int) -> str:
    try:
        return grp.getgrgid(gid).gr_name
    except KeyError:
        return str(gid)
