from pathlib import Path, PurePosixPath


def safe_join(parent, child: str) -> Path:
    """
    Join an archive member name onto ``parent`` without escaping it.

    Leading slashes are stripped, the way tar does when extracting.
    """
    child_path = PurePosixPath(child.lstrip("/"))

    # '..' anywhere would walk out of the parent
    if ".." in child_path.parts:
        raise ValueError("child path cannot contain '..'")

    result_path = Path(parent).joinpath(*child_path.parts)
    parent_path = Path(parent).resolve()
    result_resolved = result_path.resolve()

    try:
        result_resolved.relative_to(parent_path)
    except ValueError:
        # e.g. an already extracted symlink pointing outside
        raise ValueError("child path would escape parent directory")

    return result_path
