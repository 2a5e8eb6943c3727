# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Path helpers shared by the object storage service and its tests.
# =============================================================================


# =============================================================================
# Object Path Utilities
# =============================================================================

def parse_object_path(path: str) -> tuple[str, str]:
    """
    Split a "/bucket/key/parts" path into (bucket, key).

    A leading slash is optional. The key keeps its inner slashes.

    Raises:
        ValueError: If the path has no object part after the bucket

    Example:
        parse_object_path("/media/.private/uploads/abc")
        # -> ("media", ".private/uploads/abc")
    """
    if not path.startswith("/"):
        path = f"/{path}"

    parts = path.split("/")
    if len(parts) < 3:
        raise ValueError("Invalid path: must contain at least a bucket name")

    return parts[1], "/".join(parts[2:])


def with_trailing_slash(path: str) -> str:
    """Return the path with exactly one trailing slash appended if missing."""
    return path if path.endswith("/") else f"{path}/"
