"""Maps a file path captured at build time to its path in the repository."""

from typing import Optional


def resolve_repo_path(
    file_name: str,
    build_prefix: Optional[str] = None,
    repo_prefix: Optional[str] = None,
) -> str:
    """Rewrite file_name using the service's prefixes.

    Only the first occurrence of build_prefix is touched. Empty prefixes
    count as unset.
    """
    if build_prefix and repo_prefix:
        return file_name.replace(build_prefix, repo_prefix, 1)
    if build_prefix:
        return file_name.replace(build_prefix, "", 1)
    if repo_prefix:
        return repo_prefix + file_name
    return file_name
