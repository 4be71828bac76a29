"""Media-type based API version negotiation."""

from __future__ import annotations

from blog_api.errors import unsupported_version


def requested_versions(accept: str | None, *, vendor: str) -> list[str]:
    """List the vendor versions named by an ``Accept`` header, in header order."""
    prefix = f"application/vnd.{vendor.lower()}."
    versions: list[str] = []
    for media_range in (accept or "").split(","):
        media_type = media_range.split(";", 1)[0].strip().lower()
        if not media_type.startswith(prefix):
            continue
        version = media_type[len(prefix):].removesuffix("+json")
        if version:
            versions.append(version)
    return versions


def negotiate_api_version(accept: str | None, *, vendor: str, version: str) -> str:
    """Return the version to serve for ``accept``.

    Headers that do not mention the vendor media type (missing, ``*/*``,
    ``application/json``) get the default version. Headers that name only
    other vendor versions are rejected.
    """
    requested = requested_versions(accept, vendor=vendor)
    if not requested or version.lower() in requested:
        return version

    raise unsupported_version(
        requested=f"application/vnd.{vendor}.{requested[0]}",
        supported=f"application/vnd.{vendor}.{version}",
    )


__all__ = ["negotiate_api_version", "requested_versions"]
