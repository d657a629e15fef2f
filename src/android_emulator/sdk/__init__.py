"""SDK tool models: versions, package catalogs, proxy settings and CLI builders."""

__all__ = [
    "channel",
    "cli",
    "constants",
    "packages",
    "proxy",
    "version",
]
