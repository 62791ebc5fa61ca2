"""Package manifest — name, version, website, license, release notes."""

from __future__ import annotations

from importlib import metadata

from pydantic import BaseModel

DISTRIBUTION = "covctl"
DEFAULT_WEBSITE = "https://github.com/covctl/covctl"


class PackageManifest(BaseModel):
    """Descriptive metadata shown by ``covctl about``."""

    model_config = {"frozen": True}

    name: str = DISTRIBUTION
    version: str = "0.0.0"
    website: str = DEFAULT_WEBSITE
    license: str = ""
    release_notes: str = ""


def load_manifest() -> PackageManifest:
    """Build the manifest from installed package metadata.

    Falls back to code defaults when covctl is not installed (e.g. running
    from a source checkout).
    """
    from covctl import __version__

    try:
        meta = metadata.metadata(DISTRIBUTION)
    except metadata.PackageNotFoundError:
        return PackageManifest(version=__version__)

    website = DEFAULT_WEBSITE
    for entry in meta.get_all("Project-URL") or []:
        label, _, url = entry.partition(",")
        if label.strip().lower() in ("homepage", "repository") and url.strip():
            website = url.strip()
            break

    return PackageManifest(
        name=meta.get("Name") or DISTRIBUTION,
        version=meta.get("Version") or __version__,
        website=website,
        license=meta.get("License-Expression") or meta.get("License") or "",
        release_notes=meta.get_payload() or "",  # type: ignore[attr-defined]
    )
