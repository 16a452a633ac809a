from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable, Sequence

import structlog
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from acul_deploy.core.errors import ExtractionError, MissingHashesError
from acul_deploy.core.fs import relpath_posix

log = structlog.get_logger(__name__)

_HASH_SUFFIX_RE = re.compile(r"\.([a-zA-Z0-9_-]+)\.(js|css)$")

ASSET_KEYS: tuple[str, ...] = ("style", "main", "login_id", "vendor", "react_vendor")

# Substrings identifying each bundle within the build output tree.
BUILD_PATTERNS: dict[str, str] = {
    "style": "shared/style.",
    "main": "main.",
    "login_id": "login-id/index.",
    "vendor": "shared/vendor.",
    "react_vendor": "shared/react-vendor.",
}

BUILD_REQUIRED: tuple[str, ...] = ("style", "main", "vendor", "login_id")


class AssetHashSet(BaseModel):
    """
    Content hashes of the bundles referenced by the head tags.

    Serializes with camelCase keys (loginId, reactVendor).
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    style: str | None = None
    main: str | None = None
    login_id: str | None = None
    vendor: str | None = None
    react_vendor: str | None = None

    def get(self, key: str) -> str | None:
        return getattr(self, key)

    def missing(self, required: Iterable[str]) -> list[str]:
        return [k for k in required if not self.get(k)]

    def resolved(self) -> dict[str, str]:
        return {k: v for k in ASSET_KEYS if (v := self.get(k)) is not None}

    def to_json_dict(self) -> dict[str, str | None]:
        return self.model_dump(by_alias=True)


def camel_keys(keys: Iterable[str]) -> list[str]:
    return [to_camel(k) for k in keys]


def extract_hash(filename: str) -> str | None:
    m = _HASH_SUFFIX_RE.search(filename)
    return m.group(1) if m else None


def find_hash(files: Sequence[str], pattern: str) -> str | None:
    match = next((f for f in files if pattern in f), None)
    if match is None:
        log.warning("Could not find file matching pattern", pattern=pattern)
        return None
    return extract_hash(match)


def list_files(root: Path) -> list[str]:
    """Regular files under root, as sorted posix paths relative to root."""
    root = Path(root)
    return sorted(relpath_posix(p, root) for p in root.rglob("*") if p.is_file())


def validate_hashes(
    hashes: AssetHashSet, required: Iterable[str], *, preview: str | None = None
) -> AssetHashSet:
    missing = hashes.missing(required)
    if missing:
        log.error("Missing required asset hashes", missing=camel_keys(missing))
        raise MissingHashesError(camel_keys(missing), preview=preview)
    return hashes


def hashes_from_build(
    build_dir: Path, *, required: Iterable[str] = BUILD_REQUIRED
) -> AssetHashSet:
    build_dir = Path(build_dir)
    if not build_dir.is_dir():
        raise ExtractionError(
            f"Build directory not found: {build_dir} (build the bundle first)"
        )

    files = list_files(build_dir)
    log.info("Found assets", build_dir=str(build_dir), files=len(files))

    hashes = AssetHashSet(
        **{key: find_hash(files, pattern) for key, pattern in BUILD_PATTERNS.items()}
    )
    validate_hashes(hashes, required)

    log.info("Extracted hashes", **hashes.resolved())
    return hashes
