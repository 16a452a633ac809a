from .hashes import (
    ASSET_KEYS,
    AssetHashSet,
    extract_hash,
    find_hash,
    hashes_from_build,
    list_files,
    validate_hashes,
)
from .remote import fetch_deployed_html, hashes_from_deployment, hashes_from_html

__all__ = [
    "ASSET_KEYS",
    "AssetHashSet",
    "extract_hash",
    "find_hash",
    "hashes_from_build",
    "list_files",
    "validate_hashes",
    "fetch_deployed_html",
    "hashes_from_deployment",
    "hashes_from_html",
]
