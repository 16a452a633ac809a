"""
Head-tag rendering configuration for ACUL screens.

The tag list is declarative: each entry names the asset whose hash it needs,
the tag kind and the fixed attributes. Entries are emitted in declared order;
the base tag has to come first so relative URLs inside the bundles resolve
against the deployment.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from acul_deploy.assets.hashes import AssetHashSet, camel_keys
from acul_deploy.core.errors import MissingHashesError
from acul_deploy.core.json import stable_json_dumps

RENDERING_MODE = "advanced"

HeadTag = dict[str, Any]

_MODULE_SCRIPT: Mapping[str, Any] = {"type": "module", "defer": True}


@dataclass(frozen=True, slots=True)
class HeadTagSpec:
    tag: str
    url_attr: str
    # Path relative to the deployment root; "{hash}" is substituted.
    path: str
    asset_key: str | None = None
    attributes: Mapping[str, Any] = field(default_factory=dict)
    required: bool = True

    def render(self, root: str, hashes: AssetHashSet) -> HeadTag:
        path = self.path
        if self.asset_key is not None:
            path = path.format(hash=hashes.get(self.asset_key))
        attrs: dict[str, Any] = {self.url_attr: f"{root}/{path}", **self.attributes}
        return {"tag": self.tag, "attributes": attrs}


def module_script(asset_key: str, path: str, *, required: bool = True) -> HeadTagSpec:
    return HeadTagSpec(
        tag="script",
        url_attr="src",
        path=path,
        asset_key=asset_key,
        attributes=_MODULE_SCRIPT,
        required=required,
    )


DEFAULT_HEAD_TAGS: tuple[HeadTagSpec, ...] = (
    HeadTagSpec(tag="base", url_attr="href", path=""),
    module_script("main", "assets/main.{hash}.js"),
    HeadTagSpec(
        tag="link",
        url_attr="href",
        path="assets/shared/style.{hash}.css",
        asset_key="style",
        attributes={"rel": "stylesheet"},
    ),
    module_script("login_id", "assets/login-id/index.{hash}.js", required=False),
    module_script(
        "react_vendor", "assets/shared/react-vendor.{hash}.js", required=False
    ),
    module_script("vendor", "assets/shared/vendor.{hash}.js"),
)


def build_config(
    hashes: AssetHashSet,
    base_url: str,
    *,
    specs: Sequence[HeadTagSpec] = DEFAULT_HEAD_TAGS,
) -> dict[str, Any]:
    """
    Build the rendering configuration body for the Management API.

    Entries for optional assets whose hash is absent are left out; an absent
    required hash raises MissingHashesError.
    """
    root = base_url[:-1] if base_url.endswith("/") else base_url

    missing = [
        s.asset_key
        for s in specs
        if s.asset_key is not None and s.required and not hashes.get(s.asset_key)
    ]
    if missing:
        raise MissingHashesError(camel_keys(missing))

    head_tags = [
        s.render(root, hashes)
        for s in specs
        if s.asset_key is None or hashes.get(s.asset_key)
    ]
    return {"rendering_mode": RENDERING_MODE, "head_tags": head_tags}


def render_config_json(config: Mapping[str, Any]) -> str:
    return stable_json_dumps(config)
