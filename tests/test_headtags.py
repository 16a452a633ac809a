from __future__ import annotations

import pytest
from acul_deploy.assets.hashes import AssetHashSet
from acul_deploy.core.errors import MissingHashesError
from acul_deploy.headtags import (
    DEFAULT_HEAD_TAGS,
    HeadTagSpec,
    build_config,
    module_script,
    render_config_json,
)

HASHES = AssetHashSet(
    main="abc123",
    style="def456",
    vendor="ghi789",
    login_id="jkl012",
    react_vendor="mno345",
)


def test_default_tag_sequence() -> None:
    cfg = build_config(HASHES, "https://example.vercel.app/")
    assert cfg["rendering_mode"] == "advanced"

    tags = cfg["head_tags"]
    assert [t["tag"] for t in tags] == ["base", "script", "link", "script", "script", "script"]
    assert tags == [
        {"tag": "base", "attributes": {"href": "https://example.vercel.app/"}},
        {
            "tag": "script",
            "attributes": {
                "src": "https://example.vercel.app/assets/main.abc123.js",
                "type": "module",
                "defer": True,
            },
        },
        {
            "tag": "link",
            "attributes": {
                "href": "https://example.vercel.app/assets/shared/style.def456.css",
                "rel": "stylesheet",
            },
        },
        {
            "tag": "script",
            "attributes": {
                "src": "https://example.vercel.app/assets/login-id/index.jkl012.js",
                "type": "module",
                "defer": True,
            },
        },
        {
            "tag": "script",
            "attributes": {
                "src": "https://example.vercel.app/assets/shared/react-vendor.mno345.js",
                "type": "module",
                "defer": True,
            },
        },
        {
            "tag": "script",
            "attributes": {
                "src": "https://example.vercel.app/assets/shared/vendor.ghi789.js",
                "type": "module",
                "defer": True,
            },
        },
    ]


@pytest.mark.parametrize(
    "base_url", ["https://example.vercel.app", "https://example.vercel.app/"]
)
def test_trailing_slash_is_normalized(base_url: str) -> None:
    tags = build_config(HASHES, base_url)["head_tags"]
    assert tags[1]["attributes"]["src"] == "https://example.vercel.app/assets/main.abc123.js"
    for t in tags[1:]:
        url = t["attributes"].get("src") or t["attributes"]["href"]
        assert "//assets" not in url


def test_optional_assets_are_omitted_when_absent() -> None:
    partial = HASHES.model_copy(update={"react_vendor": None, "login_id": None})
    tags = build_config(partial, "https://example.vercel.app")["head_tags"]
    assert len(tags) == 4
    assert all("None" not in str(t) for t in tags)


def test_missing_required_asset_raises() -> None:
    with pytest.raises(MissingHashesError) as ei:
        build_config(HASHES.model_copy(update={"vendor": None}), "https://x")
    assert ei.value.missing == ("vendor",)


def test_custom_tag_list_is_processed_in_order() -> None:
    specs = (
        module_script("vendor", "assets/shared/vendor.{hash}.js"),
        HeadTagSpec(tag="base", url_attr="href", path=""),
    )
    tags = build_config(HASHES, "https://x/", specs=specs)["head_tags"]
    assert [t["tag"] for t in tags] == ["script", "base"]


def test_config_json_is_deterministic() -> None:
    a = render_config_json(build_config(HASHES, "https://example.vercel.app/"))
    b = render_config_json(build_config(HASHES, "https://example.vercel.app/"))
    assert a == b
    assert a.startswith('{"head_tags":[{"attributes":{"href":')
    assert len(DEFAULT_HEAD_TAGS) == 6


def test_only_one_trailing_slash_is_stripped() -> None:
    tags = build_config(HASHES, "https://example.vercel.app/app//")["head_tags"]
    assert tags[0]["attributes"]["href"] == "https://example.vercel.app/app//"
    assert tags[1]["attributes"]["src"] == "https://example.vercel.app/app//assets/main.abc123.js"
