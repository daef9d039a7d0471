"""Asset URL rewriting and diagnostics for flow-diagram documents.

Diagrams are authored against the site root (``/assets/...``) but may be
served under a sub-path, and editors sometimes paste local ``file:`` or
``blob:`` links that only work on the author's machine. This module walks an
arbitrary JSON value and either rewrites those references for rendering or
reports them for the editor.
"""
from __future__ import annotations

import re
from typing import Any, Dict, Iterator, List, Literal, Mapping, Optional, Set, Tuple
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict

AssetRenderPolicy = Literal["degrade", "strict"]
AssetIssueCode = Literal["FILE_URL", "BLOB_URL", "NON_STANDARD_ABSOLUTE_PATH"]

ASSET_PREFIX = "/assets/"
FRAMEWORK_ASSET_PREFIX = "/_nuxt/"
RENDER_POLICIES: Tuple[str, ...] = ("degrade", "strict")

# Matched against the last segment of the key path, case-insensitively.
URL_BEARING_KEYS = frozenset(
    key.lower() for key in ("avatar", "src", "url", "href", "image", "imageUrl", "backgroundImage")
)

_FILE_PROTOCOL_RE = re.compile(r"^file:", re.IGNORECASE)
_BLOB_PROTOCOL_RE = re.compile(r"^blob:", re.IGNORECASE)

_PLACEHOLDER_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="220" height="120" viewBox="0 0 220 120">'
    '<rect width="220" height="120" fill="#f1f5f9"/>'
    '<rect x="1" y="1" width="218" height="118" fill="none" stroke="#cbd5e1"/>'
    '<text x="110" y="68" font-size="14" text-anchor="middle" fill="#64748b">asset missing</text>'
    "</svg>"
)
PLACEHOLDER_IMAGE = "data:image/svg+xml;charset=UTF-8," + quote(_PLACEHOLDER_SVG, safe="-_.!~*'()")

_ISSUE_MESSAGES: Dict[str, str] = {
    "FILE_URL": "检测到 file:// 本地路径，站点预览无法直接访问该资源。",
    "BLOB_URL": "检测到 blob: 临时资源链接，刷新或跨端渲染后会失效。",
    "NON_STANDARD_ABSOLUTE_PATH": "检测到非标准绝对路径，可能在子路径部署下出现 404。",
}


class AssetIssue(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: AssetIssueCode
    url: str
    message: str


def normalize_base_url(base_url: Optional[str]) -> str:
    if not base_url:
        return "/"
    return base_url if base_url.endswith("/") else f"{base_url}/"


def _join_url(base_url: str, path: str) -> str:
    return normalize_base_url(base_url) + path.lstrip("/")


def _is_local_scheme(value: str) -> bool:
    return bool(_FILE_PROTOCOL_RE.match(value) or _BLOB_PROTOCOL_RE.match(value))


def is_asset_url(value: str, key_path: str) -> bool:
    """Heuristic: does *value*, found at *key_path*, reference an asset?"""
    if not value:
        return False
    if value.startswith(ASSET_PREFIX) or _is_local_scheme(value):
        return True
    last_segment = key_path.rsplit(".", 1)[-1].lower()
    return last_segment in URL_BEARING_KEYS


def rewrite_asset_url(url: str, base_url: str, policy: AssetRenderPolicy) -> str:
    if url.startswith(ASSET_PREFIX):
        return _join_url(base_url, url)
    if _is_local_scheme(url):
        return PLACEHOLDER_IMAGE if policy == "degrade" else url
    return url


def inspect_asset_url(url: str, base_url: str) -> Optional[AssetIssue]:
    if _FILE_PROTOCOL_RE.match(url):
        code = "FILE_URL"
    elif _BLOB_PROTOCOL_RE.match(url):
        code = "BLOB_URL"
    elif (
        url.startswith("/")
        and not url.startswith(ASSET_PREFIX)
        and not url.startswith(_join_url(base_url, "assets/"))
        and not url.startswith(FRAMEWORK_ASSET_PREFIX)
    ):
        code = "NON_STANDARD_ABSOLUTE_PATH"
    else:
        return None
    return AssetIssue(code=code, url=url, message=_ISSUE_MESSAGES[code])


def _child_path(key_path: str, key: Any) -> str:
    return f"{key_path}.{key}" if key_path else str(key)


def _is_container(value: Any) -> bool:
    return isinstance(value, (Mapping, list, tuple))


def _children(container: Any, key_path: str) -> Iterator[Tuple[Any, Any, str]]:
    """Yield (key, item, item_path) in document order."""
    if isinstance(container, Mapping):
        for key, item in container.items():
            yield key, item, _child_path(key_path, key)
    else:
        for index, item in enumerate(container):
            yield index, item, f"{key_path}[{index}]"


def _empty_like(container: Any) -> Any:
    return {} if isinstance(container, Mapping) else []


def _attach(target: Any, key: Any, value: Any) -> None:
    if isinstance(target, dict):
        target[key] = value
    else:
        target.append(value)


# Both walks use an explicit stack of child iterators; nesting depth is bounded
# by memory, not by the interpreter recursion limit.
def _walk_and_transform(value: Any, base_url: str, policy: AssetRenderPolicy) -> Any:
    if not _is_container(value):
        if isinstance(value, str) and is_asset_url(value, ""):
            return rewrite_asset_url(value, base_url, policy)
        return value

    root = _empty_like(value)
    stack: List[Tuple[Iterator[Tuple[Any, Any, str]], Any]] = [(_children(value, ""), root)]
    while stack:
        children, target = stack[-1]
        entry = next(children, None)
        if entry is None:
            stack.pop()
            continue
        key, item, item_path = entry
        if _is_container(item):
            rebuilt = _empty_like(item)
            _attach(target, key, rebuilt)
            stack.append((_children(item, item_path), rebuilt))
        elif isinstance(item, str) and is_asset_url(item, item_path):
            _attach(target, key, rewrite_asset_url(item, base_url, policy))
        else:
            _attach(target, key, item)
    return root


def _iter_strings(value: Any) -> Iterator[Tuple[str, str]]:
    """Yield (string, key_path) for every string in *value*, depth-first in document order."""
    if not _is_container(value):
        if isinstance(value, str):
            yield value, ""
        return

    stack = [_children(value, "")]
    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue
        _, item, item_path = entry
        if _is_container(item):
            stack.append(_children(item, item_path))
        elif isinstance(item, str):
            yield item, item_path


def rewrite_asset_urls(document: Any, base_url: str, policy: AssetRenderPolicy = "degrade") -> Any:
    """Return a copy of *document* with asset references made render-safe.

    ``/assets/...`` paths are re-rooted under *base_url*. ``file:`` and
    ``blob:`` links become an inline placeholder under ``degrade`` and are
    kept as-is under ``strict``. The input is never mutated.

    Only values are rewritten: object keys are copied verbatim, so a key such
    as ``"file:///x"`` survives even under ``degrade``.
    """
    if policy not in RENDER_POLICIES:
        raise ValueError(f"Unknown asset render policy: {policy!r}")
    return _walk_and_transform(document, base_url, policy)


def collect_asset_issues(document: Any, base_url: str) -> List[AssetIssue]:
    """List asset problems in *document*, deduplicated by (code, url) in first-seen order."""
    issues: List[AssetIssue] = []
    seen: Set[Tuple[str, str]] = set()
    for value, key_path in _iter_strings(document):
        if not is_asset_url(value, key_path):
            continue
        issue = inspect_asset_url(value, base_url)
        if issue is None or (issue.code, issue.url) in seen:
            continue
        seen.add((issue.code, issue.url))
        issues.append(issue)
    return issues
