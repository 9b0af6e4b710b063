"""Declarative rules for what counts as navigation chrome.

The table errs towards keeping content: generic structural elements
(``header``, ``footer``, ``aside``, ``form``, ``button``, ``svg``) and generic
tokens (``menu``, ``sidebar``, ``toc``, ``search``) are never grounds for
removal, and ``aria-label`` is not consulted.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from bs4 import Tag

_TOKEN_SPLIT = re.compile(r"[-_\s]+")


def _attr_values(tag: Tag, name: str) -> list[str]:
    """Return an attribute as a list of lower-cased strings."""
    value: Any = tag.get(name)
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split() if name == "class" else [value]
    return [str(v).strip().lower() for v in value if str(v).strip()]


def _contains_run(parts: list[str], term: list[str]) -> bool:
    """True if ``term`` occurs as a contiguous run inside ``parts``."""
    size = len(term)
    return any(parts[i : i + size] == term for i in range(len(parts) - size + 1))


@dataclass(frozen=True)
class CleaningPolicy:
    """
    Static table of element and attribute predicates.

    Attributes:
        version: Revision of the table
        removed_tags: Tags that are never content
        removed_roles: ARIA roles marking page chrome (exact match)
        navigation_vocabulary: class/id values marking navigation; a value
            matches when it equals a term or contains it as whole
            ``-``/``_``-separated parts (``main-nav`` matches ``nav``,
            ``canvas`` does not)
        protected_tags: Tags never removed on their own account
        root_tags: Document containers exempt from every rule, whatever
            their class, id or role
        decorative_image_roles: Image roles that mark an image as decorative
        icon_marker: Substring of ``src`` marking an alt-less image as an icon
    """

    version: int
    removed_tags: frozenset[str]
    removed_roles: frozenset[str]
    navigation_vocabulary: frozenset[str]
    protected_tags: frozenset[str]
    root_tags: frozenset[str]
    decorative_image_roles: frozenset[str]
    icon_marker: str = "icon"

    def _is_navigation_value(self, value: str) -> bool:
        if value in self.navigation_vocabulary:
            return True
        parts = [p for p in _TOKEN_SPLIT.split(value) if p]
        for term in self.navigation_vocabulary:
            if _contains_run(parts, [p for p in _TOKEN_SPLIT.split(term) if p]):
                return True
        return False

    def is_decorative_image(self, tag: Tag) -> bool:
        """
        Return True for images that carry no content.

        Only two signals count: an explicit presentation/none role, or an
        empty alt together with an icon-like source.
        """
        if tag.name != "img":
            return False
        role = (tag.get("role") or "").strip().lower()
        if role in self.decorative_image_roles:
            return True
        alt = tag.get("alt") or ""
        src = tag.get("src") or ""
        return not alt and self.icon_marker in src

    def removal_reason(self, tag: Tag) -> str | None:
        """
        Return why a tag should be removed, or None to keep it.

        Args:
            tag: Element to check

        Returns:
            Short reason string (for logging) or None
        """
        name = (tag.name or "").lower()

        if name in self.protected_tags or name in self.root_tags:
            return None

        if name in self.removed_tags:
            return f"tag <{name}>"

        roles = _attr_values(tag, "role")
        if roles and roles[0] in self.removed_roles:
            return f"role={roles[0]}"

        for value in _attr_values(tag, "class"):
            if self._is_navigation_value(value):
                return f"class={value}"

        for value in _attr_values(tag, "id"):
            if self._is_navigation_value(value):
                return f"id={value}"

        if self.is_decorative_image(tag):
            return "decorative image"

        return None

    def matches(self, tag: Tag) -> bool:
        """Return True if the tag is navigation chrome."""
        return self.removal_reason(tag) is not None


DEFAULT_CLEANING_POLICY = CleaningPolicy(
    version=1,
    removed_tags=frozenset({"script", "style", "noscript", "iframe", "nav"}),
    removed_roles=frozenset({"banner", "navigation", "contentinfo", "complementary", "search"}),
    navigation_vocabulary=frozenset(
        {
            "navigation",
            "nav",
            "navbar",
            "nav-bar",
            "site-header",
            "site-footer",
            "page-header",
            "page-footer",
            "breadcrumb",
            "breadcrumbs",
        }
    ),
    protected_tags=frozenset({"header", "footer", "aside", "form", "button", "svg"}),
    root_tags=frozenset({"html", "body", "main"}),
    decorative_image_roles=frozenset({"presentation", "none"}),
)
