"""Translation trees and the rows they expand to.

Translations are authored as nested objects and stored as one row per
(dot-joined key, language). The first key segment says which frontend
loads the text before sign-in.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable
from uuid import uuid4

SIGN_IN_PREFIX = "frontend-sign-in"
TENANT_PREFIX = "frontend-tenant"
KEY_SEPARATOR = "."


def flatten_tree(tree: dict[str, Any], path: str = "") -> dict[str, Any]:
    """Flatten nested objects (and lists) into dot-joined keys.

    Empty objects and lists contribute no keys; other falsy values such as
    ``""`` are kept as leaves.
    """
    flat: dict[str, Any] = {}
    items = enumerate(tree) if isinstance(tree, list) else tree.items()
    for key, value in items:
        full_key = f"{path}{KEY_SEPARATOR}{key}" if path else str(key)
        if isinstance(value, (dict, list)):
            flat.update(flatten_tree(value, full_key))
        else:
            flat[full_key] = value
    return flat


def get_translation_keys(tree: dict[str, Any]) -> list[str]:
    """Return the flattened keys of a translation tree."""
    return list(flatten_tree(tree))


def prefix_flags(translation_key: str) -> tuple[bool, bool]:
    """Return ``(frontendSignIn, frontendTenant)`` for a key."""
    prefix = translation_key.split(KEY_SEPARATOR, 1)[0]
    return prefix == SIGN_IN_PREFIX, prefix == TENANT_PREFIX


def build_translation_rows(
    tree: dict[str, Any],
    language_ids: Iterable[str],
    id_factory: Callable[[], str] = lambda: str(uuid4()),
) -> list[dict[str, Any]]:
    """Expand a tree into Translation rows, one per key and language."""
    flat = flatten_tree(tree)
    languages = list(language_ids)
    rows = []
    for translation_key, data in flat.items():
        sign_in, tenant = prefix_flags(translation_key)
        for language_id in languages:
            rows.append(
                {
                    "id": id_factory(),
                    "data": data,
                    "languageId": language_id,
                    "translationKey": translation_key,
                    "frontendSignIn": sign_in,
                    "frontendTenant": tenant,
                }
            )
    return rows
