from __future__ import annotations

from typing import List

# Suggested item names for the add-item form. Any name is accepted.
SUPPLY_CATALOG = (
    "M tape",
    "L tape",
    "LL tape",
    "M pants",
    "L pants",
    "Urine pad (small)",
    "Urine pad (large)",
    "Wipes",
    "Waterproof sheet",
    "Other",
)


def _clean_name(name) -> str:
    """Trimmed name; non-strings become ''."""
    if not isinstance(name, str):
        return ""
    return name.strip()


def suggest_names(prefix: str = "", limit: int | None = None) -> List[str]:
    """Catalog entries starting with ``prefix`` (case-insensitive), catalog order."""
    p = _clean_name(prefix).lower()
    out = [name for name in SUPPLY_CATALOG if name.lower().startswith(p)]
    if limit is not None:
        out = out[: max(0, limit)]
    return out
