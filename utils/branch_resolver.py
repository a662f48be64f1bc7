# utils/branch_resolver.py

import re
from typing import Iterable, List, Optional

# Anything outside ASCII letters/digits and the Thai block is formatting noise
_NON_KEY_CHARS = re.compile(r"[^a-z0-9\u0E00-\u0E7F]")

EXCLUDED_BRANCH_MARKERS = ("Total", "POP")
MIN_BRANCH_NAME_LENGTH = 3


def normalize_branch_key(name: str) -> str:
    """
    Turn a branch label into the key used for equality checks.
    Example: "Bangkok Branch " -> "bangkokbranch"
    """
    return _NON_KEY_CHARS.sub("", (name or "").lower())


def resolve_canonical_branch(raw_branch: str, canonical_branches: Iterable[str]) -> Optional[str]:
    """
    Return the first canonical label whose key matches `raw_branch`,
    or None if the input is empty or nothing matches.
    """
    if not raw_branch:
        return None

    raw_key = normalize_branch_key(raw_branch)

    for canonical in canonical_branches:
        if normalize_branch_key(canonical) == raw_key:
            return canonical

    return None


def build_canonical_branches(branch_names: Iterable[str]) -> List[str]:
    """
    Sorted list of selectable branches from the labels collected during ingestion.
    Labels that normalize to an already-kept key are dropped.
    """
    result: List[str] = []
    seen_keys = set()

    for name in sorted(set(branch_names)):
        if len(name) < MIN_BRANCH_NAME_LENGTH:
            continue
        if any(marker in name for marker in EXCLUDED_BRANCH_MARKERS):
            continue

        key = normalize_branch_key(name)
        if not key or key in seen_keys:
            continue

        seen_keys.add(key)
        result.append(name)

    return result
