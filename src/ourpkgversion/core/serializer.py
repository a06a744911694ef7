from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from ourpkgversion.core.planner import RewritePlan
from ourpkgversion.core.tokens import Token


def collect_replacements(plans: Iterable[RewritePlan]) -> dict[int, str]:
    """Merge per-site replacements; two plans never touch the same token."""
    merged: dict[int, str] = {}
    for plan in plans:
        for index, text in plan.replacements().items():
            if index in merged:
                raise ValueError(f"token {index} rewritten by more than one sentinel")
            merged[index] = text
    return merged


def serialize(tokens: Sequence[Token], replacements: Mapping[int, str] | None = None) -> str:
    """Re-emit ``tokens`` as text, substituting replaced token texts by index."""
    replacements = replacements or {}
    return "".join(replacements.get(i, tok.text) for i, tok in enumerate(tokens))
