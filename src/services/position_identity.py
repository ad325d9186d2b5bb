import re
from collections import Counter
from typing import Iterable, List, NamedTuple

from core import constants
from schemas.snapshot import Position

_POSITION_TYPE_KEYWORDS = [
    # class, substrings, whole words (too short to match inside other words)
    ("vault", ("vault", "strategy"), ()),
    ("lending", ("lend", "borrow", "supply", "deposit", "collateral"), ()),
    ("liquidity", ("liquidity", "pool"), ("lp", "amm")),
    ("staking", ("stak", "lock", "validator"), ()),
    ("farming", ("farm", "yield", "reward"), ()),
]


class ResolvedIdentity(NamedTuple):
    key: str
    source: str


def _normalize(value: str | None) -> str:
    value = (value or "unknown").strip().lower()
    value = re.sub(r"\s+", "_", value)
    return re.sub(r"[^a-z0-9_]", "", value) or "unknown"


def classify_position_type(position_type: str | None) -> str:
    """Collapse the many protocol-specific position labels into a coarse class."""
    label = (position_type or "").lower()
    words = set(re.findall(r"[a-z0-9]+", label))
    for position_class, substrings, whole_words in _POSITION_TYPE_KEYWORDS:
        if any(keyword in label for keyword in substrings) or words.intersection(whole_words):
            return position_class
    return "other"


def primary_token_symbol(position: Position) -> str:
    if not position.supply_tokens:
        return "unknown"
    return _normalize(position.supply_tokens[0].symbol)


def position_identity(position: Position) -> str:
    """
    Heuristic key for a position: protocol, chain, coarse type and primary
    supply token. Two positions held at the same time that agree on all four
    parts get the same key.
    """
    return "_".join(
        [
            _normalize(position.protocol_name),
            _normalize(position.chain),
            classify_position_type(position.position_type),
            primary_token_symbol(position),
        ]
    )


def resolve_identity(position: Position) -> ResolvedIdentity:
    if position.position_id:
        key = "_".join(
            [
                _normalize(position.protocol_name),
                _normalize(position.chain),
                _normalize(position.position_id),
            ]
        )
        return ResolvedIdentity(key, constants.IDENTITY_EXTERNAL)
    return ResolvedIdentity(position_identity(position), constants.IDENTITY_HEURISTIC)


def find_duplicate_identities(positions: Iterable[Position]) -> List[str]:
    counts = Counter(resolve_identity(position).key for position in positions)
    return [key for key, count in counts.items() if count > 1]
