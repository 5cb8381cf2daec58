"""
Builds value pairs for one attribute match from preloaded record pairs.
"""

from models.mapping import OwnedRecordPair, ValuePair
from utils.item_paths import get_real_values


def build_value_pairs(
    loaded: list[OwnedRecordPair],
    source_path: str,
    target_path: str
) -> list[ValuePair]:
    """
    Read source values from each account and target values from its owner.

    Missing items give empty value tuples. One ValuePair per loaded pair.
    """
    if not loaded:
        return []
    return [
        ValuePair(
            source_values=get_real_values(pair.account, source_path),
            target_values=get_real_values(pair.owner, target_path),
        )
        for pair in loaded
    ]
