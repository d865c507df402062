import random
from typing import List, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")


def is_permutation(order: Sequence[int], length: int) -> bool:
    """Check that `order` contains every index in [0, length) exactly once."""
    return len(order) == length and sorted(order) == list(range(length))


def shuffle_cards(
    cards: Sequence[T],
    rng: Optional[random.Random] = None
) -> Tuple[List[T], List[int]]:
    """
    Create a shuffled presentation order for a set of cards.

    The indices are shuffled with Fisher-Yates (random.shuffle), so every
    ordering is equally likely.

    Args:
        cards: Cards in their original order
        rng: Optional random source (seed it for repeatable orders)

    Returns:
        (presented_cards, shuffle_order) where
        presented_cards[p] == cards[shuffle_order[p]]
    """
    indices = list(range(len(cards)))
    if len(indices) > 1:
        (rng or random).shuffle(indices)

    presented = [cards[i] for i in indices]
    return presented, indices


def restore_card_order(presented: Sequence[T], shuffle_order: Sequence[int]) -> List[T]:
    """
    Restore original card order using shuffle indices.

    Raises:
        ValueError: if shuffle_order is not a permutation matching presented
    """
    if not is_permutation(shuffle_order, len(presented)):
        raise ValueError("shuffle_order must be a permutation of the presented positions")

    original: List[Optional[T]] = [None] * len(presented)
    for position, card in enumerate(presented):
        original[shuffle_order[position]] = card
    return original
