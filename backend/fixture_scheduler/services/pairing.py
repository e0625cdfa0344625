"""
Round-robin pairing (circle method).

Fix the first entry of the draw order and rotate the others one position per
round. For an even order of N entries this yields N-1 rounds in which every
pair of entries meets exactly once. Odd team counts are padded with BYE by
the caller; pairs that include BYE are dropped, giving that team a rest round.
"""

from typing import Iterator, List, Optional, Sequence, Tuple

# Rest-round placeholder. Never stored on a match.
BYE = None

Pairing = Tuple[int, int]


def pad_with_bye(team_ids: Sequence[int]) -> List[Optional[int]]:
    """Return a copy of team_ids with BYE appended when the count is odd."""
    order: List[Optional[int]] = list(team_ids)
    if len(order) % 2 == 1:
        order.append(BYE)
    return order


def logical_team_count(order: Sequence[Optional[int]]) -> int:
    """Number of real teams in a (possibly padded) order."""
    return sum(1 for team_id in order if team_id is not BYE)


def round_count(team_count: int) -> int:
    """
    Rounds in one leg for team_count real teams.
    Even n: n-1 rounds. Odd n: n rounds (with BYE). Fewer than two teams: 0.
    """
    if team_count < 2:
        return 0
    if team_count % 2 == 0:
        return team_count - 1
    return team_count


def pair_key(team_a: int, team_b: int) -> Pairing:
    """Unordered key for a pairing: (lower id, higher id)."""
    return (team_a, team_b) if team_a < team_b else (team_b, team_a)


def rotate(order: Sequence[Optional[int]]) -> List[Optional[int]]:
    """Keep position 0 fixed; the last entry moves to position 1."""
    if len(order) < 3:
        return list(order)
    return [order[0], order[-1], *order[1:-1]]


def circle_rounds(order: Sequence[Optional[int]]) -> Iterator[List[Pairing]]:
    """
    Yield the pairings of each round of one round-robin cycle.

    Round r pairs order[i] with order[N-1-i] for i in [0, N/2). Each pairing
    keeps the circle's own (first, second) order; home/away is decided by
    the caller. Pairings with BYE are omitted.

    Args:
        order: Even-length draw order, BYE already appended for odd counts.

    Raises:
        ValueError: If the order has an odd length or repeats a team.
    """
    n = len(order)
    if n < 2:
        return
    if n % 2 != 0:
        raise ValueError(f"circle_rounds: order length must be even (pad with BYE), got {n}")
    real = [team_id for team_id in order if team_id is not BYE]
    if len(set(real)) != len(real):
        raise ValueError(f"circle_rounds: duplicate team ids in order {list(order)}")
    if len(real) < 2:
        return

    half = n // 2
    current = list(order)
    for _ in range(n - 1):
        pairings: List[Pairing] = []
        for i in range(half):
            first, second = current[i], current[n - 1 - i]
            if first is BYE or second is BYE:
                continue
            pairings.append((first, second))
        yield pairings
        current = rotate(current)
