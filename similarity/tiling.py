"""
Greedy string tiling over token sequences.

Repeatedly finds the longest run of equal, not yet consumed tokens shared
by both sequences, marks it as a tile and scans again, until no run of at
least minimum_token_match tokens remains.
"""
import logging
from dataclasses import dataclass, field

from .config import SimilarityConfig
from .tokens import Token, TokenSequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tile:
    """A maximal matched run: a[start_a:start_a+length] equals b[start_b:start_b+length]."""
    start_a: int
    start_b: int
    length: int


@dataclass(frozen=True)
class ComparisonResult:
    """Outcome of one comparison. Tiles are sorted by start_a."""
    similarity: float
    tiles: tuple[Tile, ...] = field(default_factory=tuple)
    total_tokens_a: int = 0
    total_tokens_b: int = 0
    matched_token_count: int = 0


class GreedyStringTiling:
    """Tiling matcher bound to one configuration."""

    def __init__(self, config: SimilarityConfig):
        self.config = config
        self.minimum_token_match = config.minimum_token_match

    def tokens_equal(self, a: Token, b: Token) -> bool:
        """Kind only for structural tokens, kind and text for lexical tokens."""
        if self.config.structural_only:
            return a.kind == b.kind
        return a.kind == b.kind and a.text == b.text

    @staticmethod
    def sequence_key(tokens: TokenSequence) -> tuple[tuple[str, str], ...]:
        """Total order over sequences used to pick the scan direction."""
        return tuple((token.kind.value, token.text) for token in tokens)

    def compare(self, tokens_a: TokenSequence, tokens_b: TokenSequence) -> ComparisonResult:
        """
        Tile two token sequences and score the overlap.

        Similarity is 2 * matched / (len(a) + len(b)). Two empty sequences
        are identical (1.0); one empty sequence matches nothing (0.0).
        A sequence shorter than minimum_token_match cannot hold a tile,
        so the scan is skipped.

        The sequence with the smaller sequence_key is always the outer one
        of the scan, so compare(a, b) and compare(b, a) pick the same tiles
        and score the same.

        Args:
            tokens_a: First token sequence
            tokens_b: Second token sequence

        Returns:
            ComparisonResult with tiles sorted by start_a
        """
        len_a = len(tokens_a)
        len_b = len(tokens_b)

        if len_a == 0 and len_b == 0:
            return ComparisonResult(similarity=1.0)
        if len_a == 0 or len_b == 0:
            return ComparisonResult(similarity=0.0, total_tokens_a=len_a, total_tokens_b=len_b)
        if len_a < self.minimum_token_match or len_b < self.minimum_token_match:
            return ComparisonResult(similarity=0.0, total_tokens_a=len_a, total_tokens_b=len_b)

        if self.sequence_key(tokens_b) < self.sequence_key(tokens_a):
            tiles = [
                Tile(start_a=tile.start_b, start_b=tile.start_a, length=tile.length)
                for tile in self._tile(tokens_b, tokens_a)
            ]
        else:
            tiles = self._tile(tokens_a, tokens_b)

        matched = sum(tile.length for tile in tiles)
        similarity = 2.0 * matched / (len_a + len_b)
        return ComparisonResult(
            similarity=similarity,
            tiles=tuple(sorted(tiles, key=lambda tile: tile.start_a)),
            total_tokens_a=len_a,
            total_tokens_b=len_b,
            matched_token_count=matched,
        )

    def _tile(self, tokens_a: TokenSequence, tokens_b: TokenSequence) -> list[Tile]:
        """Greedy scan: A outer, B inner, both ascending; the first maximal run wins."""
        len_a = len(tokens_a)
        len_b = len(tokens_b)
        marked_a: set[int] = set()
        marked_b: set[int] = set()
        tiles: list[Tile] = []
        iteration = 0

        while True:
            iteration += 1
            best_length = 0
            best_a = -1
            best_b = -1

            for i in range(len_a):
                if i in marked_a:
                    continue
                # No run starting here can beat the current best
                if len_a - i <= best_length:
                    break
                for j in range(len_b):
                    if j in marked_b:
                        continue
                    length = 0
                    while (
                        i + length < len_a
                        and j + length < len_b
                        and i + length not in marked_a
                        and j + length not in marked_b
                        and self.tokens_equal(tokens_a[i + length], tokens_b[j + length])
                    ):
                        length += 1
                    if length > best_length:
                        best_length = length
                        best_a = i
                        best_b = j

            logger.debug(
                f"Tiling iteration {iteration}: best run {best_length} at ({best_a}, {best_b})"
            )
            if best_length < self.minimum_token_match:
                break

            tiles.append(Tile(start_a=best_a, start_b=best_b, length=best_length))
            marked_a.update(range(best_a, best_a + best_length))
            marked_b.update(range(best_b, best_b + best_length))

        return tiles
