"""Genre tokenization.

Raw genre strings in the datasets may pack several genres into one entry,
joined by an ASCII comma or a full-width comma (``"科幻，冒险"``). Every
place that tests genre membership goes through this module so the
splitting rules stay the same everywhere.
"""

import logging
import re
from typing import Any, Iterator, List, Optional, Set

# Configure module logger
logger = logging.getLogger(__name__)

# ASCII comma and full-width comma, nothing else
GENRE_DELIMITERS = (",", "，")
_DELIMITER_PATTERN = re.compile("|".join(re.escape(d) for d in GENRE_DELIMITERS))


def split_genre(raw: str) -> List[str]:
    """Split one raw genre string into trimmed, non-empty tokens.

    Args:
        raw: Raw genre string, e.g. ``"Sci-Fi, Adventure"``.

    Returns:
        Tokens in the order they appear in ``raw``.

    Example:
        >>> split_genre("科幻,冒险")
        ['科幻', '冒险']
    """
    pieces = (piece.strip() for piece in _DELIMITER_PATTERN.split(raw))
    return [piece for piece in pieces if piece]


def iter_tokens(genres: Any, owner: Optional[str] = None) -> Iterator[str]:
    """Yield every token of a raw genre list, duplicates included.

    A ``genres`` value that is not a list is a data-quality problem: it is
    logged and treated as having no tokens.

    Args:
        genres: The raw ``genre`` field of a book or borrow record.
        owner: Short description of the entity, used in the warning.
    """
    if not isinstance(genres, (list, tuple)):
        logger.warning(
            "Invalid genre field, treating as empty",
            extra={"owner": owner, "genre": repr(genres)},
        )
        return

    for raw in genres:
        if not isinstance(raw, str):
            logger.warning(
                "Skipping non-string genre entry",
                extra={"owner": owner, "genre": repr(raw)},
            )
            continue
        yield from split_genre(raw)


def tokenize(genres: Any, owner: Optional[str] = None) -> Set[str]:
    """Normalize a raw genre list into its set of atomic genre tokens.

    Example:
        >>> sorted(tokenize(["A，B", "C"]))
        ['A', 'B', 'C']
    """
    return set(iter_tokens(genres, owner=owner))
