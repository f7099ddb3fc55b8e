"""
Balanced block extraction.

Finds the body of a ``{ ... }`` block given the index of its opening brace.
Works on raw text and on token lists alike, so the parser can skip a whole
unrecognised block without re-reading its nested content as siblings.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

S = TypeVar("S", bound=Sequence[Any])


def _is_open_brace(item: Any) -> bool:
    return item == "{"


def _is_close_brace(item: Any) -> bool:
    return item == "}"


@dataclass(frozen=True)
class ExtractedBlock(Generic[S]):
    """
    Result of a block extraction.

    Attributes:
        body: Items strictly between the opening and matching closing brace
        end: Index of the matching closing brace, or ``len(source)`` when
            the block is never closed
        closed: False when the source ran out before the matching brace
    """

    body: S
    end: int
    closed: bool = True


def extract_block(
    source: S,
    open_index: int,
    is_open: Callable[[Any], bool] = _is_open_brace,
    is_close: Callable[[Any], bool] = _is_close_brace,
) -> ExtractedBlock[S]:
    """
    Return the body of the block opened at ``open_index``.

    Scans forward counting nesting depth; the body is everything strictly
    between the opening brace and the brace that returns the depth to zero.
    If the source runs out first, the body is empty and ``end`` is the
    source length, so callers must not assume ``end < len(source)``.

    Args:
        source: Text or token list to scan
        open_index: Index of the opening brace
        is_open: Predicate recognising an opening brace
        is_close: Predicate recognising a closing brace

    Returns:
        ExtractedBlock with the body slice and closing index

    Examples:
        >>> extract_block("a { b { c } } d", 2).body
        ' b { c } '
        >>> extract_block("a { b", 2).end
        5
    """
    depth = 0
    for index in range(open_index, len(source)):
        item = source[index]
        if is_open(item):
            depth += 1
        elif is_close(item):
            depth -= 1
            if depth == 0:
                return ExtractedBlock(body=source[open_index + 1 : index], end=index)

    return ExtractedBlock(body=source[0:0], end=len(source), closed=False)


__all__ = ["ExtractedBlock", "extract_block"]
