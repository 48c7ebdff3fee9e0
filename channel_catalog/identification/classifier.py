"""
Guitar term classification for channels.
"""
from typing import Iterable

from ..db.database import Channel, GuitarTerm


def is_guitar_channel(terms: Iterable[GuitarTerm], channel: Channel) -> bool:
    """
    Check whether a channel's title or description contains a guitar term.

    Matching is case-insensitive substring matching, so "amp" also
    matches "camper".

    Args:
        terms: Classification dictionary.
        channel: Channel to classify.

    Returns:
        True on the first matching term, False otherwise.
    """
    title = channel.title or ""
    description = channel.description or ""
    if not title and not description:
        return False

    body = f"{title.casefold()} {description.casefold()}"

    for term in terms:
        token = (term.term or "").casefold()
        if token and token in body:
            return True

    return False
