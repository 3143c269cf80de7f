"""Aggregate documents by tag."""

from datetime import date


def listing_order(documents):
    """
    Order documents for listings.

    Dated documents come first, newest first; undated documents follow in
    discovery order. Ties keep discovery order.
    """
    indexed = list(enumerate(documents))
    indexed.sort(key=lambda item: (
        item[1].publish_date is None,
        -(item[1].publish_date or date.min).toordinal(),
        item[0],
    ))
    return tuple(doc for _, doc in indexed)


def build_tag_index(documents):
    """
    Build the tag index for a document set.

    Returns a dict mapping each tag to the tuple of documents carrying it,
    in listing order. Tags are ordered alphabetically, ignoring case, so
    the same input always iterates the same way.
    """
    buckets = {}
    for document in documents:
        for tag in document.tags:
            buckets.setdefault(tag, []).append(document)

    return {
        tag: listing_order(buckets[tag])
        for tag in sorted(buckets, key=lambda t: (t.lower(), t))
    }
