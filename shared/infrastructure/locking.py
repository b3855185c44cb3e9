"""Row locking helpers shared by repositories."""

from __future__ import annotations

from django.db import transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore


def lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic().

    SQLite ignores row locks but serialises writers on the whole
    database, which gives the same check-then-insert guarantee.
    """

    if not transaction.get_connection(queryset.db).in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update(of=("self",))
    except NotSupportedError:
        return queryset
