"""Availability app package.

Managers declare time blocks in which a space is open (or closed) for
booking. The booking ledger consults these blocks before accepting a
reservation.
"""
