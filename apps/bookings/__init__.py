"""Bookings app package.

The booking ledger: reservations of a space for a time window on a
date, their status machine, and the overlap exclusion that keeps two
active bookings of one space from sharing any instant. Creation runs
inside a transaction that locks the space row.
"""
