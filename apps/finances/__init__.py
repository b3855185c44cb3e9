"""Finances app package.

The settlement coordinator: payments for bookings, their status
machine, and the cascade that keeps a booking's status consistent with
its payment outcome inside one transaction.
"""
