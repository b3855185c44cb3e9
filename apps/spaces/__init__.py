"""Spaces app package.

Read-only catalog of locations and the bookable spaces inside them. A
space is managed by the manager of its location; that relation drives
every manager permission in the availability, booking and payment apps.
"""
