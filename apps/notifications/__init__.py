"""Notifications app package.

Best-effort delivery of email, push and SMS messages triggered by
booking and payment transitions. Every attempt is persisted as a
Notification row before delivery; failures are recorded there and
never reach the operation that triggered them.
"""
