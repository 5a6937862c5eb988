"""Bazaarfly notification service package.

Holds the notification record store, the email template catalog and the
dispatcher that fans notifications out to their delivery channels.
"""
