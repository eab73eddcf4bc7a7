"""Reminder daemon: polls the store and fires desktop notifications."""
