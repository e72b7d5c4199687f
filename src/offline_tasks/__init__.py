"""Offline-first personal task list with a background sync engine."""
