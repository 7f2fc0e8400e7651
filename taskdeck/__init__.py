"""Taskdeck - workspace cache and identity sync for project management."""
