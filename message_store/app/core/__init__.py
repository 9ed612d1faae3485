"""Shared core helpers for the message store service."""

SERVICE_NAME = "message_store"
