"""Falcon ASGI HTTP API."""
