"""FastAPI dependency injection."""

from __future__ import annotations

from funhouse.engine.pipeline import ProfilePublisher

# Latest profile from /api/profile; /api/render falls back to it.
_publisher = ProfilePublisher()


def get_publisher() -> ProfilePublisher:
    return _publisher
