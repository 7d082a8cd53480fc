"""Shared FastAPI dependencies."""

from __future__ import annotations

from fastapi import Request

from ..services.session import TripMapSession


def get_session(request: Request) -> TripMapSession:
    return request.app.state.session
