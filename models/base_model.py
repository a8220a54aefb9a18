#!/usr/bin/env python3
"""
Shared SQLAlchemy base and mixin for the Gastronomy API.

- UUID primary key (String(36)) with defaults
- created_at / updated_at timestamps

Timestamps get a Python-side default (microsecond precision, naive UTC) so
rows inserted within the same second still order deterministically; the
server default stays as a fallback for raw inserts.
"""

from __future__ import annotations

import uuid

from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

from utils.security import utcnow

# Declarative base for all models
Base = declarative_base()


def _uuid_str() -> str:
    """Return a canonical UUIDv4 string (36 chars, with hyphens)."""
    return str(uuid.uuid4())


class BaseModel:
    """Base mixin for all persistent models: id, created_at, updated_at."""

    id = Column(String(36), primary_key=True, default=_uuid_str, nullable=False)
    created_at = Column(DateTime, default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False)

    def __init__(self, *args, **kwargs):
        """
        Allow attribute initialization via kwargs without requiring a session here.
        Passing created_at explicitly (e.g. from an injected clock) is honoured.
        """
        for key, value in kwargs.items():
            if key != "__class__":
                setattr(self, key, value)
        if getattr(self, "id", None) is None:
            self.id = _uuid_str()

