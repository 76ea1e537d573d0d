"""
Shared column helpers for the ORM models.
"""

import uuid

from sqlalchemy import JSON, Text, Uuid
from sqlalchemy.dialects.postgresql import ARRAY

from tabletads.common.database import Base

# Supabase tables key everything by uuid; ids travel as strings
UuidStr = Uuid(as_uuid=False)

# text[] on Postgres, JSON elsewhere (SQLite in tests)
TextArray = JSON().with_variant(ARRAY(Text), "postgresql")


def new_uuid() -> str:
    return str(uuid.uuid4())


__all__ = ["Base", "TextArray", "UuidStr", "new_uuid"]
