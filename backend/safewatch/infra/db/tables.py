from __future__ import annotations

from sqlalchemy import Column, DateTime, Float, Integer, MetaData, Table, Text

metadata = MetaData()

reports_table = Table(
    "reports",
    metadata,
    Column("seq", Integer, primary_key=True, autoincrement=True),
    Column("id", Text, nullable=False, unique=True),
    Column("category", Text, nullable=False),
    Column("description", Text, nullable=False),
    Column("contact_info", Text),
    Column("lat", Float),
    Column("lon", Float),
    Column("media_ref", Text),
    Column("submitted_at", DateTime(timezone=True), nullable=False),
    Column("status", Text, nullable=False),
    Column("updated_at", DateTime(timezone=True)),
)
