"""Shared table metadata."""

from sqlalchemy import MetaData

# Rides reference users, so every table registers on the same metadata
metadata = MetaData()
