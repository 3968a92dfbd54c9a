"""Declarative base for all RequestFlow models."""

from sqlalchemy.orm import declarative_base

Base = declarative_base()
