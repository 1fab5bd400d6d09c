# appointly/models/base.py
"""Shared declarative base for all ORM models"""
from sqlalchemy.orm import declarative_base

Base = declarative_base()
