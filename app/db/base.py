# app/db/base.py
from app.db.base_class import Base
import app.models  # noqa: F401  registers every table on Base.metadata

__all__ = ["Base"]
