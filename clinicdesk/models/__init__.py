"""SQLAlchemy models."""

from clinicdesk.models.document import Document

__all__ = ["Document"]
