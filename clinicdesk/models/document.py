"""Document model: one row per named collection."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from clinicdesk.db.base import Base, TimestampMixin


class Document(Base, TimestampMixin):
    """A JSON document stored under a fixed collection key.

    The body is opaque text; no schema is enforced at this layer.
    """

    __tablename__ = "documents"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    body: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"<Document {self.key} ({len(self.body)} bytes)>"
