"""SQLAlchemy table mapping for calculations."""
from sqlalchemy import String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class CalculationRecord(Base):
    """One row per calculation; the id is the UUID text assigned by the service."""

    __tablename__ = "calculations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    expression: Mapped[str] = mapped_column(Text, nullable=False)
    result: Mapped[str] = mapped_column(Text, nullable=False)

    def __repr__(self) -> str:
        return f"CalculationRecord(id={self.id!r}, expression={self.expression!r}, result={self.result!r})"
