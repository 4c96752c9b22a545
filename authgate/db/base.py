"""
Base model untuk SQLAlchemy.
Semua model harus inherit dari BaseModel untuk mendapatkan common fields dan behavior.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, inspect
from sqlalchemy.orm import as_declarative, declared_attr


@as_declarative()
class Base:
    """
    Base class untuk semua SQLAlchemy models.
    Setiap model mendefinisikan __tablename__ sendiri.
    """

    def update(self, **kwargs) -> None:
        """
        Update model instance dengan keyword arguments.

        Args:
            **kwargs: Fields to update
        """
        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)

    def __repr__(self) -> str:
        class_name = self.__class__.__name__
        primary_keys = [
            f"{column.key}={getattr(self, column.key)}"
            for column in inspect(self.__class__).primary_key
        ]
        return f"<{class_name}({', '.join(primary_keys)})>"


class BaseModel(Base):
    """
    Abstract base model dengan common timestamp fields.
    """
    __abstract__ = True

    created_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True
    )

    updated_at = Column(
        DateTime(timezone=True),
        default=None,
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=True
    )

    @declared_attr
    def __mapper_args__(cls):
        return {
            "eager_defaults": True
        }
