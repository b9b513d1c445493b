"""
Base model with common fields and methods
"""
from app import db
from app.utils.helpers import generate_unique_id, utcnow
from datetime import datetime, date
from decimal import Decimal
from sqlalchemy.orm import declared_attr


class BaseModel(db.Model):
    """Abstract base model with common fields"""
    __abstract__ = True

    # Query layer hooks: text columns matched by ?search=, the enum column
    # matched by ?status= and the column bounded by a date range
    __searchable__ = ()
    __status_field__ = None
    __date_field__ = 'created_at'

    id = db.Column(db.String(36), primary_key=True, default=generate_unique_id)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def to_dict(self, exclude=None):
        """
        Convert model to dictionary

        Args:
            exclude (list): List of fields to exclude

        Returns:
            dict: Model as dictionary
        """
        exclude = exclude or []
        data = {}

        for column in self.__table__.columns:
            if column.name not in exclude:
                value = getattr(self, column.name)

                if isinstance(value, (datetime, date)):
                    value = value.isoformat()
                elif isinstance(value, Decimal):
                    value = float(value)

                data[column.name] = value

        return data


class TenantMixin:
    """Mixin for models owned by a company (tenant)"""

    @declared_attr
    def company_id(cls):
        return db.Column(
            db.String(36),
            db.ForeignKey('companies.id', ondelete='CASCADE'),
            nullable=False,
            index=True
        )
