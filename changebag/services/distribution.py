"""Countries, cities, venue categories and distribution points.

These back the distribution step of the sponsorship wizard. Records are
created and edited by admins; the wizard reads them through
``get_settings`` and ``points_for``.
"""

import logging

from changebag import db
from changebag.errors import NotFoundError, ValidationError
from changebag.models import City, Country, DistributionCategory, DistributionPoint
from changebag.utils import to_number

logger = logging.getLogger(__name__)

# URL segment -> model
MODELS = {
    "countries": Country,
    "cities": City,
    "categories": DistributionCategory,
    "points": DistributionPoint,
}

# API field -> (column, kind, required). A model as the kind means a reference to it.
_FIELDS = {
    Country: {
        "name": ("name", "text", True),
        "code": ("code", "text", True),
        "isActive": ("is_active", "bool", False),
    },
    City: {
        "name": ("name", "text", True),
        "state": ("state", "text", False),
        "countryId": ("country_id", Country, True),
        "isActive": ("is_active", "bool", False),
    },
    DistributionCategory: {
        "name": ("name", "text", True),
        "icon": ("icon", "text", True),
        "color": ("color", "text", True),
        "defaultToteCount": ("default_tote_count", "count", True),
        "isActive": ("is_active", "bool", False),
    },
    DistributionPoint: {
        "name": ("name", "text", True),
        "cityId": ("city_id", City, True),
        "categoryId": ("category_id", DistributionCategory, True),
        "defaultToteCount": ("default_tote_count", "count", True),
        "isActive": ("is_active", "bool", False),
    },
}


def _model_for(kind: str):
    model = MODELS.get(kind)
    if model is None:
        raise NotFoundError(f"Unknown distribution record type '{kind}'")
    return model


def _coerce(value, kind):
    """Return (value, error) for one input value."""
    if kind == "text":
        if isinstance(value, str) and value.strip():
            return value.strip(), None
        return None, "must be non-empty text"
    if kind == "count":
        number = to_number(value)
        if isinstance(number, int) and number >= 0:
            return number, None
        return None, "must be a non-negative whole number"
    if kind == "bool":
        if isinstance(value, bool):
            return value, None
        return None, "must be true or false"

    ref_id = to_number(value)
    if isinstance(ref_id, int) and db.session.get(kind, ref_id) is not None:
        return ref_id, None
    return None, "must be the id of an existing record"


def _apply(record, data: dict, partial: bool = False) -> None:
    missing = []
    invalid = {}
    values = {}
    for field, (column, kind, required) in _FIELDS[type(record)].items():
        if data.get(field) is None or data.get(field) == "":
            if required and not partial:
                missing.append(field)
            continue
        value, error = _coerce(data[field], kind)
        if error:
            invalid[field] = error
        else:
            values[column] = value

    if missing or invalid:
        message = "Missing required fields" if missing else "Invalid field values"
        raise ValidationError(message, missing_fields=missing, invalid_fields=invalid)

    for column, value in values.items():
        setattr(record, column, value)


class DistributionService:

    @staticmethod
    def get_settings() -> dict:
        """Everything the wizard needs to render its distribution step."""
        return {
            "countries": [c.to_dict() for c in Country.query.order_by(Country.name).all()],
            "cities": [c.to_dict() for c in City.query.order_by(City.name).all()],
            "categories": [
                c.to_dict()
                for c in DistributionCategory.query.order_by(DistributionCategory.name).all()
            ],
            "points": [
                p.to_dict() for p in DistributionPoint.query.order_by(DistributionPoint.name).all()
            ],
        }

    @staticmethod
    def points_for(city_id, category_id) -> list[DistributionPoint]:
        return (
            DistributionPoint.query.filter_by(
                city_id=city_id, category_id=category_id, is_active=True
            )
            .order_by(DistributionPoint.name)
            .all()
        )

    @staticmethod
    def create_record(kind: str, data: dict):
        record = _model_for(kind)()
        _apply(record, data)
        db.session.add(record)
        db.session.commit()
        logger.info("Created %r", record)
        return record

    @staticmethod
    def update_record(kind: str, record_id, data: dict):
        model = _model_for(kind)
        record = db.session.get(model, record_id)
        if record is None:
            raise NotFoundError("Record not found")
        _apply(record, data, partial=True)
        db.session.commit()
        return record

    @staticmethod
    def delete_point(point_id) -> None:
        point = db.session.get(DistributionPoint, point_id)
        if point is None:
            raise NotFoundError("Distribution point not found")
        db.session.delete(point)
        db.session.commit()
        logger.info("Distribution point %s deleted", point_id)
