# =============================================================================
# core/models/guitar.py - Guitar Schemas
# =============================================================================
# These models define the API contract for guitar listings:
# - GuitarCreate: Input for creating a listing (POST /api/guitars)
# - GuitarUpdate: Partial input for updating a listing (PUT /api/guitars/{id})
# - Guitar: A stored listing returned to clients
# - GuitarFilters: Structured filters for GET /api/guitars
#
# JSON uses camelCase (pickupLocation, imageUrl, imageUrls); table rows use
# snake_case. Both spellings are accepted on input.
#
# Validation is kept apart from persistence: the validate_* functions turn
# raw payloads into typed models or a GuitarValidationError, and the
# service layer only ever receives already-validated models.
# =============================================================================

from collections.abc import Mapping
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from app.exceptions import GuitarValidationError


class GuitarType(str, Enum):
    """Body style of a guitar."""
    ELECTRIC = "electric"
    ACOUSTIC = "acoustic"
    CLASSICAL = "classical"
    BASS = "bass"


class GuitarCondition(str, Enum):
    """Physical condition of a listed guitar."""
    NEW = "new"
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"


class GuitarStatus(str, Enum):
    """
    Sale state of a listing.

    Flow: available -> reserved -> sold (any state may be set directly)
    """
    AVAILABLE = "available"
    RESERVED = "reserved"
    SOLD = "sold"


MIN_YEAR = 1900

# Columns that are NOT NULL in the guitars table
REQUIRED_COLUMNS = (
    "brand",
    "model",
    "type",
    "year",
    "condition",
    "color",
    "price",
    "pickup_location",
    "status",
)

PRICE_QUANTUM = Decimal("0.01")


def max_year() -> int:
    """Latest accepted model year (next year's models are already listed)."""
    return datetime.now().year + 1


def _check_year(value: int | None) -> int | None:
    if value is not None and value > max_year():
        raise ValueError(f"Year must be at most {max_year()}")
    return value


def _empty_image_list(value: Any) -> Any:
    return [] if value is None else value


class _GuitarModel(BaseModel):
    """Shared config: camelCase aliases, snake_case names also accepted."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class GuitarCreate(_GuitarModel):
    """
    Schema for creating a new guitar listing.

    Example:
        {
            "brand": "Fender",
            "model": "Stratocaster",
            "type": "electric",
            "year": 2020,
            "condition": "excellent",
            "color": "Sunburst",
            "price": 1200,
            "pickupLocation": "Bond St"
        }
    """

    brand: str = Field(..., min_length=1, max_length=255)
    model: str = Field(..., min_length=1, max_length=255)
    type: GuitarType
    year: int = Field(..., ge=MIN_YEAR)
    condition: GuitarCondition
    color: str = Field(..., min_length=1, max_length=255)

    # numeric(10, 2) in the table
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)

    pickup_location: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    status: GuitarStatus = GuitarStatus.AVAILABLE

    # Primary image, then additional images in display order
    image_url: str | None = None
    image_urls: list[str] = Field(default_factory=list)

    @field_validator("year")
    @classmethod
    def _year_ceiling(cls, value: int) -> int:
        return _check_year(value)

    @field_validator("image_urls", mode="before")
    @classmethod
    def _image_list(cls, value: Any) -> Any:
        return _empty_image_list(value)

    def to_record(self) -> dict[str, Any]:
        """Row for the guitars table; price goes over the wire as a decimal string."""
        return self.model_dump(mode="json")


class GuitarUpdate(_GuitarModel):
    """
    Schema for a partial update.

    Only fields present in the payload are written. `id` is never
    accepted (it is ignored like any other unknown field).
    """

    brand: str | None = Field(default=None, min_length=1, max_length=255)
    model: str | None = Field(default=None, min_length=1, max_length=255)
    type: GuitarType | None = None
    year: int | None = Field(default=None, ge=MIN_YEAR)
    condition: GuitarCondition | None = None
    color: str | None = Field(default=None, min_length=1, max_length=255)
    price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    pickup_location: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    status: GuitarStatus | None = None
    image_url: str | None = None
    image_urls: list[str] | None = None

    @field_validator("year")
    @classmethod
    def _year_ceiling(cls, value: int | None) -> int | None:
        return _check_year(value)

    @field_validator("image_urls", mode="before")
    @classmethod
    def _image_list(cls, value: Any) -> Any:
        return _empty_image_list(value)

    @field_validator(*REQUIRED_COLUMNS)
    @classmethod
    def _not_null(cls, value: Any) -> Any:
        # Only runs for fields present in the payload
        if value is None:
            raise ValueError("Field cannot be null")
        return value

    def to_record(self) -> dict[str, Any]:
        """Changed columns only."""
        return self.model_dump(mode="json", exclude_unset=True)


class Guitar(_GuitarModel):
    """
    A stored guitar listing, as returned to clients.

    Built from a table row with Guitar.from_record(). Stored rows are
    trusted, so the create-time year ceiling is not re-checked here.
    """

    id: str
    brand: str
    model: str
    type: GuitarType
    year: int
    condition: GuitarCondition
    color: str
    price: Decimal
    pickup_location: str
    description: str | None = None
    status: GuitarStatus = GuitarStatus.AVAILABLE
    image_url: str | None = None
    image_urls: list[str] = Field(default_factory=list)

    @field_validator("image_urls", mode="before")
    @classmethod
    def _image_list(cls, value: Any) -> Any:
        return _empty_image_list(value)

    @field_validator("price")
    @classmethod
    def _two_places(cls, value: Decimal) -> Decimal:
        return value.quantize(PRICE_QUANTUM)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Guitar":
        return cls.model_validate(dict(record))


class GuitarFilters(_GuitarModel):
    """
    Structured filters for listing guitars.

    An absent field means "no constraint", never "match empty".
    """

    type: str | None = None
    brand: str | None = None
    status: str | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None

    def is_empty(self) -> bool:
        """True when no field constrains the result."""
        return all(value is None for value in self.model_dump().values())


# =============================================================================
# Validation Entry Points
# =============================================================================

def _field_errors(exc: ValidationError) -> list[dict[str, str]]:
    """Flatten pydantic errors into [{field, message}] for API responses."""
    errors = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "body"
        errors.append({"field": field, "message": error["msg"]})
    return errors


def _require_object(payload: Any) -> None:
    if not isinstance(payload, Mapping):
        raise GuitarValidationError([{"field": "body", "message": "Expected a JSON object"}])


def validate_guitar_create(payload: Any) -> GuitarCreate:
    """
    Validate a create payload.

    Raises:
        GuitarValidationError: With one entry per invalid field
    """
    _require_object(payload)
    try:
        return GuitarCreate.model_validate(payload)
    except ValidationError as e:
        raise GuitarValidationError(_field_errors(e)) from e


def validate_guitar_update(payload: Any) -> GuitarUpdate:
    """
    Validate a partial update payload.

    Raises:
        GuitarValidationError: With one entry per invalid field
    """
    _require_object(payload)
    try:
        return GuitarUpdate.model_validate(payload)
    except ValidationError as e:
        raise GuitarValidationError(_field_errors(e)) from e


def validate_filters(params: Mapping[str, str | None]) -> GuitarFilters:
    """
    Validate list filters taken from a query string.

    Empty values are treated as absent. Non-numeric price bounds are
    rejected here so the query layer only sees numbers.
    """
    cleaned = {key: value for key, value in params.items() if value not in (None, "")}
    try:
        return GuitarFilters.model_validate(cleaned)
    except ValidationError as e:
        raise GuitarValidationError(_field_errors(e), subject="filters") from e
