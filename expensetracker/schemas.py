"""Input schemas shared by the JSON API and the HTML forms.

The expense draft and the list/stats filters are declared once here so the
two entry points cannot drift apart.
"""

from datetime import date, datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_core import PydanticCustomError

# Largest value the INTEGER amount column holds
MAX_AMOUNT = 2_147_483_647

CATEGORIES = (
    "Food",
    "Travel",
    "Bills",
    "Housing",
    "Utilities",
    "Movie",
    "Gadgets",
    "Clothes",
    "Other",
)

# Errors raised below already carry a user-facing sentence
_CUSTOM_ERROR_TYPES = {"title_required", "amount_too_small", "amount_too_large", "invalid_category", "invalid_date"}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class ExpenseDraft(BaseModel):
    """An expense as submitted by a client, before it has an id or owner."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    title: str
    amount: float = Field(allow_inf_nan=False)
    category: str = "Other"
    date: Optional[datetime] = Field(default=None, validate_default=True)
    description: Optional[str] = None

    @field_validator("title")
    @classmethod
    def _title_not_empty(cls, value: str) -> str:
        if not value:
            raise PydanticCustomError("title_required", "Title is required")
        return value

    @field_validator("amount")
    @classmethod
    def _amount_positive(cls, value: float) -> float:
        if value < 1:
            raise PydanticCustomError("amount_too_small", "Amount must be positive")
        if value >= MAX_AMOUNT + 0.5:
            raise PydanticCustomError("amount_too_large", "Amount is too large")
        return value

    @field_validator("category")
    @classmethod
    def _known_category(cls, value: str) -> str:
        if value not in CATEGORIES:
            raise PydanticCustomError(
                "invalid_category",
                "Category must be one of: {choices}",
                {"choices": ", ".join(CATEGORIES)},
            )
        return value

    @field_validator("description", mode="before")
    @classmethod
    def _empty_description(cls, value):
        return _blank_to_none(value)

    @field_validator("date", mode="before")
    @classmethod
    def _coerce_date(cls, value):
        value = _blank_to_none(value)
        if value is None:
            return _utcnow()
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day)
        if isinstance(value, str) and len(value.strip()) == 10:
            try:
                parsed = date.fromisoformat(value.strip())
            except ValueError:
                raise PydanticCustomError("invalid_date", "Date must be a valid date") from None
            return datetime(parsed.year, parsed.month, parsed.day)
        return value

    @field_validator("date")
    @classmethod
    def _naive_utc(cls, value: Optional[datetime]) -> datetime:
        if value is None:
            return _utcnow()
        if value.tzinfo is not None:
            try:
                value = value.astimezone(timezone.utc).replace(tzinfo=None)
            except OverflowError:
                raise PydanticCustomError("invalid_date", "Date must be a valid date") from None
        return value


class StatsFilters(BaseModel):
    model_config = ConfigDict(extra="ignore")

    month: Optional[int] = Field(default=None, ge=1, le=12)
    year: Optional[int] = Field(default=None, ge=1, le=9999)

    @classmethod
    def from_args(cls, args):
        """Build filters from a query-string mapping, treating blanks as absent."""
        data = {}
        for name in cls.model_fields:
            value = _blank_to_none(args.get(name))
            if value is not None:
                # category must match exactly, so only the numeric fields are trimmed
                if name != "category" and isinstance(value, str):
                    value = value.strip()
                data[name] = value
        return cls.model_validate(data)


    def or_current_period(self, today: Optional[date] = None):
        """Fill a missing month and year from ``today``, as the HTML pages do."""
        today = today or _utcnow().date()
        return self.model_copy(update={
            "month": self.month or today.month,
            "year": self.year or today.year,
        })


class ExpenseFilters(StatsFilters):
    category: Optional[str] = None


def format_validation_error(exc: ValidationError):
    """Return ``(message, field)`` for a pydantic validation failure.

    Every violated constraint contributes one sentence; ``field`` names the
    first offending field.
    """
    messages = []
    first_field = None
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"]) or None
        if first_field is None:
            first_field = field
        if err["type"] in _CUSTOM_ERROR_TYPES or not field:
            messages.append(err["msg"])
        else:
            messages.append(f"{field}: {err['msg']}")
    return ", ".join(messages), first_field
