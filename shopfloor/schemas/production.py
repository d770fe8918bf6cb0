import re
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from shopfloor.schemas.common import CamelModel, Partition


_DIGITS = re.compile(r"^[+-]?\d+$")


class ProductionKind(str, Enum):
    """Production run operation performed by a stored procedure."""

    START = "start"
    COMPLETE = "complete"
    CANCEL = "cancel"


def coerce_non_negative_int(value: Any, name: str) -> int:
    """
    Coerce a request value to a non-negative integer.

    Accepts ints, integral floats and numeric strings. Booleans, blanks,
    fractions and negatives are rejected.

    Raises:
        ValueError: With a message naming the field
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValueError(f"{name} is required")
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer")

    number: Any = value
    if isinstance(value, str):
        text = value.strip()
        if _DIGITS.match(text):
            number = int(text)
        else:
            # Integral decimals such as "5.0"
            try:
                decimal = Decimal(text)
            except InvalidOperation:
                raise ValueError(f"{name} must be an integer") from None
            if not decimal.is_finite() or decimal != decimal.to_integral_value():
                raise ValueError(f"{name} must be an integer")
            number = int(decimal)

    if isinstance(number, float):
        if not number.is_integer():
            raise ValueError(f"{name} must be an integer")
        number = int(number)
    elif not isinstance(number, int):
        raise ValueError(f"{name} must be an integer")

    if number < 0:
        raise ValueError(f"{name} must be a non-negative integer")
    return number


def _wire_name(model: type[BaseModel], field_name: str | None) -> str:
    field = model.model_fields.get(field_name or "")
    if field is None:
        return field_name or "value"
    return field.alias or field_name or "value"


class ProductionRequest(BaseModel):
    """Fields shared by every production run request."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: int = Field(alias="UserID")
    employee_id: int = Field(alias="EmployeeID")
    process_id: int = Field(alias="ProcessID")
    job_booking_job_card_contents_id: int = Field(alias="JobBookingJobCardContentsID")
    machine_id: int = Field(alias="MachineID")
    job_card_form_no: str = Field(alias="JobCardFormNo")
    database: Partition

    @field_validator(
        "user_id",
        "employee_id",
        "process_id",
        "job_booking_job_card_contents_id",
        "machine_id",
        mode="before",
    )
    @classmethod
    def _non_negative_ids(cls, value: Any, info: ValidationInfo) -> int:
        return coerce_non_negative_int(value, _wire_name(cls, info.field_name))

    @field_validator("job_card_form_no", mode="before")
    @classmethod
    def _form_number(cls, value: Any) -> str:
        form_no = "" if value is None else str(value).strip()
        if not form_no:
            raise ValueError("JobCardFormNo is required")
        return form_no

    @field_validator("database", mode="before")
    @classmethod
    def _partition(cls, value: Any) -> Partition:
        return Partition.parse(value)

    def procedure_params(self) -> dict[str, Any]:
        """Procedure inputs keyed by parameter name."""
        return self.model_dump(by_alias=True, exclude={"database"})


class StartProductionRequest(ProductionRequest):
    """Request body for starting a production run; the partition defaults to KOL."""

    database: Partition = Partition.KOL

    @field_validator("database", mode="before")
    @classmethod
    def _partition(cls, value: Any) -> Partition:
        return Partition.parse(value, default=Partition.KOL)


class CancelProductionRequest(ProductionRequest):
    """Request body for cancelling a production run."""


class CompleteProductionRequest(ProductionRequest):
    """Request body for completing a production run with produced quantities."""

    production_qty: int = Field(alias="ProductionQty")
    wastage_qty: int = Field(alias="WastageQty")

    @field_validator("production_qty", "wastage_qty", mode="before")
    @classmethod
    def _non_negative_quantities(cls, value: Any, info: ValidationInfo) -> int:
        return coerce_non_negative_int(value, _wire_name(cls, info.field_name))


class StatusWarning(CamelModel):
    """Soft failure reported by a procedure as a single `Status` value."""

    message: str
    status_value: Any


class ProductionResponse(CamelModel):
    """Response of a synchronous production operation."""

    status: bool = True
    result: list[dict[str, Any]]
    status_warning: StatusWarning | None = None
    production_id: Any | None = None


class JobAccepted(CamelModel):
    """Response after queueing an asynchronous production operation."""

    status: bool = True
    job_id: str
