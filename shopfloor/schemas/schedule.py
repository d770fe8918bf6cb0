from typing import Any

from pydantic import ValidationInfo, field_validator, model_validator

from shopfloor.schemas.common import CamelModel, Partition
from shopfloor.schemas.production import coerce_non_negative_int


def _alias(model: type[CamelModel], info: ValidationInfo) -> str:
    field = model.model_fields[info.field_name or ""]
    return field.alias or info.field_name or "value"


def parse_machine_id(value: Any, name: str = "machineId") -> int:
    """Coerce a machine id, raising ValueError with a client-facing message."""
    try:
        return coerce_non_negative_int(value, name)
    except ValueError:
        raise ValueError(f"Valid {name} is required") from None


def parse_job_ids(value: Any, name: str) -> list[int]:
    """Coerce a non-empty list of job (content) ids."""
    if not isinstance(value, list) or not value:
        raise ValueError(f"{name} must be a non-empty array")
    try:
        return [coerce_non_negative_int(item, name) for item in value]
    except ValueError:
        raise ValueError(f"All {name} must be numbers") from None


class ScheduleMachine(CamelModel):
    """Machine entry for the schedule dropdown."""

    machine_id: Any | None = None
    machine_name: str = ""


class MachineListResponse(CamelModel):
    status: bool = True
    machines: list[ScheduleMachine]


class MachineScheduleResponse(CamelModel):
    """Schedule rows for one machine, columns as the procedure returns them."""

    status: bool = True
    machine_id: int
    rows: list[dict[str, Any]]


class ScheduleUpdateResponse(CamelModel):
    status: bool = True


class ReorderRequest(CamelModel):
    """New job order for a machine; position is the list index plus one."""

    database: Partition = Partition.KOL
    machine_id: int
    ordered_job_ids: list[int]

    @field_validator("database", mode="before")
    @classmethod
    def _partition(cls, value: Any) -> Partition:
        return Partition.parse(value, default=Partition.KOL)

    @field_validator("machine_id", mode="before")
    @classmethod
    def _machine(cls, value: Any, info: ValidationInfo) -> int:
        return parse_machine_id(value, _alias(cls, info))

    @field_validator("ordered_job_ids", mode="before")
    @classmethod
    def _jobs(cls, value: Any, info: ValidationInfo) -> list[int]:
        return parse_job_ids(value, _alias(cls, info))


class ChangeMachineRequest(CamelModel):
    """Move jobs from one machine to another."""

    database: Partition = Partition.KOL
    source_machine_id: int
    target_machine_id: int
    job_ids: list[int]

    @field_validator("database", mode="before")
    @classmethod
    def _partition(cls, value: Any) -> Partition:
        return Partition.parse(value, default=Partition.KOL)

    @field_validator("source_machine_id", "target_machine_id", mode="before")
    @classmethod
    def _machines(cls, value: Any, info: ValidationInfo) -> int:
        return parse_machine_id(value, _alias(cls, info))

    @field_validator("job_ids", mode="before")
    @classmethod
    def _jobs(cls, value: Any, info: ValidationInfo) -> list[int]:
        return parse_job_ids(value, _alias(cls, info))

    @model_validator(mode="after")
    def _distinct_machines(self) -> "ChangeMachineRequest":
        if self.source_machine_id == self.target_machine_id:
            raise ValueError("sourceMachineId and targetMachineId must differ")
        return self
