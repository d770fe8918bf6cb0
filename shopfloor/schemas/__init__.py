from shopfloor.schemas.auth import LoginResponse, Machine
from shopfloor.schemas.common import CamelModel, ErrorResponse, Partition
from shopfloor.schemas.jobs import JobState, JobStatusResponse, JobView
from shopfloor.schemas.processes import PendingProcess, PendingProcessesResponse
from shopfloor.schemas.production import (
    CancelProductionRequest,
    CompleteProductionRequest,
    JobAccepted,
    ProductionKind,
    ProductionRequest,
    ProductionResponse,
    StartProductionRequest,
    StatusWarning,
)
from shopfloor.schemas.schedule import (
    ChangeMachineRequest,
    MachineListResponse,
    MachineScheduleResponse,
    ReorderRequest,
    ScheduleMachine,
    ScheduleUpdateResponse,
)

__all__ = [
    "CamelModel",
    "CancelProductionRequest",
    "ChangeMachineRequest",
    "CompleteProductionRequest",
    "ErrorResponse",
    "JobAccepted",
    "JobState",
    "JobStatusResponse",
    "JobView",
    "LoginResponse",
    "Machine",
    "MachineListResponse",
    "MachineScheduleResponse",
    "Partition",
    "PendingProcess",
    "PendingProcessesResponse",
    "ProductionKind",
    "ProductionRequest",
    "ProductionResponse",
    "ReorderRequest",
    "ScheduleMachine",
    "ScheduleUpdateResponse",
    "StartProductionRequest",
    "StatusWarning",
]
