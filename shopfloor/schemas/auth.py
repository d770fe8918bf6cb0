from typing import Any

from shopfloor.schemas.common import CamelModel, Partition


class Machine(CamelModel):
    """Machine an operator may work on."""

    machine_id: Any | None = None
    machine_name: Any | None = None
    department_id: Any | None = None
    product_unit_id: Any | None = None


class LoginResponse(CamelModel):
    """Result of an operator login."""

    status: bool
    user_id: Any | None = None
    ledger_id: Any | None = None
    machines: list[Machine] = []
    selected_database: Partition
    current_db: str | None = None
    error: str | None = None
