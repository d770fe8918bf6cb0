from typing import Annotated

from fastapi import Depends

from shopfloor.config import Settings, get_settings
from shopfloor.services.jobs import JobManager, get_job_manager
from shopfloor.services.procedures import BaseProcedureInvoker, get_procedure_invoker

# Type aliases for dependency injection
AppSettings = Annotated[Settings, Depends(get_settings)]
Invoker = Annotated[BaseProcedureInvoker, Depends(get_procedure_invoker)]
Jobs = Annotated[JobManager, Depends(get_job_manager)]
