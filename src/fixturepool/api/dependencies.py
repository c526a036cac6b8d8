"""FastAPI dependencies for dependency injection."""

from typing import Annotated

from fastapi import Depends, Request

from fixturepool.core.pool_manager import ResourcePoolManager
from fixturepool.data.results import ResultLog


def get_pool_manager(request: Request) -> ResourcePoolManager:
    """Pool manager attached to the application at startup."""
    manager: ResourcePoolManager | None = getattr(request.app.state, "pool_manager", None)
    if manager is None:
        raise RuntimeError("Pool manager not initialized. Start the app with its lifespan.")
    return manager


def get_result_log(request: Request) -> ResultLog:
    """Result log attached to the application at startup."""
    result_log: ResultLog | None = getattr(request.app.state, "result_log", None)
    if result_log is None:
        raise RuntimeError("Result log not initialized. Start the app with its lifespan.")
    return result_log


PoolManagerDep = Annotated[ResourcePoolManager, Depends(get_pool_manager)]
ResultLogDep = Annotated[ResultLog, Depends(get_result_log)]
