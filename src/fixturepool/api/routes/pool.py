"""Pool status and reset endpoints.

Thin pass-throughs to `ResourcePoolManager.status()` and `cleanup()`;
errors are mapped to JSON by the handlers registered in `create_app`.
"""

from typing import Any

from fastapi import APIRouter, Body

from fixturepool.api.dependencies import PoolManagerDep, ResultLogDep

router = APIRouter(tags=["pool"])


@router.get("/pool-status")
def get_pool_status(manager: PoolManagerDep) -> dict[str, Any]:
    """Current status of every pool in the active environment."""
    status = manager.status()
    return {
        "success": True,
        "environment": manager.environment,
        "status": {
            fixture_type: type_status.model_dump(mode="json", by_alias=True, exclude_none=True)
            for fixture_type, type_status in status.items()
        },
    }


@router.post("/cleanup")
def cleanup_pool(manager: PoolManagerDep) -> dict[str, Any]:
    """Mark every fixture available again."""
    manager.cleanup()
    return {"success": True, "message": "Data pool cleaned up successfully"}


@router.get("/test-results")
def get_test_results(result_log: ResultLogDep) -> dict[str, Any]:
    """Recorded test results, most recent first."""
    return {"success": True, "results": result_log.read()}


@router.post("/test-results")
def record_test_result(
    result_log: ResultLogDep,
    result: dict[str, Any] = Body(...),
) -> dict[str, Any]:
    """Append a test result to the log."""
    entry = result_log.append(result)
    return {"success": True, "result": entry}
