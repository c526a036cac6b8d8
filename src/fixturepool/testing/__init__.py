"""Worker-side helpers for test suites that draw fixtures from the pool."""

# Set per worker process by `fixturepool run-parallel`
WORKER_ID_ENV = "FIXTUREPOOL_WORKER_ID"
