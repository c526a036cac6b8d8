"""Core pool management: the resource pool manager and its errors."""
