"""
FastAPI routers grouped by resource.

Each module exposes an APIRouter that the application factory mounts under
the versioned API prefix.
"""
