"""Users CRUD API: controller, service and repository layers over SQLAlchemy."""
