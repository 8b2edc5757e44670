from .routes import material_requests_bp  # noqa: F401
