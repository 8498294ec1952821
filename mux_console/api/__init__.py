"""API layer: FastAPI routes, request/response models and the response envelope."""
