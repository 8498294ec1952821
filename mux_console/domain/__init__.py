"""
Domain layer module.

Records exchanged with storage, the protocols collaborators satisfy, and the
exception hierarchy shared by infrastructure and route handlers.
"""
