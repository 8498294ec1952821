"""Application layer: workflows composed from the platform and stores."""
