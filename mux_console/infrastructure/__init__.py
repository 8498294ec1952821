"""Infrastructure layer: Mux client, rate limiter, storage and auth."""
