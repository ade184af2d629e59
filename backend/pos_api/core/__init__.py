"""Application wiring: lifespan, CORS, dependencies."""
