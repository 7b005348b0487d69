"""Application core: configuration, FastAPI factory, dependencies."""
