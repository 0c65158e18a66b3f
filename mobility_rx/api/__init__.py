"""FastAPI application for Mobility-Rx."""
