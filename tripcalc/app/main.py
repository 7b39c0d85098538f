"""FastAPI application."""

import uvicorn
from fastapi import FastAPI

from tripcalc.app.api.routes.health import router as health_router
from tripcalc.app.api.routes.itinerary import router as itinerary_router
from tripcalc.app.api.routes.metrics import router as metrics_router
from tripcalc.app.api.routes.trips import router as trips_router
from tripcalc.app.config import get_settings

app = FastAPI(title="TripCalc API", version="0.1.0")

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(trips_router)
app.include_router(itinerary_router)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "TripCalc API", "version": "0.1.0"}


def main() -> None:
    """Serve the API with uvicorn (``tripcalc-api`` console script)."""
    settings = get_settings()
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level=settings.log_level)


if __name__ == "__main__":
    main()
