from fastapi import FastAPI

from config import config
from api.depends import CLIENT_AUTH
from api.evaluation_routes import evaluation_router
from api.planning_routes import planning_router
from models.labels import all_labels

import contextlib
import logging
import middleware

logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    # Nothing to open or close: the engine keeps no connections or state
    logger.info("Evaluation service starting with %s", config)
    yield
    logger.info("Evaluation service stopped.")


app = FastAPI(
    lifespan=lifespan,
    title="Experiment Evaluation API",
    version="1.0.0",
    description="Winner judgment, learnings and sample size planning for ad experiment runs.",
)
app.add_middleware(middleware.RequestIDMiddleware)

app.include_router(evaluation_router)
app.include_router(planning_router)


@app.get("/health")
def health_check():
    return {"status": "healthy"}


# GET /labels
@app.get("/labels", dependencies=[CLIENT_AUTH])
def labels_route() -> dict[str, dict[str, str]]:
    """Display labels for metric types, test types, winner statuses and impact levels."""
    return all_labels()
