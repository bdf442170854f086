import os

from fastapi import FastAPI
from valuegraph.db import Base, engine, SessionLocal, STORAGE_KEY
import valuegraph.models  # noqa: F401 ensure models are imported so tables are known
from valuegraph.api.routes import router as api_router
from valuegraph.store import EntityStore
from valuegraph.utils import logger

# create FastAPI instance
app = FastAPI(title="Value Graph")
app.include_router(api_router)


@app.on_event("startup")
def on_startup_load_store():
    # snapshot table first, then restore (or seed) the in-memory state
    Base.metadata.create_all(bind=engine)
    store = EntityStore(SessionLocal, STORAGE_KEY)
    store.load(seed=os.getenv("VALUEGRAPH_SEED", "1") == "1")
    app.state.store = store
    logger.info("Store ready: %d builders, %d floor plans",
                len(store.state.builders), len(store.state.floor_plans))
