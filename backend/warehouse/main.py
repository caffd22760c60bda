from contextlib import asynccontextmanager
from datetime import date
from typing import Any, Optional

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, get_settings
from .logging_config import get_logger, setup_logging
from .models import (
    InventorySnapshot,
    PalletsData,
    SaveDataRequest,
    StatusResponse,
    UpdatePalletsRequest,
    is_number,
)
from .storage import Document, DocumentStore, StorageError

logger = get_logger(__name__)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"status": "error", "message": message})


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def create_app(settings: Optional[Settings] = None, store: Optional[Any] = None) -> FastAPI:
    settings = settings or get_settings()
    if store is None:
        store = DocumentStore(settings.DATA_DIR)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.SERVICE_NAME, settings.LOG_LEVEL)
        app.state.store.ensure_data_dir()
        logger.info("Server running on port %s, data in %s", settings.PORT, settings.DATA_DIR)
        yield

    app = FastAPI(title="Warehouse Inventory API", version="1.0.0", lifespan=lifespan)
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError):
        logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
        return error_response(400, "Invalid request data.")

    @app.exception_handler(StorageError)
    async def storage_fault(request: Request, exc: StorageError):
        logger.error("Storage fault on %s %s: %s", request.method, request.url.path, exc)
        return error_response(500, "Failed to save data.")

    @app.get("/health")
    def health():
        return {"status": "ok", "date": date.today().isoformat()}

    @app.post("/clear-data", response_model=StatusResponse)
    def clear_data(store: DocumentStore = Depends(get_store)):
        store.clear_all()
        return {"status": "success", "message": "All data cleared successfully."}

    @app.get("/get-total")
    def get_total(store: DocumentStore = Depends(get_store)):
        return store.load(Document.TOTAL)

    @app.get("/get-pallets")
    def get_pallets(store: DocumentStore = Depends(get_store)):
        return store.load(Document.PALLETS)

    @app.post("/update-pallets", response_model=StatusResponse)
    def update_pallets(payload: UpdatePalletsRequest, store: DocumentStore = Depends(get_store)):
        if not is_number(payload.occupiedPallets):
            logger.warning("Rejected pallet update: %r", payload.occupiedPallets)
            return error_response(400, "Invalid data.")

        pallets = PalletsData(occupiedPallets=payload.occupiedPallets)
        store.save(Document.PALLETS, pallets.model_dump())
        return {"status": "success", "message": "Pallet data updated successfully."}

    @app.get("/get-data", response_model=InventorySnapshot)
    def get_data(store: DocumentStore = Depends(get_store)):
        return store.snapshot()

    @app.post("/save-data", response_model=StatusResponse)
    def save_data(payload: Optional[SaveDataRequest] = None, store: DocumentStore = Depends(get_store)):
        if payload is not None:
            # Fields left out (or null) keep their current document.
            if payload.polikarpovaData is not None:
                store.save(Document.POLIKARPOVA, payload.polikarpovaData)
            if payload.pollyData is not None:
                store.save(Document.POLLY, payload.pollyData)
            if payload.totalData is not None:
                store.save(Document.TOTAL, payload.totalData)
        return {"status": "success", "message": "Data saved successfully."}

    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run("warehouse.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
