# main.py
import logging
import os
from contextlib import asynccontextmanager
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from database import connect_to_mongo, create_indexes, close_mongo_connection, get_database
from models.base import DocumentValidationError
from services.auth_service import initialize_admin_user
from auth.users import router as auth_router
from routes.medicines import router as medicines_router
from routes.orders import router as orders_router
from routes.dashboard import router as dashboard_router
from routes.pages import router as pages_router

load_dotenv()

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000").split(",")

@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        await connect_to_mongo()
        await create_indexes()
        await initialize_admin_user(get_database())
        logger.info("Application startup completed successfully.")
    except Exception as e:
        logger.error(f"Error during startup: {e}")
        raise
    try:
        yield
    finally:
        logger.info("Shutting down application...")
        close_mongo_connection()

app = FastAPI(title="Pharmacy Management Backend", version="1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in CORS_ORIGINS if origin.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Router includes
app.include_router(auth_router, prefix="/auth", tags=["Auth"])
app.include_router(medicines_router, prefix="/api/medicines", tags=["Medicines"])
app.include_router(orders_router, prefix="/api/orders", tags=["Orders"])
app.include_router(dashboard_router, prefix="/api/dashboard", tags=["Dashboard"])
app.include_router(pages_router, tags=["Pages"])

@app.exception_handler(DocumentValidationError)
async def document_validation_error_handler(request: Request, exc: DocumentValidationError):
    logger.info(f"Validation failed for {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=400, content=exc.to_dict())

@app.get("/health")
async def health_check():
    return {"status": "running"}

@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"Incoming request: {request.method} {request.url}")
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"Unhandled error: {e}", exc_info=True)
        raise
    return response
