from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from contextlib import asynccontextmanager
import logging

from asset_chaincode import new_chaincode
from asset_api.config import settings
from asset_api.database import build_engine, build_sessionmaker, init_db, close_db
from asset_api.ledger.peer import Peer
from asset_api.services.gateway import Gateway, load_identity
from asset_api.api.assets import router as asset_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Starting Asset REST API...")
    logger.info(f"Ledger store: {settings.DATABASE_URL.split('@')[1] if '@' in settings.DATABASE_URL else settings.DATABASE_URL}")

    engine = build_engine(settings.DATABASE_URL)
    await init_db(engine)

    chaincode = new_chaincode()
    peer = Peer(build_sessionmaker(engine), {settings.CHAINCODE_NAME: chaincode})
    identity = load_identity(settings.MSP_ID, settings.CERT_PATH)

    gateway = Gateway(
        identity,
        peer,
        evaluate_timeout=settings.EVALUATE_TIMEOUT,
        endorse_timeout=settings.ENDORSE_TIMEOUT,
        submit_timeout=settings.SUBMIT_TIMEOUT,
        commit_status_timeout=settings.COMMIT_STATUS_TIMEOUT,
    )
    logger.info(
        f"Connected to {settings.GATEWAY_PEER} ({settings.PEER_ENDPOINT}) as {identity.msp_id}; "
        f"channel={settings.CHANNEL_NAME} chaincode={settings.CHAINCODE_NAME} functions={chaincode.functions}"
    )

    app.state.gateway = gateway
    app.state.contract = gateway.get_network(settings.CHANNEL_NAME).get_contract(settings.CHAINCODE_NAME)
    try:
        yield
    finally:
        logger.info("Shutting down Asset REST API...")
        await gateway.close()
        await close_db(engine)


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Body parse and validation failures are client errors (400)
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors with detailed messages"""
    errors = []
    for error in exc.errors():
        error_detail = {
            "field": " -> ".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        }

        # Add input value if available
        if "input" in error and error["input"] is not None:
            error_detail["input"] = error["input"]

        errors.append(error_detail)

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Validation Error",
            "message": "The request contains invalid data",
            "details": jsonable_encoder(errors),
            "request_path": request.url.path
        }
    )

# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "An internal server error occurred",
            "error": str(exc) if settings.DEBUG else "Internal Server Error"
        }
    )


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION
    }


app.include_router(asset_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "asset_api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )
