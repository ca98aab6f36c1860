# backend/main.py
import logging

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from database import init_db
from exceptions import StoreError

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Routers
from routes.cart import router as cart_router
from routes.payment import router as payment_router
from routes.orders import router as orders_router
from routes.stock import router as stock_router

# Create tables on startup
init_db()

app = FastAPI(title="Pharmacy Store API", version="1.0.0")

# CORS: the storefront origin plus local development
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
if settings.FRONTEND_URL and settings.FRONTEND_URL not in origins:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StoreError)
async def store_exception_handler(request: Request, exc: StoreError):
    """Converts domain exceptions to JSON responses."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Register routers
app.include_router(cart_router)
app.include_router(payment_router)
app.include_router(orders_router)
app.include_router(stock_router)

@app.get("/")
def read_root():
    return {"message": "Pharmacy Store API is running"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
