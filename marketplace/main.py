from fastapi import FastAPI
from marketplace.database import Base, engine
from fastapi.middleware.cors import CORSMiddleware
from marketplace.middleware import add_request_id_and_process_time
from marketplace.models import user_model, service_model, booking_model  # noqa: F401
from marketplace.routes.user_route import user_router
from marketplace.routes.service_route import service_router
from marketplace.routes.booking_route import booking_router


Base.metadata.create_all(bind=engine)
app = FastAPI(
    title="Local Services Marketplace API",
    version="1.0.0",
    description="Browse local service listings by category and city, and send booking requests to providers.",
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(add_request_id_and_process_time)


@app.get("/", status_code=200)
async def home():
    return {"message": "Welcome to the Local Services Marketplace API"}


app.include_router(user_router, prefix="/api", tags=["Users"])
app.include_router(service_router, prefix="/api", tags=["Services"])
app.include_router(booking_router, prefix="/api", tags=["Bookings"])
