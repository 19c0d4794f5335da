from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ticketing.auth_router import router as auth_router
from ticketing.checkin.router import router as checkin_router
from ticketing.config import settings
from ticketing.database import check_health, close_database, init_database
from ticketing.events.router import router as events_router
from ticketing.exception_handlers import UnexpectedErrorMiddleware, register_exception_handlers
from ticketing.logging_config import setup_logging
from ticketing.my.router import router as my_router
from ticketing.registrations.router import router as registrations_router
from ticketing.ticket_types.router import router as ticket_types_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await init_database()
    yield
    await close_database()


app = FastAPI(
    title="Event Ticketing",
    description="Events, ticket types, registrations and check-in",
    version="0.1.0",
    lifespan=lifespan,
)

# The last middleware added runs outermost; CORS wraps the error middleware
app.add_middleware(UnexpectedErrorMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
app.include_router(events_router, prefix="/api/events", tags=["events"])
app.include_router(ticket_types_router, prefix="/api/events", tags=["ticket-types"])
app.include_router(registrations_router, prefix="/api", tags=["registrations"])
app.include_router(checkin_router, prefix="/api/check-in", tags=["check-in"])
app.include_router(my_router, prefix="/api/my", tags=["my"])


@app.get("/api/health")
async def health():
    await check_health()
    return {"status": "healthy"}
