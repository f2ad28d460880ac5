import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.core.config import settings
from app.db.session import engine, Base
from app.models import ab_test
from app.models import donation
from app.models import goal
from app.models import user

from app.routes import auth_router
from app.routes import donation_router
from app.routes import prediction_router
from app.routes import ab_test_router
from app.routes import goal_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

Base.metadata.create_all(bind=engine)

app = FastAPI(title="Donation Analytics")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include authentication router
app.include_router(auth_router.router)
# Include donation records and statistics router
app.include_router(donation_router.router)
# Include forecast router
app.include_router(prediction_router.router)
# Include A/B testing router
app.include_router(ab_test_router.router)
# Include donation goals router
app.include_router(goal_router.router)


@app.get("/")
async def root():
    return {"message": "Welcome to the Donation Analytics API!"}
