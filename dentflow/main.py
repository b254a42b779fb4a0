from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dentflow.core.config import settings
from dentflow.core.errors import register_exception_handlers
from dentflow.core.logging_config import setup_logging
from dentflow.services.audit_trail import register_audit_hook

from dentflow.api.v1.auth import router as auth_router
from dentflow.api.v1.patients import router as patients_router
from dentflow.api.v1.medical_history import router as medical_history_router
from dentflow.api.v1.visits import router as visits_router
from dentflow.api.v1.appointments import router as appointments_router
from dentflow.api.v1.analytics import router as analytics_router
from dentflow.api.v1.audit import router as audit_router
from dentflow.api.v1.camp_submissions import router as camp_submissions_router

setup_logging()
register_audit_hook()

app = FastAPI(title=settings.APP_NAME, version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth_router, prefix="/api")
app.include_router(patients_router, prefix="/api")
app.include_router(medical_history_router, prefix="/api")
app.include_router(visits_router, prefix="/api")
app.include_router(appointments_router, prefix="/api")
app.include_router(analytics_router, prefix="/api")
app.include_router(audit_router, prefix="/api")
app.include_router(camp_submissions_router, prefix="/api")


@app.get("/health")
async def health():
    return {"ok": True}
