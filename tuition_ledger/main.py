from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tuition_ledger.api.v1.payments.router import router as payments_router
from tuition_ledger.api.v1.students.router import router as students_router
from tuition_ledger.api.v1.tuition.router import router as tuition_router
from tuition_ledger.core.logging_config import configure_logging


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="Tuition Ledger")

    # CORS: allow the administration frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(tuition_router)
    app.include_router(payments_router)
    app.include_router(students_router)

    return app


app = create_app()
