from fastapi import FastAPI
from iposcore.api.ipo import router as ipo_router
from iposcore.core.config import settings

app = FastAPI(title=settings.PROJECT_NAME)

app.include_router(ipo_router)
