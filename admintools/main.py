from fastapi import FastAPI

from .api import health, hosts, password, size, software
from .config import get_settings
from .logger import setup_logging

setup_logging(get_settings().log_level)

app = FastAPI(title="Admin Tools")

app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(size.router, prefix="/size", tags=["size"])
app.include_router(password.router, prefix="/password", tags=["password"])
app.include_router(hosts.router, prefix="/hosts", tags=["hosts"])
app.include_router(software.router, prefix="/software", tags=["software"])
