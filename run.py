#!/usr/bin/env python3
"""
Run script for the Signal Router service
"""
import uvicorn

from signal_router.config.settings import settings
from signal_router.main import app

if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port, reload=settings.debug)
