#!/usr/bin/env python3
"""
Run the Timekeeper HR Service with uvicorn
"""

import uvicorn
from timekeeper.core.config import settings

if __name__ == "__main__":
    print(f"Starting {settings.app_name} on {settings.host}:{settings.port} (debug={settings.debug})")
    print(f"API documentation: http://localhost:{settings.port}/docs")

    uvicorn.run(
        "timekeeper.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
