# localcooks/__main__.py
"""
Development server runner.

    python -m localcooks

Binds to PORT (default 8000) and reloads on change outside production.
"""

import logging
import os

import uvicorn

from .core.config import settings

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    port = int(os.getenv("PORT", "8000"))
    print(f"Starting LocalCooks API on http://localhost:{port} (site_mode={settings.site_mode})")
    print(f"API Docs: http://localhost:{port}/docs")

    uvicorn.run(
        "localcooks.main:app",
        host="0.0.0.0",
        port=port,
        reload=not settings.is_production,
        log_level="info",
    )
