"""
Start the assistant proxy with uvicorn.

  python run.py

Backends and limits come from the environment (see assistant_proxy/config.py).
MAX_CONCURRENCY caps in-flight requests; extra connections get 503.
"""

import uvicorn

from assistant_proxy.config import load_settings

if __name__ == "__main__":
    settings = load_settings()
    uvicorn.run(
        "assistant_proxy.main:app",
        host=settings.host,
        port=settings.port,
        limit_concurrency=settings.max_concurrency,
        log_level=settings.log_level.lower(),
    )
