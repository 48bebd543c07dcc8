import logging
import os

import uvicorn


if __name__ == "__main__":
    logging.basicConfig(
        level=os.getenv("MODERATOR_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    reload_enabled = str(os.getenv("MODERATOR_BACKEND_RELOAD", "0")).strip().lower() in {"1", "true", "yes", "on"}
    host = os.getenv("MODERATOR_HOST", "0.0.0.0")
    port = int(os.getenv("MODERATOR_PORT", "8000"))
    uvicorn.run("moderator.main:app", host=host, port=port, reload=reload_enabled)
