import os

import uvicorn

from flipbook.config import get_settings


def main():
    settings = get_settings()
    uvicorn.run(
        "flipbook.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "5000")),
        reload=False,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
