import uvicorn

from lora.config import settings
from lora.main import create_app

if __name__ == "__main__":
    uvicorn.run(create_app(), host="0.0.0.0", port=8000, log_level=settings.LOG_LEVEL.lower())
