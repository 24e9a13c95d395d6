import logging
import os

import uvicorn
from dotenv import load_dotenv

# Load environment variables from .env.local in the backend directory
load_dotenv(dotenv_path=os.path.join(os.path.dirname(os.path.abspath(__file__)), '.env.local'))


def run(port: int = 8080):
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    print(f"Starting server on port {port}...")
    uvicorn.run("backend.main:app", host="localhost", port=port, reload=False)


if __name__ == '__main__':
    run(int(os.getenv("PORT", "8080")))
