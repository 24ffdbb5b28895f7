"""
main.py

Flask backend that fetches URLs server-side and returns them as
double-wrapped encrypted zip archives.

Dependencies:
  - Python packages: Flask, flask-restx, flask-cors, requests, urllib3, pyminizip

Notes:
  - Jobs live in memory and run on a thread pool inside this process
  - API v1 endpoints available at /api/v1/ with Swagger docs at /api/v1/docs
  - Uses application factory pattern for better testability
"""

import logging
import os

from app_factory import create_app

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()

if __name__ == "__main__":
    host = os.getenv("FLASK_HOST", "0.0.0.0")
    port = int(os.getenv("FLASK_PORT", 8000))
    debug = os.getenv("FLASK_DEBUG", "false").lower() == "true"

    # The reloader would start a second set of worker threads
    app.run(host=host, port=port, debug=debug, use_reloader=False, threaded=True)
