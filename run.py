import logging
import os

from docstore import create_app
from docstore.config import DevConfig

logging.basicConfig(level=DevConfig.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = create_app(DevConfig)

if __name__ == "__main__":
    app.run(
        host=os.getenv("DOCSTORE_HOST", "127.0.0.1"),
        port=int(os.getenv("DOCSTORE_PORT", "5003")),
        debug=app.config["DEBUG"],
    )
