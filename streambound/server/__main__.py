"""Run the streambound server: python -m streambound.server"""

import uvicorn

from streambound.core.diagnostics import configure_logging
from streambound.server.app import app

configure_logging()
uvicorn.run(app, host="0.0.0.0", port=8080)
