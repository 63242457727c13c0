from prometheus_fastapi_instrumentator import Instrumentator

from radio_registry import create_app
from radio_registry.core.logging import configure_logging

configure_logging()
app = create_app()
Instrumentator().instrument(app).expose(app, include_in_schema=False)
