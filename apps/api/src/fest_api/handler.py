"""
AWS Lambda entry point.

API Gateway events are translated to ASGI by Mangum. The lifespan is
skipped: each invocation opens its own database session and Redis is
optional (rate limiting falls back to memory).
"""

from mangum import Mangum

from fest_api.main import app

handler = Mangum(app, lifespan="off")
