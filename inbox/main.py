import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pythonjsonlogger.json import JsonFormatter
from .config import LOG_LEVEL
from .core import kafka_startup, init_metrics, create_kafka_topics, shutdown_connections
from .errors import DMError, RateLimited
from .routes import router

# setup structured logging
logger = logging.getLogger('inbox')
handler = logging.StreamHandler()
handler.setFormatter(JsonFormatter('%(asctime)s %(levelname)s %(name)s %(message)s'))
logger.addHandler(handler)
logger.setLevel(LOG_LEVEL)

app = FastAPI(title="Inbox API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=['*'],
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

app.include_router(router, prefix="/api")


@app.get('/healthz')
async def healthz():
    return {'status': 'ok'}


@app.exception_handler(DMError)
async def dm_error_handler(request: Request, exc: DMError):
    body = {'detail': exc.detail, 'code': exc.code}
    if isinstance(exc, RateLimited):
        body['scope'] = exc.scope
    return JSONResponse(status_code=exc.status_code, content=body, headers=exc.headers)


@app.middleware('http')
async def log_requests(request: Request, call_next):
    logger.info({'msg': 'request_start', 'method': request.method, 'path': request.url.path})
    response = await call_next(request)
    logger.info({'msg': 'request_end', 'status': response.status_code})
    return response


@app.on_event("startup")
async def startup():
    # Best-effort init, don't block app from starting if a dependency fails
    try:
        await kafka_startup()
        await create_kafka_topics()
    except Exception as e:
        logger.warning({'msg': 'kafka_start_failed', 'error': str(e)})
    try:
        init_metrics()
    except Exception as e:
        logger.warning({'msg': 'metrics_init_failed', 'error': str(e)})


@app.on_event("shutdown")
async def shutdown():
    await shutdown_connections()
