"""
HTTP service - Exposes submit / status / cancel over aiohttp.web
"""

import json
import logging
import time
from aiohttp import web
from .config import Settings
from .crawler import PlaywrightCrawlRunner
from .errors import NotFound, ValidationError
from .orchestrator import TaskOrchestrator
from .storage import FileObjectStore, JsonFileRecordSink

logger = logging.getLogger(__name__)

ORCHESTRATOR_KEY = web.AppKey('orchestrator', TaskOrchestrator)
ALLOWED_ORIGINS_KEY = web.AppKey('allowed_origins', list)


def build_orchestrator(settings: Settings) -> TaskOrchestrator:
    """Wire the Playwright runner and file storage into an orchestrator"""
    storage = settings.storage
    object_store = FileObjectStore(
        base_path=f"{storage.base_path}/{storage.thumbnail_dir}",
        compress=storage.compress
    )
    record_sink = JsonFileRecordSink(base_path=f"{storage.base_path}/{storage.records_dir}")
    runner = PlaywrightCrawlRunner(object_store, settings.crawler)
    return TaskOrchestrator(runner, record_sink=record_sink, config=settings.orchestrator)


@web.middleware
async def error_middleware(request: web.Request, handler):
    """Map domain errors to client errors and anything unexpected to a 500"""
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except ValidationError as e:
        return web.json_response({'error': 'Bad request', 'message': str(e)}, status=400)
    except NotFound as e:
        return web.json_response({'error': 'Not found', 'message': str(e)}, status=404)
    except Exception as e:
        logger.error(f"Global exception: {e}", exc_info=True)
        return web.json_response(
            {'error': 'Internal server error', 'message': 'An unexpected error occurred'},
            status=500
        )


@web.middleware
async def cors_middleware(request: web.Request, handler):
    """Allow the configured front-end origins"""
    if request.method == 'OPTIONS':
        response = web.Response()
    else:
        response = await handler(request)

    origin = request.headers.get('Origin')
    if origin and origin in request.app[ALLOWED_ORIGINS_KEY]:
        response.headers['Access-Control-Allow-Origin'] = origin
        response.headers['Access-Control-Allow-Methods'] = 'GET, POST, PUT, DELETE, OPTIONS'
        response.headers['Access-Control-Allow-Headers'] = 'Content-Type'
    return response


@web.middleware
async def process_time_middleware(request: web.Request, handler):
    start_time = time.time()
    response = await handler(request)
    response.headers['X-Process-Time'] = str(time.time() - start_time)
    return response


async def health(request: web.Request) -> web.Response:
    """Health check endpoint for monitoring"""
    orchestrator = request.app[ORCHESTRATOR_KEY]
    return web.json_response({
        'status': 'healthy',
        'timestamp': time.time(),
        'queue_depth': orchestrator.queue_depth,
        'stats': orchestrator.get_stats()
    }, dumps=_dumps)


async def test(request: web.Request) -> web.Response:
    logger.info("/test called")
    return web.Response(text="/test called")


async def submit_crawl(request: web.Request) -> web.Response:
    """Queue a crawl; accepts userId / siteUrl as JSON, form fields or query"""
    params = dict(request.query)
    if request.method == 'POST' and request.can_read_body:
        if request.content_type == 'application/json':
            try:
                body = await request.json()
            except ValueError:
                raise ValidationError("request body is not valid JSON")
            if not isinstance(body, dict):
                raise ValidationError("request body must be a JSON object")
            params.update(body)
        else:
            params.update(await request.post())

    owner = params.get('userId')
    site_url = params.get('siteUrl')
    logger.info(f"userId: {owner}")
    logger.info(f"siteUrl: {site_url}")

    orchestrator = request.app[ORCHESTRATOR_KEY]
    task_id = orchestrator.submit(
        owner if isinstance(owner, str) else '',
        site_url if isinstance(site_url, str) else ''
    )
    task = orchestrator.status(task_id)
    return web.json_response({'taskId': task_id, 'status': task.status.value}, status=202)


async def crawl_status(request: web.Request) -> web.Response:
    task = request.app[ORCHESTRATOR_KEY].status(request.match_info['task_id'])
    return web.json_response(task.to_dict())


async def cancel_crawl(request: web.Request) -> web.Response:
    task = request.app[ORCHESTRATOR_KEY].cancel(request.match_info['task_id'])
    return web.json_response(task.to_dict())


def create_app(orchestrator: TaskOrchestrator, allowed_origins=None) -> web.Application:
    """Build the aiohttp application around an orchestrator

    The orchestrator's worker runs for the lifetime of the application.
    """
    app = web.Application(middlewares=[cors_middleware, error_middleware, process_time_middleware])
    app[ORCHESTRATOR_KEY] = orchestrator
    app[ALLOWED_ORIGINS_KEY] = list(allowed_origins or [])

    async def orchestrator_context(app: web.Application):
        await app[ORCHESTRATOR_KEY].start()
        yield
        await app[ORCHESTRATOR_KEY].stop()

    app.cleanup_ctx.append(orchestrator_context)

    app.router.add_get('/health', health)
    app.router.add_get('/test', test)
    app.router.add_post('/crawl', submit_crawl)
    app.router.add_get('/crawl', submit_crawl)
    app.router.add_get('/crawl/{task_id}', crawl_status)
    app.router.add_delete('/crawl/{task_id}', cancel_crawl)
    return app


def _dumps(data) -> str:
    return json.dumps(data, default=str)
