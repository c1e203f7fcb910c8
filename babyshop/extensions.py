import logging
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
import redis as _redis
from rq import Queue
from werkzeug.utils import import_string

logger = logging.getLogger(__name__)

db = SQLAlchemy()
migrate = Migrate()

# Initialized lazily in create_app
redis_client: _redis.Redis = None  # type: ignore
task_queue: Queue = None  # type: ignore


class DummyQueue:
    """Runs jobs inline when Redis is not available (dev mode).

    Failures are logged, never raised into the request. Retry options are
    accepted and ignored.
    """

    def enqueue(self, func, *args, **kwargs):
        kwargs.pop("retry", None)
        kwargs.pop("job_timeout", None)
        if isinstance(func, str):
            func = import_string(func)
        logger.info("No Redis, running %s inline", func.__name__)
        try:
            func(*args, **kwargs)
        except Exception:
            logger.exception("Inline job %s failed", func.__name__)
        return None


def init_redis(app):
    global redis_client, task_queue
    redis_url = app.config.get("REDIS_URL", "")
    if not redis_url:
        logger.warning("REDIS_URL not set, media jobs run inline (dev mode)")
        redis_client = None
        task_queue = DummyQueue()
        return

    try:
        redis_client = _redis.from_url(redis_url, decode_responses=False)
        redis_client.ping()
        task_queue = Queue(app.config["MEDIA_QUEUE_NAME"], connection=redis_client)
    except Exception as e:
        logger.warning("Redis connection failed (%s), media jobs run inline", e)
        redis_client = None
        task_queue = DummyQueue()
