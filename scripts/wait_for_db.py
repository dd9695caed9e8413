import os
import time

import django
from django.db import connections
from django.db.utils import OperationalError


def _wait_for_redis(uri: str, timeout_seconds: int, interval_seconds: float) -> int:
    import redis

    start = time.monotonic()
    client = redis.Redis.from_url(uri, socket_connect_timeout=5)
    while True:
        try:
            client.ping()
            return 0
        except redis.exceptions.RedisError as exc:
            elapsed = time.monotonic() - start
            if elapsed >= timeout_seconds:
                print(f"Redis unavailable after {timeout_seconds}s: {exc}")
                return 1
            time.sleep(interval_seconds)


def main() -> int:
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")
    timeout_seconds = int(os.getenv("DB_WAIT_TIMEOUT", "60"))
    interval_seconds = float(os.getenv("DB_WAIT_INTERVAL", "2"))

    django.setup()

    start = time.monotonic()
    while True:
        try:
            connections["default"].cursor().close()
            break
        except OperationalError as exc:
            elapsed = time.monotonic() - start
            if elapsed >= timeout_seconds:
                print(f"Database unavailable after {timeout_seconds}s: {exc}")
                return 1
            time.sleep(interval_seconds)

    from django.conf import settings

    if settings.REDIS_URI:
        return _wait_for_redis(settings.REDIS_URI, timeout_seconds, interval_seconds)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
