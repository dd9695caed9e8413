"""
Single-process startup command for container entrypoints.

Runs all pre-flight steps inside one Django process: wait for the database
and Redis, migrate, recompile stored extensions, create the admin account
from the environment and collect static files.
"""
import os
import time

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.core.management.base import BaseCommand, CommandError
from django.db import connections
from django.db.utils import OperationalError


def _env_enabled(name: str) -> bool:
    return os.getenv(name, "true").strip().lower() in ("1", "true", "yes", "on")


class Command(BaseCommand):
    help = "Run all startup steps (db/redis wait, migrate, extension compile, admin user, collectstatic) in one process."

    def add_arguments(self, parser):
        parser.add_argument("--no-migrate", action="store_true")
        parser.add_argument("--no-compile-extensions", action="store_true")
        parser.add_argument("--no-admin-user", action="store_true")
        parser.add_argument("--no-collectstatic", action="store_true")
        parser.add_argument("--no-db-wait", action="store_true")
        parser.add_argument("--no-redis-wait", action="store_true")

    def handle(self, *args, **options):
        if not options["no_db_wait"]:
            self._wait_for_db()

        if not options["no_redis_wait"] and getattr(settings, "REDIS_URI", ""):
            self._wait_for_redis(settings.REDIS_URI)

        if not options["no_migrate"]:
            self.stdout.write("Running migrations...")
            call_command("migrate", "--noinput", verbosity=1, stdout=self.stdout, stderr=self.stderr)

        if not options["no_compile_extensions"] and _env_enabled("EXTENSION_COMPILE"):
            self.stdout.write("Compiling extensions...")
            try:
                call_command("extension_compile", stdout=self.stdout, stderr=self.stderr)
            except CommandError as exc:
                self.stdout.write(self.style.WARNING(str(exc)))

        if not options["no_admin_user"] and _env_enabled("ADMIN_BOOTSTRAP"):
            self._ensure_admin_user()

        if not options["no_collectstatic"] and _env_enabled("COLLECTSTATIC"):
            self.stdout.write("Collecting static files...")
            call_command("collectstatic", "--noinput", verbosity=1, stdout=self.stdout, stderr=self.stderr)

        self.stdout.write(self.style.SUCCESS("Startup complete."))

    def _wait_for_db(self):
        timeout = int(os.getenv("DB_WAIT_TIMEOUT", "60"))
        interval = float(os.getenv("DB_WAIT_INTERVAL", "2"))
        self.stdout.write("Waiting for database...")
        start = time.monotonic()
        while True:
            try:
                connections["default"].cursor().close()
                return
            except OperationalError as exc:
                elapsed = time.monotonic() - start
                if elapsed >= timeout:
                    raise SystemExit(f"Database unavailable after {timeout}s: {exc}")
                time.sleep(interval)

    def _wait_for_redis(self, uri: str):
        from core.setup_wizard import SetupCheckError, check_redis

        timeout = int(os.getenv("REDIS_WAIT_TIMEOUT", "60"))
        interval = float(os.getenv("REDIS_WAIT_INTERVAL", "2"))
        self.stdout.write("Waiting for Redis...")
        start = time.monotonic()
        while True:
            try:
                check_redis(uri)
                return
            except SetupCheckError as exc:
                elapsed = time.monotonic() - start
                if elapsed >= timeout:
                    raise SystemExit(f"Redis unavailable after {timeout}s: {exc}")
                time.sleep(interval)

    def _ensure_admin_user(self):
        email = os.getenv("ADMIN_EMAIL", "").strip()
        password = os.getenv("ADMIN_PASSWORD", "")
        if not email or not password:
            return

        username = os.getenv("ADMIN_USERNAME", "").strip() or email.split("@")[0]
        User = get_user_model()
        if User.objects.filter(username=username).exists():
            self.stdout.write(f"Admin user '{username}' already exists.")
            return
        User.objects.create_superuser(username=username, email=email, password=password)
        self.stdout.write(self.style.SUCCESS(f"Created admin user '{username}'."))
