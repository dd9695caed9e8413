import getpass
from dataclasses import replace
from pathlib import Path

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from core.setup_wizard import (
    DB_TYPES,
    DEFAULT_DB_PORTS,
    DEFAULT_REDIS_URI,
    SetupAnswers,
    SetupCheckError,
    check_database,
    check_redis,
    write_env,
)


class Command(BaseCommand):
    help = "Ask for database, Redis and admin settings, check connectivity and write the .env file."

    def add_arguments(self, parser):
        parser.add_argument("--db-type", choices=DB_TYPES)
        parser.add_argument("--db-host")
        parser.add_argument("--db-port")
        parser.add_argument("--db-username")
        parser.add_argument("--db-password")
        parser.add_argument("--db-name")
        parser.add_argument("--redis-uri", help="Redis connection URI. Pass an empty string to skip Redis.")
        parser.add_argument("--port", dest="app_port", help="Port the app listens on.")
        parser.add_argument("--allowed-hosts")
        parser.add_argument("--debug", action="store_true", default=None)
        parser.add_argument("--admin-email")
        parser.add_argument("--admin-username")
        parser.add_argument("--admin-password")
        parser.add_argument("--env-file", default=None, help="Where to write the file (default: BASE_DIR/.env).")
        parser.add_argument("--force", action="store_true", help="Overwrite an existing .env file.")
        parser.add_argument("--skip-checks", action="store_true", help="Do not test database or Redis connectivity.")
        parser.add_argument(
            "--no-input",
            "--noinput",
            action="store_false",
            dest="interactive",
            help="Use options and defaults without prompting.",
        )

    def handle(self, *args, **options):
        env_path = Path(options["env_file"] or Path(settings.BASE_DIR) / ".env")
        if env_path.exists() and not options["force"]:
            raise CommandError(f"{env_path} already exists. Use --force to overwrite it.")

        self.interactive = options["interactive"]
        self.options = options

        answers = self._collect(options)

        if not options["skip_checks"]:
            answers = self._check_database(answers)
            answers = self._check_redis(answers)

        write_env(answers, env_path, force=options["force"])
        self.stdout.write(self.style.SUCCESS(f"Wrote configuration to {env_path}."))
        self.stdout.write("Next: run 'python manage.py startup' to migrate and create the admin user.")

    def _ask(self, label: str, default: str = "", *, secret: bool = False, choices=None) -> str:
        if not self.interactive:
            return default
        suffix = f" [{default}]" if default and not secret else ""
        if choices:
            suffix = f" ({'/'.join(choices)}){suffix}"
        while True:
            prompt = f"{label}{suffix}: "
            raw = getpass.getpass(prompt) if secret else input(prompt)
            value = raw.strip() or default
            if choices and value not in choices:
                self.stderr.write(f"Please choose one of: {', '.join(choices)}")
                continue
            return value

    def _option(self, name: str, fallback: str) -> str:
        value = self.options.get(name)
        return fallback if value is None else value

    def _collect_database(self, options, db_type: str = "") -> dict:
        db_type = self._ask("Database type", db_type or self._option("db_type", "postgres"), choices=DB_TYPES)
        if db_type == "sqlite":
            db_name = self._ask("Database file", self._option("db_name", str(Path(settings.BASE_DIR) / "db.sqlite3")))
            return {"db_type": db_type, "db_name": db_name}

        return {
            "db_type": db_type,
            "db_host": self._ask("Database host", self._option("db_host", "localhost")),
            "db_port": self._ask("Database port", self._option("db_port", DEFAULT_DB_PORTS[db_type])),
            "db_username": self._ask("Database username", self._option("db_username", "enfyra")),
            "db_password": self._ask("Database password", self._option("db_password", ""), secret=True),
            "db_name": self._ask("Database name", self._option("db_name", "enfyra")),
        }

    def _collect(self, options) -> SetupAnswers:
        values = self._collect_database(options)
        values["redis_uri"] = self._ask("Redis URI", self._option("redis_uri", DEFAULT_REDIS_URI))
        values["app_port"] = self._ask("App port", self._option("app_port", "8000"))
        values["allowed_hosts"] = self._ask("Allowed hosts", self._option("allowed_hosts", "localhost,127.0.0.1"))
        debug_default = "yes" if options.get("debug") else "no"
        values["debug"] = self._ask("Enable debug mode?", debug_default, choices=("yes", "no")) == "yes"
        values["admin_email"] = self._ask("Admin email", self._option("admin_email", ""))
        if values["admin_email"]:
            values["admin_username"] = self._ask("Admin username", self._option("admin_username", "admin"))
            values["admin_password"] = self._ask("Admin password", self._option("admin_password", ""), secret=True)
            if not values["admin_password"]:
                raise CommandError("An admin password is required when an admin email is given.")
        return SetupAnswers(**values)

    def _check_database(self, answers: SetupAnswers) -> SetupAnswers:
        while True:
            self.stdout.write(f"Checking {answers.db_type} connection...")
            try:
                check_database(answers)
            except SetupCheckError as exc:
                if not self.interactive:
                    raise CommandError(str(exc)) from exc
                self.stderr.write(str(exc))
                answers = replace(answers, **self._collect_database(self.options, answers.db_type))
                continue
            self.stdout.write(self.style.SUCCESS("Database connection OK."))
            return answers

    def _check_redis(self, answers: SetupAnswers) -> SetupAnswers:
        while answers.redis_uri:
            self.stdout.write("Checking Redis connection...")
            try:
                check_redis(answers.redis_uri)
            except SetupCheckError as exc:
                if not self.interactive:
                    raise CommandError(str(exc)) from exc
                self.stderr.write(str(exc))
                answers.redis_uri = self._ask("Redis URI (leave empty to skip Redis)", "")
                continue
            self.stdout.write(self.style.SUCCESS("Redis connection OK."))
            break
        return answers
