"""Tests for the setup wizard helpers and the setup management command."""
import tempfile
from io import StringIO
from pathlib import Path
from unittest.mock import patch

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import SimpleTestCase
from dotenv import dotenv_values

from core.setup_wizard import (
    SetupAnswers,
    SetupCheckError,
    check_database,
    check_redis,
    database_settings,
    render_env,
    write_env,
)


class SetupAnswersTests(SimpleTestCase):
    def test_default_port_follows_db_type(self):
        self.assertEqual(SetupAnswers(db_type="postgres").db_port, "5432")
        self.assertEqual(SetupAnswers(db_type="mysql").db_port, "3306")

    def test_explicit_port_is_kept(self):
        self.assertEqual(SetupAnswers(db_type="postgres", db_port="6543").db_port, "6543")

    def test_unknown_db_type_rejected(self):
        with self.assertRaises(ValueError):
            SetupAnswers(db_type="oracle")

    def test_secret_key_generated(self):
        first = SetupAnswers()
        second = SetupAnswers()
        self.assertTrue(first.secret_key)
        self.assertNotEqual(first.secret_key, second.secret_key)


class DatabaseSettingsTests(SimpleTestCase):
    def test_postgres_settings(self):
        answers = SetupAnswers(
            db_type="postgres", db_host="db", db_username="enfyra", db_password="pw", db_name="app"
        )
        self.assertEqual(
            database_settings(answers),
            {
                "ENGINE": "django.db.backends.postgresql",
                "NAME": "app",
                "USER": "enfyra",
                "PASSWORD": "pw",
                "HOST": "db",
                "PORT": "5432",
            },
        )

    def test_sqlite_settings(self):
        answers = SetupAnswers(db_type="sqlite", db_name="/tmp/app.sqlite3")
        self.assertEqual(
            database_settings(answers),
            {"ENGINE": "django.db.backends.sqlite3", "NAME": "/tmp/app.sqlite3"},
        )


class RenderEnvTests(SimpleTestCase):
    def _parse(self, text):
        return dotenv_values(stream=StringIO(text), interpolate=False)

    def test_postgres_env(self):
        answers = SetupAnswers(
            db_type="postgres",
            db_host="db",
            db_username="enfyra",
            db_password="secret",
            db_name="app",
            redis_uri="redis://cache:6379/0",
            app_port="1105",
            secret_key="abc",
        )
        values = self._parse(render_env(answers))

        self.assertEqual(values["DB_TYPE"], "postgres")
        self.assertEqual(values["DB_HOST"], "db")
        self.assertEqual(values["DB_PORT"], "5432")
        self.assertEqual(values["DB_USERNAME"], "enfyra")
        self.assertEqual(values["DB_PASSWORD"], "secret")
        self.assertEqual(values["DB_NAME"], "app")
        self.assertEqual(values["REDIS_URI"], "redis://cache:6379/0")
        self.assertEqual(values["PORT"], "1105")
        self.assertEqual(values["SECRET_KEY"], "abc")
        self.assertEqual(values["DEBUG"], "false")
        self.assertNotIn("ADMIN_EMAIL", values)

    def test_sqlite_env_omits_server_fields(self):
        values = self._parse(render_env(SetupAnswers(db_type="sqlite", db_name="db.sqlite3", redis_uri="")))

        self.assertEqual(values["DB_NAME"], "db.sqlite3")
        self.assertNotIn("DB_HOST", values)
        self.assertNotIn("REDIS_URI", values)

    def test_values_with_special_characters_are_quoted(self):
        answers = SetupAnswers(db_password='p#ss "word"', secret_key="a=b")
        text = render_env(answers)
        values = self._parse(text)

        self.assertIn('DB_PASSWORD="p#ss \\"word\\""\n', text)
        self.assertEqual(values["DB_PASSWORD"], 'p#ss "word"')
        self.assertEqual(values["SECRET_KEY"], "a=b")

    def test_admin_fields_written_when_email_given(self):
        answers = SetupAnswers(admin_email="admin@example.com", admin_password="changeme")
        values = self._parse(render_env(answers))

        self.assertEqual(values["ADMIN_EMAIL"], "admin@example.com")
        self.assertEqual(values["ADMIN_USERNAME"], "admin")
        self.assertEqual(values["ADMIN_PASSWORD"], "changeme")


class WriteEnvTests(SimpleTestCase):
    def test_written_values_survive_dotenv_loading(self):
        answers = SetupAnswers(
            db_password="pa${ss}word",
            db_username="back\\slash",
            admin_email="admin@example.com",
            admin_password="it's $HOME #1",
            secret_key="k$y=${SECRET}'\"",
        )
        with tempfile.TemporaryDirectory() as tmp:
            path = write_env(answers, Path(tmp) / ".env")
            values = dotenv_values(path, interpolate=False)

        self.assertEqual(values["DB_PASSWORD"], "pa${ss}word")
        self.assertEqual(values["DB_USERNAME"], "back\\slash")
        self.assertEqual(values["ADMIN_PASSWORD"], "it's $HOME #1")
        self.assertEqual(values["SECRET_KEY"], "k$y=${SECRET}'\"")

    def test_refuses_to_overwrite(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / ".env"
            path.write_text("EXISTING=1\n")
            with self.assertRaises(FileExistsError):
                write_env(SetupAnswers(), path)
            self.assertEqual(path.read_text(), "EXISTING=1\n")

    def test_force_overwrites(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / ".env"
            path.write_text("EXISTING=1\n")
            write_env(SetupAnswers(secret_key="xyz"), path, force=True)
            self.assertIn("SECRET_KEY=xyz", path.read_text())


class ConnectivityCheckTests(SimpleTestCase):
    databases = {"default"}

    def test_sqlite_database_check_passes(self):
        with tempfile.TemporaryDirectory() as tmp:
            check_database(SetupAnswers(db_type="sqlite", db_name=str(Path(tmp) / "check.sqlite3")))

    def test_unreachable_database_raises(self):
        answers = SetupAnswers(db_type="sqlite", db_name="/nonexistent-dir/sub/check.sqlite3")
        with self.assertRaises(SetupCheckError):
            check_database(answers)

    @patch("redis.Redis.from_url")
    def test_redis_ping(self, from_url):
        check_redis("redis://localhost:6379/0")
        from_url.return_value.ping.assert_called_once()

    @patch("redis.Redis.from_url")
    def test_redis_failure_raises(self, from_url):
        import redis

        from_url.return_value.ping.side_effect = redis.exceptions.ConnectionError("refused")
        with self.assertRaises(SetupCheckError) as ctx:
            check_redis("redis://localhost:6379/0")
        self.assertIn("refused", str(ctx.exception))


class SetupCommandTests(SimpleTestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.env_path = Path(self.tmp.name) / ".env"

    def tearDown(self):
        self.tmp.cleanup()

    def _call(self, *args):
        out = StringIO()
        call_command("setup", "--env-file", str(self.env_path), *args, stdout=out, stderr=StringIO())
        return out.getvalue()

    @patch("core.management.commands.setup.check_redis")
    @patch("core.management.commands.setup.check_database")
    def test_non_interactive_writes_env(self, check_db, check_cache):
        output = self._call(
            "--no-input",
            "--db-type", "postgres",
            "--db-host", "db",
            "--db-username", "enfyra",
            "--db-password", "secret",
            "--redis-uri", "redis://cache:6379/0",
        )

        check_db.assert_called_once()
        check_cache.assert_called_once_with("redis://cache:6379/0")
        text = self.env_path.read_text()
        self.assertIn("DB_HOST=db\n", text)
        self.assertIn("DB_PASSWORD=secret\n", text)
        self.assertIn("REDIS_URI=redis://cache:6379/0\n", text)
        self.assertIn("Wrote configuration", output)

    def test_existing_env_requires_force(self):
        self.env_path.write_text("X=1\n")
        with self.assertRaises(CommandError):
            self._call("--no-input", "--skip-checks")

    def test_force_overwrites_existing_env(self):
        self.env_path.write_text("X=1\n")
        self._call("--no-input", "--skip-checks", "--force", "--db-type", "sqlite", "--db-name", "app.sqlite3")
        self.assertIn("DB_TYPE=sqlite", self.env_path.read_text())

    @patch(
        "core.management.commands.setup.check_database",
        side_effect=SetupCheckError("Could not connect"),
    )
    def test_non_interactive_check_failure_aborts(self, _check):
        with self.assertRaises(CommandError):
            self._call("--no-input", "--redis-uri", "")
        self.assertFalse(self.env_path.exists())

    def test_admin_email_requires_password(self):
        with self.assertRaises(CommandError):
            self._call("--no-input", "--skip-checks", "--admin-email", "admin@example.com")

    @patch("core.management.commands.setup.check_redis")
    @patch("core.management.commands.setup.check_database")
    @patch("core.management.commands.setup.getpass.getpass", return_value="dbpass")
    @patch("builtins.input")
    def test_interactive_prompts(self, mock_input, _getpass, check_db, check_cache):
        mock_input.side_effect = [
            "postgres",   # database type
            "db.internal",  # host
            "",           # port (default)
            "enfyra",     # username
            "app",        # database name
            "",           # redis uri (default)
            "1105",       # app port
            "",           # allowed hosts
            "no",         # debug
            "",           # admin email (skip)
        ]

        self._call()

        text = self.env_path.read_text()
        self.assertIn("DB_HOST=db.internal\n", text)
        self.assertIn("DB_PORT=5432\n", text)
        self.assertIn("DB_PASSWORD=dbpass\n", text)
        self.assertIn("DB_NAME=app\n", text)
        self.assertIn("REDIS_URI=redis://localhost:6379/0\n", text)
        self.assertIn("PORT=1105\n", text)

    @patch("core.management.commands.setup.check_redis")
    @patch("core.management.commands.setup.check_database")
    @patch("core.management.commands.setup.getpass.getpass", return_value="")
    @patch("builtins.input")
    def test_interactive_retries_failed_database(self, mock_input, _getpass, check_db, check_cache):
        check_db.side_effect = [SetupCheckError("refused"), None]
        mock_input.side_effect = [
            "postgres", "wrong-host", "", "enfyra", "app",
            "", "", "", "no", "",
            # second round of database questions
            "postgres", "right-host", "", "enfyra", "app",
        ]

        self._call()

        self.assertEqual(check_db.call_count, 2)
        self.assertIn("DB_HOST=right-host\n", self.env_path.read_text())
