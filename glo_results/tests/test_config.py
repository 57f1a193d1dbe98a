import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from glo_results.config import DEFAULT_API_URL, load_config, load_from_environment

_KEYS = (
    "DATABASE_URL",
    "LOTTERY_DB_PATH",
    "LOTTERY_REPORT_PATH",
    "GLO_API__URL",
    "GLO_API__TIMEOUT_SECONDS",
    "GLO_API__PACE_SECONDS",
    "LOG_LEVEL",
    "WEB__HOST",
    "WEB__PORT",
)


class ConfigTests(unittest.TestCase):
    def setUp(self) -> None:
        self._env = mock.patch.dict(os.environ, {}, clear=False)
        self._env.start()
        for key in _KEYS:
            os.environ.pop(key, None)
        load_config.cache_clear()

    def tearDown(self) -> None:
        load_config.cache_clear()
        self._env.stop()

    def test_defaults(self) -> None:
        settings = load_from_environment()

        self.assertEqual(settings.database_url, "sqlite:///data/lottery.db")
        self.assertEqual(settings.report_path, "reports")
        self.assertEqual(settings.api.url, DEFAULT_API_URL)
        self.assertEqual(settings.api.timeout_seconds, 30)
        self.assertEqual(settings.api.pace_seconds, 1.0)
        self.assertEqual(settings.web.port, 8080)

    def test_environment_overrides(self) -> None:
        os.environ.update(
            {
                "LOTTERY_DB_PATH": "/tmp/results.db",
                "GLO_API__TIMEOUT_SECONDS": "5",
                "GLO_API__PACE_SECONDS": "0.25",
                "LOG_LEVEL": "debug",
                "WEB__PORT": "9000",
            }
        )

        settings = load_from_environment()

        self.assertEqual(settings.database_url, "sqlite:////tmp/results.db")
        self.assertEqual(settings.api.timeout_seconds, 5)
        self.assertEqual(settings.api.pace_seconds, 0.25)
        self.assertEqual(settings.log_level, "DEBUG")
        self.assertEqual(settings.web.port, 9000)

    def test_database_url_wins_over_path(self) -> None:
        os.environ["DATABASE_URL"] = "postgresql://lottery@localhost/lottery"
        os.environ["LOTTERY_DB_PATH"] = "/tmp/ignored.db"

        self.assertEqual(load_from_environment().database_url, "postgresql://lottery@localhost/lottery")

    def test_load_config_reads_env_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            env_file = Path(tmpdir) / "settings.env"
            env_file.write_text("LOTTERY_REPORT_PATH=/srv/reports\nGLO_API__URL=http://localhost:9999/results\n")

            settings = load_config(str(env_file))

        self.assertEqual(settings.report_path, "/srv/reports")
        self.assertEqual(settings.api.url, "http://localhost:9999/results")
        self.assertIs(load_config(str(env_file)), settings)

    def test_copy_replaces_fields(self) -> None:
        settings = load_from_environment()
        updated = settings.copy(report_path="elsewhere")

        self.assertEqual(updated.report_path, "elsewhere")
        self.assertEqual(settings.report_path, "reports")


if __name__ == "__main__":
    unittest.main()
