import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from daffodil.config import DeployerConfig, load_config, str_to_bool


class ConfigTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.env_file = Path(self._tmp.name) / ".env"
        self.env_file.write_text("", encoding="utf-8")

    def write_env(self, text: str) -> str:
        self.env_file.write_text(text, encoding="utf-8")
        return str(self.env_file)

    @mock.patch.dict(os.environ, {}, clear=True)
    def test_loads_values_from_env_file(self) -> None:
        env_file = self.write_env(
            "REMOTE_USER=deploy\nREMOTE_HOST=203.0.113.7\nREMOTE_PATH=/srv/app\nREMOTE_PORT=2222\n"
        )
        config = load_config(env_file)
        self.assertEqual(config.remote_user, "deploy")
        self.assertEqual(config.remote_host, "203.0.113.7")
        self.assertEqual(config.remote_path, "/srv/app")
        self.assertEqual(config.port, 2222)
        self.assertEqual(config.target, "deploy@203.0.113.7:2222")

    @mock.patch.dict(os.environ, {"REMOTE_USER": "deploy", "REMOTE_HOST": "example.com"}, clear=True)
    def test_defaults(self) -> None:
        config = load_config(str(self.env_file))
        self.assertEqual(config.remote_path, ".")
        self.assertEqual(config.port, 22)
        self.assertEqual(config.ignore_file, ".scpignore")
        self.assertFalse(config.verbose)

    @mock.patch.dict(
        os.environ,
        {"REMOTE_USER": "deploy", "REMOTE_HOST": "example.com", "DAFFODIL_VERBOSE": "yes"},
        clear=True,
    )
    def test_overrides_win_over_environment(self) -> None:
        config = load_config(
            str(self.env_file), remote_host="other.example.com", port=2200, remote_path=None
        )
        self.assertEqual(config.remote_host, "other.example.com")
        self.assertEqual(config.port, 2200)
        self.assertEqual(config.remote_path, ".")
        self.assertTrue(config.verbose)

    @mock.patch.dict(os.environ, {"REMOTE_HOST": "example.com"}, clear=True)
    def test_missing_user_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            load_config(str(self.env_file))

    @mock.patch.dict(
        os.environ,
        {"REMOTE_USER": "deploy", "REMOTE_HOST": "example.com", "REMOTE_PORT": "ssh"},
        clear=True,
    )
    def test_invalid_port_is_rejected(self) -> None:
        with self.assertRaises(ValueError) as ctx:
            load_config(str(self.env_file))
        self.assertIn("ssh", str(ctx.exception))

    def test_port_range_is_validated(self) -> None:
        with self.assertRaises(ValueError):
            DeployerConfig(remote_user="deploy", remote_host="example.com", port=0).validate()

    def test_str_to_bool(self) -> None:
        for value in ("true", "1", "YES", " on "):
            self.assertTrue(str_to_bool(value))
        for value in ("false", "0", "", "no"):
            self.assertFalse(str_to_bool(value))
        self.assertTrue(str_to_bool(True))


if __name__ == "__main__":
    unittest.main()
