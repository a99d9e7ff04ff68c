import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from daffodil.cli import EXIT_FAILED, EXIT_OK, EXIT_USAGE, build_steps, load_step_file, run_cli
from daffodil.errors import AuthenticationError, DeploymentError, RemoteConnectionError

from fakes import FakeSession

CONNECT = "daffodil.ssh.connector.ConnectionManager.connect"


class StubDeployer:
    def __init__(self) -> None:
        self.calls = []

    def run_command(self, cmd):
        self.calls.append(("local", cmd))
        return None

    def ssh_command(self, cmd):
        self.calls.append(("remote", cmd))
        return None

    def transfer_files(self, path, destination=None):
        self.calls.append(("transfer", path, destination))

    def make_directory(self, name):
        self.calls.append(("mkdir", name))


class StepFileTests(unittest.TestCase):
    def test_build_steps_binds_actions(self) -> None:
        deployer = StubDeployer()
        steps = build_steps(
            [
                {"step": "Build", "local": "npm run build"},
                {"step": "Upload", "transfer": "dist", "destination": "/srv/www"},
                {"step": "Logs", "mkdir": "logs"},
                {"step": "Restart", "remote": "systemctl restart app"},
            ],
            deployer,
        )
        for step in steps:
            step.action()
        self.assertEqual([step.label for step in steps], ["Build", "Upload", "Logs", "Restart"])
        self.assertEqual(
            deployer.calls,
            [
                ("local", "npm run build"),
                ("transfer", "dist", "/srv/www"),
                ("mkdir", "logs"),
                ("remote", "systemctl restart app"),
            ],
        )

    def test_checked_command_failure_raises(self) -> None:
        steps = build_steps([{"step": "Test", "local": "npm test", "check": True}], StubDeployer())
        with self.assertRaises(RuntimeError):
            steps[0].action()

    def test_unchecked_command_failure_is_tolerated(self) -> None:
        steps = build_steps([{"step": "Test", "remote": "false"}], StubDeployer())
        steps[0].action()

    def test_invalid_entries_are_rejected(self) -> None:
        invalid = [
            {"step": "Nothing"},
            {"step": "Both", "local": "a", "remote": "b"},
            {"local": "no label"},
            "not a mapping",
        ]
        for entry in invalid:
            with self.subTest(entry=entry):
                with self.assertRaises(ValueError):
                    build_steps([entry], StubDeployer())
        with self.assertRaises(ValueError):
            build_steps({"step": "x"}, StubDeployer())

    def test_load_step_file_errors(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(ValueError):
                load_step_file(str(Path(tmp) / "missing.json"), StubDeployer())
            broken = Path(tmp) / "broken.json"
            broken.write_text("[{", encoding="utf-8")
            with self.assertRaises(ValueError):
                load_step_file(str(broken), StubDeployer())


@mock.patch.dict(os.environ, {}, clear=True)
class RunCliTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root = Path(self._tmp.name)
        self.env_file = self.root / ".env"
        self.env_file.write_text("", encoding="utf-8")
        self.steps_file = self.root / "steps.json"

    def argv(self, *command: str, host: bool = True) -> list:
        args = [
            "--env-file", str(self.env_file),
            "--user", "deploy",
            "--path", "/srv/app",
            "--ignore-file", str(self.root / ".scpignore"),
        ]
        if host:
            args += ["--host", "deploy.example.com"]
        return args + list(command)

    def write_steps(self, steps) -> str:
        self.steps_file.write_text(json.dumps(steps), encoding="utf-8")
        return str(self.steps_file)

    def test_deploy_success(self) -> None:
        session = FakeSession(connected=True)
        steps = self.write_steps(
            [
                {"step": "Logs", "mkdir": "logs"},
                {"step": "Restart", "remote": "systemctl restart app", "check": True},
            ]
        )
        with mock.patch(CONNECT, return_value=session):
            code = run_cli(self.argv("deploy", steps))
        self.assertEqual(code, EXIT_OK)
        self.assertEqual(session.commands, ["mkdir -p /srv/app/logs", "systemctl restart app"])
        self.assertEqual(session.close_calls, 1)

    def test_deploy_checked_failure_exits_one(self) -> None:
        session = FakeSession(connected=True, statuses={"systemctl restart app": 1})
        steps = self.write_steps(
            [
                {"step": "Restart", "remote": "systemctl restart app", "check": True},
                {"step": "Never", "remote": "echo unreachable"},
            ]
        )
        with mock.patch(CONNECT, return_value=session):
            with self.assertLogs("daffodil", level="ERROR") as logs:
                code = run_cli(self.argv("deploy", steps))
        self.assertEqual(code, EXIT_FAILED)
        self.assertNotIn("echo unreachable", session.commands)
        self.assertIn(f"ERROR:daffodil.cli:{DeploymentError.TERSE_MESSAGE}", logs.output)
        self.assertFalse(any("Deployment failed: Deployment failed" in line for line in logs.output))

    def test_authentication_failure_exits_one(self) -> None:
        steps = self.write_steps([{"step": "Restart", "remote": "systemctl restart app"}])
        with mock.patch(CONNECT, side_effect=AuthenticationError("deploy.example.com", [])):
            with self.assertLogs("daffodil", level="ERROR") as logs:
                code = run_cli(self.argv("deploy", steps))
        self.assertEqual(code, EXIT_FAILED)
        self.assertTrue(any("no SSH keys found" in line for line in logs.output))

    def test_broken_session_exits_one(self) -> None:
        steps = self.write_steps([{"step": "Restart", "remote": "systemctl restart app"}])
        error = RemoteConnectionError("Connected to deploy.example.com but could not prepare /srv/app")
        with mock.patch(CONNECT, side_effect=error):
            with self.assertLogs("daffodil", level="ERROR") as logs:
                code = run_cli(self.argv("deploy", steps))
        self.assertEqual(code, EXIT_FAILED)
        self.assertTrue(any("could not prepare /srv/app" in line for line in logs.output))

    def test_invalid_step_file_exits_two(self) -> None:
        steps = self.write_steps([{"step": "Nothing"}])
        with self.assertLogs("daffodil", level="ERROR"):
            self.assertEqual(run_cli(self.argv("deploy", steps)), EXIT_USAGE)

    def test_missing_host_exits_two(self) -> None:
        steps = self.write_steps([])
        with self.assertLogs("daffodil", level="ERROR") as logs:
            self.assertEqual(run_cli(self.argv("deploy", steps, host=False)), EXIT_USAGE)
        self.assertTrue(any("remote_host is required" in line for line in logs.output))

    def test_exec_reports_remote_status(self) -> None:
        session = FakeSession(connected=True, statuses={"false": 1})
        with mock.patch(CONNECT, return_value=session):
            self.assertEqual(run_cli(self.argv("exec", "uptime")), EXIT_OK)
        self.assertEqual(session.close_calls, 1)

        session = FakeSession(connected=True, statuses={"false": 1})
        with mock.patch(CONNECT, return_value=session):
            with self.assertLogs("daffodil", level="ERROR"):
                self.assertEqual(run_cli(self.argv("exec", "false")), EXIT_FAILED)

    def test_transfer_missing_path_exits_one(self) -> None:
        session = FakeSession(connected=True)
        missing = str(self.root / "nope")
        with mock.patch(CONNECT, return_value=session):
            with self.assertLogs("daffodil", level="ERROR") as logs:
                code = run_cli(self.argv("transfer", missing))
        self.assertEqual(code, EXIT_FAILED)
        self.assertTrue(any(missing in line for line in logs.output))
        self.assertEqual(session.close_calls, 1)


if __name__ == "__main__":
    unittest.main()
