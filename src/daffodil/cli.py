"""Command-line interface for Daffodil."""

from __future__ import annotations

import argparse
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from .config import DeployerConfig, load_config
from .deployer import Daffodil
from .errors import AuthenticationError, DaffodilError, DeploymentError
from .orchestrator import DeploymentStep
from .utils.logging import get_logger

logger = get_logger(__name__)

STEP_ACTIONS = ("local", "remote", "transfer", "mkdir")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


@dataclass
class CLIContext:
    """Context captured from CLI arguments."""

    config: DeployerConfig
    deployer: Daffodil


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="daffodil",
        description="Deploy files and run commands on a remote server over SSH.",
    )
    parser.add_argument("--host", help="Remote host (env: REMOTE_HOST)")
    parser.add_argument("--user", help="Remote user (env: REMOTE_USER)")
    parser.add_argument("--path", help="Remote base directory (env: REMOTE_PATH, default: .)")
    parser.add_argument("--port", type=int, default=None, help="SSH port (default: 22)")
    parser.add_argument(
        "--ignore-file", default=None, help="Ignore file with exclude patterns (default: .scpignore)"
    )
    parser.add_argument("--env-file", default=None, help="Path to a .env file to load first.")
    parser.add_argument(
        "--verbose", "-v", action="store_true", default=None,
        help="Timestamped logs, timings and full error details",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    deploy_parser = subparsers.add_parser("deploy", help="Run the steps listed in a JSON file")
    deploy_parser.add_argument("steps_file", help="JSON list of steps")

    transfer_parser = subparsers.add_parser("transfer", help="Transfer a local file or directory")
    transfer_parser.add_argument("local_path", help="Local file or directory")
    transfer_parser.add_argument(
        "--destination", "-d", default=None, help="Remote directory (default: --path)"
    )

    exec_parser = subparsers.add_parser("exec", help="Run one command on the remote host")
    exec_parser.add_argument("remote_command", help="Shell command to run remotely")

    return parser


def _command_step(run: Callable[[str], Any], cmd: str, check: bool, where: str) -> Callable[[], None]:
    def action() -> None:
        result = run(cmd)
        failed = result is None or (hasattr(result, "ok") and not result.ok)
        if check and failed:
            raise RuntimeError(f"{where} command failed: {cmd}")

    return action


def build_steps(entries: Any, deployer: Daffodil) -> List[DeploymentStep]:
    """
    Turn parsed step-file entries into DeploymentSteps bound to deployer.

    Each entry needs a "step" label and exactly one of "local", "remote",
    "transfer" (with optional "destination") or "mkdir". "check": true makes
    a failing local or remote command fail the step.
    """
    if not isinstance(entries, list):
        raise ValueError("Step file must contain a JSON list")
    steps: List[DeploymentStep] = []
    for number, entry in enumerate(entries, 1):
        if not isinstance(entry, dict) or not isinstance(entry.get("step"), str):
            raise ValueError(f"Step #{number} needs a \"step\" label")
        actions = [key for key in STEP_ACTIONS if key in entry]
        if len(actions) != 1:
            raise ValueError(
                f"Step #{number} ({entry['step']}) needs exactly one of: {', '.join(STEP_ACTIONS)}"
            )
        kind = actions[0]
        value = entry[kind]
        check = bool(entry.get("check", False))
        if kind == "local":
            action = _command_step(deployer.run_command, value, check, "Local")
        elif kind == "remote":
            action = _command_step(deployer.ssh_command, value, check, "Remote")
        elif kind == "transfer":
            destination = entry.get("destination")
            action = lambda path=value, dest=destination: deployer.transfer_files(path, dest)
        else:
            action = lambda name=value: deployer.make_directory(name)
        steps.append(DeploymentStep(label=entry["step"], action=action))
    return steps


def load_step_file(path: str, deployer: Daffodil) -> List[DeploymentStep]:
    step_file = Path(path)
    if not step_file.is_file():
        raise ValueError(f"Step file not found: {path}")
    with step_file.open("r", encoding="utf-8") as handle:
        try:
            entries = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    return build_steps(entries, deployer)


def _build_context(args: argparse.Namespace) -> CLIContext:
    overrides: Dict[str, Any] = {
        "remote_host": args.host,
        "remote_user": args.user,
        "remote_path": args.path,
        "port": args.port,
        "ignore_file": args.ignore_file,
        "verbose": args.verbose,
    }
    config = load_config(args.env_file, **overrides)
    return CLIContext(config=config, deployer=Daffodil.from_config(config))


def _run_connected(deployer: Daffodil, operation: Callable[[], Any]) -> Any:
    deployer.connect()
    try:
        return operation()
    finally:
        deployer.dispose()


def dispatch_command(args: argparse.Namespace) -> int:
    try:
        context = _build_context(args)
        steps = None
        if args.command == "deploy":
            steps = load_step_file(args.steps_file, context.deployer)
    except ValueError as exc:
        logger.error("%s", exc)
        return EXIT_USAGE

    deployer = context.deployer
    verbose = context.config.verbose
    try:
        if args.command == "deploy":
            deployer.deploy(steps)
        elif args.command == "transfer":
            _run_connected(
                deployer, lambda: deployer.transfer_files(args.local_path, args.destination)
            )
        elif args.command == "exec":
            result = _run_connected(deployer, lambda: deployer.ssh_command(args.remote_command))
            if result is None or not result.ok:
                return EXIT_FAILED
    except (AuthenticationError, DeploymentError) as exc:
        logger.error("%s", exc.describe(verbose))
        return EXIT_FAILED
    except DaffodilError as exc:
        logger.error("Deployment failed: %s", exc.describe(verbose))
        return EXIT_FAILED
    return EXIT_OK


def run_cli(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return dispatch_command(args)
