from __future__ import annotations

import argparse
import json
import signal
import threading
from pathlib import Path
from typing import List, Optional, Sequence

from .cmd_parser import parse_command_file, runbook_to_steps
from .config import DeploymentConfig
from .constants import DEFAULT_ENV_FILE, DEFAULT_NETWORK, LOG_FILE, RUNBOOK_FILE
from .env_utils import load_environment
from .errors import ConfigError
from .executor import DeploymentRunner
from .limits import check_limits
from .logging_utils import get_logger
from .near_cli import NearCli, format_command
from .rpc_client import NearRpcClient, default_rpc_url
from .steps import DeploymentStep, build_deployment_steps

logger = get_logger()

EXIT_OK = 0
EXIT_REMOTE_FAILURE = 1
EXIT_CONFIG_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Deploy the token factory and exercise it through the near CLI.",
    )
    parser.add_argument("--env-file", type=Path, default=DEFAULT_ENV_FILE, help="dotenv file to load (default: %(default)s)")
    parser.add_argument(
        "--runbook",
        type=Path,
        nargs="?",
        const=RUNBOOK_FILE,
        help="run the near commands listed in this file instead of the built-in steps (default file: %(const)s)",
    )
    parser.add_argument("--dry-run", action="store_true", help="print the commands without running them")
    parser.add_argument("--check", action="store_true", help="validate the configuration and exit")
    parser.add_argument("--skip-validation", action="store_true", help="run even when validation reports issues")
    parser.add_argument(
        "--rpc-url",
        help="send view calls to this JSON-RPC endpoint instead of the CLI (\"default\" picks the public node for the network)",
    )
    parser.add_argument("--timeout", type=float, help="seconds to wait for each call")
    parser.add_argument("--log-file", type=Path, default=LOG_FILE, help="detailed run log (default: %(default)s)")
    return parser


def _install_sigint(stop_event: threading.Event):
    def _handler(signum, frame):  # noqa: ARG001
        if stop_event.is_set():
            raise KeyboardInterrupt
        logger.warning("Interrupt received; stopping after the current step (press again to abort)")
        stop_event.set()

    return signal.signal(signal.SIGINT, _handler)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    env = load_environment(args.env_file)

    config: Optional[DeploymentConfig] = None
    issues: List[str] = []
    try:
        if args.runbook:
            # A runbook carries its own ids; the config only supplies defaults
            try:
                config = DeploymentConfig.from_env(env)
            except ConfigError:
                config = None
            if not args.runbook.exists():
                raise ConfigError(f"Runbook not found: {args.runbook}")
            steps: List[DeploymentStep] = runbook_to_steps(parse_command_file(args.runbook), env)
        else:
            config = DeploymentConfig.from_env(env)
            issues.extend(config.validate())
            steps = build_deployment_steps(config)
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        return EXIT_CONFIG_ERROR

    issues.extend(check_limits(steps))
    for issue in issues:
        logger.warning("Validation: %s", issue)
    if args.check:
        return EXIT_CONFIG_ERROR if issues else EXIT_OK
    if issues and not args.skip_validation:
        logger.error("Refusing to deploy with %d validation issue(s); use --skip-validation to override", len(issues))
        return EXIT_CONFIG_ERROR

    network = config.network if config else env.get("NEAR_NETWORK")
    timeout = args.timeout if args.timeout is not None else (config.call_timeout if config else None)
    cli_kwargs = {"network": network, "env": env}
    if config:
        cli_kwargs["cli_bin"] = config.cli_bin
    if timeout is not None:
        cli_kwargs["timeout"] = timeout
    cli = NearCli(**cli_kwargs)

    if args.dry_run:
        for step in steps:
            print(format_command(cli.command_for(step)))
        return EXIT_OK

    rpc_url = args.rpc_url or (config.rpc_url if config else None)
    if rpc_url == "default":
        rpc_url = default_rpc_url(network or DEFAULT_NETWORK)
    view_transport = NearRpcClient(rpc_url, timeout=cli.timeout) if rpc_url else None

    stop_event = threading.Event()
    previous_handler = _install_sigint(stop_event)
    runner = DeploymentRunner(cli, view_transport=view_transport, log_file=args.log_file)
    try:
        report = runner.run_sequence(steps, stop_event=stop_event)
    finally:
        if previous_handler is not None:
            signal.signal(signal.SIGINT, previous_handler)

    print(json.dumps(report.to_state(), indent=2, default=str))
    if report.cancelled:
        logger.warning("Deployment cancelled")
        return EXIT_REMOTE_FAILURE
    if report.failed_step is not None:
        logger.error("Deployment stopped at step %r", report.failed_step.step.name)
        return EXIT_REMOTE_FAILURE
    logger.info("Deployment completed: %d step(s)", len(report.results))
    return EXIT_OK
