#!/usr/bin/env python3
"""Diagnostic script to check the deployment configuration."""

import shutil
import sys
from pathlib import Path

from deployment_runner.config import DeploymentConfig, config_summary
from deployment_runner.constants import BASE_ACCOUNT_ENV
from deployment_runner.env_utils import load_environment
from deployment_runner.errors import ConfigError
from deployment_runner.limits import check_limits
from deployment_runner.near_cli import NearCli, format_command
from deployment_runner.steps import build_deployment_steps


def main() -> int:
    print("=" * 60)
    print("Deployment Configuration Diagnostic")
    print("=" * 60)

    repo_root = Path(__file__).parent
    env_path = repo_root / ".env"

    if env_path.exists():
        print(f"\n✓ Found .env file: {env_path}")
    else:
        print(f"\n○ No .env file at {env_path}; using the process environment only")
    env = load_environment(env_path)

    print("\n" + "=" * 60)
    print("1. Resolved Configuration")
    print("=" * 60)

    try:
        config = DeploymentConfig.from_env(env)
    except ConfigError as exc:
        print(f"\n❌ {exc}")
        print(f"   → Set {BASE_ACCOUNT_ENV} in .env or export it before running")
        return 2

    for key, value in config_summary(config).items():
        print(f"  {key:26} = {value}")

    print("\n" + "=" * 60)
    print("2. near CLI")
    print("=" * 60)

    cli_path = shutil.which(config.cli_bin)
    if cli_path:
        print(f"\n  ✓ {config.cli_bin} found at {cli_path}")
    else:
        print(f"\n  ✗ {config.cli_bin} not found in PATH")
        print("    → Install it with: npm install -g near-cli")

    print("\n" + "=" * 60)
    print("3. Planned Commands")
    print("=" * 60)

    steps = build_deployment_steps(config)
    cli = NearCli(cli_bin=config.cli_bin, network=config.network)
    for idx, step in enumerate(steps, 1):
        print(f"\n  {idx}. {step.name}")
        print(f"     {format_command(cli.command_for(step))}")

    issues = config.validate() + check_limits(steps)
    if not cli_path:
        issues.append(f"{config.cli_bin} is not installed")

    print("\n" + "=" * 60)
    print("Summary")
    print("=" * 60)

    if issues:
        print(f"\n⚠️  Found {len(issues)} issue(s) to fix:\n")
        for i, issue in enumerate(issues, 1):
            print(f"  {i}. {issue}")
        return 1

    print("\n✅ All checks passed! Run: python3 run_deployment.py")
    return 0


if __name__ == "__main__":
    sys.exit(main())
