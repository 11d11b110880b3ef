from __future__ import annotations

import datetime
import json
import shlex
import threading
import time
from pathlib import Path
from typing import Any, Iterable, Optional, Protocol, TextIO

from .errors import RemoteCallError
from .logging_utils import get_logger, log_section
from .steps import CallResult, DeploymentReport, DeploymentStep, StepResult, StepStatus

logger = get_logger()


class Transport(Protocol):
    def execute(self, step: DeploymentStep) -> CallResult:
        ...


def _now() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def _describe(step: DeploymentStep) -> str:
    kind = "view" if step.view else "call"
    text = f"{kind} {step.contract_id}.{step.method}({json.dumps(step.args, separators=(',', ':'))})"
    if step.signer:
        text += f" as {step.signer}"
    if step.gas is not None:
        text += f" gas={step.gas}"
    if step.deposit is not None:
        text += f" deposit={step.deposit}"
    if step.deposit_yocto is not None:
        text += f" depositYocto={step.deposit_yocto}"
    return text


class DeploymentRunner:
    """Run deployment steps one after another, stopping at the first failure.

    Calls go through ``transport``. When ``view_transport`` is given,
    read-only steps are sent there instead. Nothing is retried and nothing is
    rolled back.
    """

    def __init__(
        self,
        transport: Transport,
        *,
        view_transport: Optional[Transport] = None,
        log_file: Optional[Path] = None,
    ) -> None:
        self.transport = transport
        self.view_transport = view_transport
        self.log_file = log_file
        self._log: Optional[TextIO] = None

    def _transport_for(self, step: DeploymentStep) -> Transport:
        if step.view and self.view_transport is not None:
            return self.view_transport
        return self.transport

    def run_step(self, step: DeploymentStep) -> CallResult:
        log = self._log
        if log is not None:
            log.write("\n" + "-" * 80 + "\n")
            log.write(f"Timestamp: {_now()}\n")
            log.write(f"Step: {step.name}\n")
            command_for = getattr(self._transport_for(step), "command_for", None)
            if command_for is not None:
                log.write(f"Command: {shlex.join(command_for(step))}\n")
            else:
                log.write(f"Call: {_describe(step)}\n")

        logger.info("→ %s", _describe(step))
        try:
            result = self._transport_for(step).execute(step)
        except RemoteCallError as exc:
            if log is not None:
                log.write(f"Exit code: {exc.returncode}\n")
                _write_streams(log, exc.stdout, exc.stderr)
                log.write(f"Result: failed\n{exc}\n")
                log.flush()
            raise

        if log is not None:
            log.write(f"Exit code: {result.returncode}\n")
            _write_streams(log, result.stdout, result.stderr)
        return result

    def run_sequence(
        self,
        steps: Iterable[DeploymentStep],
        stop_event: Optional[threading.Event] = None,
    ) -> DeploymentReport:
        report = DeploymentReport(results=[StepResult(step=step) for step in steps])
        if self.log_file is not None:
            with self.log_file.open("w", encoding="utf-8") as log:
                logger.info("Logging detailed output to %s", self.log_file)
                log.write(f"Run started at {_now()}\n")
                log.write(f"Steps: {len(report.results)}\n")
                log.write("=" * 80 + "\n")
                self._log = log
                try:
                    self._run_all(report, stop_event)
                finally:
                    self._log = None
        else:
            self._run_all(report, stop_event)
        return report

    def _run_all(self, report: DeploymentReport, stop_event: Optional[threading.Event]) -> None:
        for entry in report.results:
            if stop_event is not None and stop_event.is_set():
                report.cancelled = True
                log_section(self._log, "Cancelled", f"stopped before {entry.step.name}")
                return

            started = time.monotonic()
            try:
                entry.result = self.run_step(entry.step)
            except RemoteCallError as exc:
                entry.duration = time.monotonic() - started
                entry.status = StepStatus.FAILED
                entry.error = exc
                logger.error("← %s failed: %s", entry.step.name, exc)
                if exc.stderr:
                    logger.error(exc.stderr.strip())
                return
            entry.duration = time.monotonic() - started
            entry.status = StepStatus.DONE
            logger.info("← %s completed: %s", entry.step.name, _short(entry.result.value))


def _write_streams(log: TextIO, stdout: str, stderr: str) -> None:
    log.write("STDOUT:\n")
    log.write(stdout if stdout else "<empty>\n")
    log.write("STDERR:\n")
    log.write(stderr if stderr else "<empty>\n")
    log.flush()


def _short(value: Any, limit: int = 200) -> str:
    text = value if isinstance(value, str) else json.dumps(value, default=str)
    return text if len(text) <= limit else text[:limit] + "…"
