"""Runtime wiring for config, debug log and the emitter."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from emitkit.config import Settings
from emitkit.kernel.debug_log import DebugLogWriter
from emitkit.kernel.emitter import Emitter
from emitkit.kernel.types import new_id

PROBE_EVENT = "doctor.probe"


class EmitterRuntime:
    """Process-level container that owns one configured emitter."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.runtime_id = new_id("runtime")
        self.debug_log = DebugLogWriter(
            logs_dir=settings.logs_dir,
            enabled=settings.logs_enabled,
            log_format=settings.logs_format,
            max_file_bytes=settings.logs_max_file_bytes,
            max_files=settings.logs_max_files,
            redaction=settings.logs_redaction,
        )
        self.emitter: Emitter[Any, Any] = self.create_emitter()

    def create_emitter(self, emitter_id: Optional[str] = None) -> Emitter[Any, Any]:
        return Emitter(
            copy_payloads=self.settings.copy_payloads,
            debug_log=self.debug_log,
            log_payloads=self.settings.logs_include_payloads,
            emitter_id=emitter_id,
        )

    def log_diagnostic(
        self,
        *,
        level: str,
        kind: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
        event_key: Optional[str] = None,
    ) -> None:
        self.debug_log.write_entry(
            level=level,
            component="runtime",
            kind=kind,
            emitter_id=self.runtime_id,
            event_key=event_key,
            message=message,
            data=data,
        )

    def probe_dispatch(self) -> Dict[str, Any]:
        """Exercise ordering, one-shot removal and payload copying on a scratch emitter."""
        # Scratch emitter stays off the project log; doctor() records one summary instead.
        probe: Emitter[str, Dict[str, Any]] = Emitter(
            copy_payloads=self.settings.copy_payloads,
            emitter_id=new_id("probe"),
        )
        trace: List[str] = []

        def first(payload: Dict[str, Any]) -> None:
            trace.append("on")
            payload["touched"] = True

        def prepended(payload: Dict[str, Any]) -> None:
            trace.append("prepend_on")

        def one_shot(payload: Dict[str, Any]) -> None:
            trace.append("once")

        probe.on(PROBE_EVENT, first)
        probe.prepend_on(PROBE_EVENT, prepended)
        probe.once(PROBE_EVENT, one_shot)

        sample: Dict[str, Any] = {"touched": False}
        probe.emit(PROBE_EVENT, sample, do_copy=True)
        first_pass = list(trace)
        trace.clear()
        probe.emit(PROBE_EVENT, sample, do_copy=True)
        second_pass = list(trace)
        probe.remove_all_listeners()

        ok = (
            first_pass == ["prepend_on", "on", "once"]
            and second_pass == ["prepend_on", "on"]
            and sample["touched"] is False
            and probe.listener_count(PROBE_EVENT) == 0
        )
        return {
            "ok": ok,
            "first_pass": first_pass,
            "second_pass": second_pass,
            "payload_isolated": sample["touched"] is False,
        }

    def doctor(self, verbose: bool = False) -> Dict[str, Any]:
        probe = self.probe_dispatch()
        report: Dict[str, Any] = {
            "project_root": str(self.settings.project_root),
            "config_root": str(self.settings.config_root),
            "config_file": str(self.settings.config_file),
            "copy_payloads": bool(self.settings.copy_payloads),
            "logs_include_payloads": bool(self.settings.logs_include_payloads),
            "dispatch_probe": "ok" if probe["ok"] else "failed",
            "events_registered": len(self.emitter.event_names()),
        }
        self.log_diagnostic(
            level="info" if probe["ok"] else "warn",
            kind="doctor",
            message="dispatch probe {0}".format(report["dispatch_probe"]),
            data=dict(probe),
            event_key=PROBE_EVENT,
        )
        report.update(self.debug_log.status())

        if verbose:
            report["dispatch_probe_trace"] = {
                "first_pass": probe["first_pass"],
                "second_pass": probe["second_pass"],
                "payload_isolated": probe["payload_isolated"],
            }
            report["overrides"] = dict(self.settings.overrides)
        return report

    def close(self) -> None:
        self.emitter.remove_all_listeners()
        self.debug_log.close()
