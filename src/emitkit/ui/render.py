"""Presentation helpers for emitkit CLI output."""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Optional, TextIO

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text


def bilingual_text(zh: str, en: Optional[str] = None) -> str:
    if not en:
        return zh
    return "{0} ({1})".format(zh, en)


def render_notice(level: str, zh: str, en: Optional[str] = None) -> str:
    prefix_map = {
        "info": bilingual_text("提示", "Info"),
        "warn": bilingual_text("警告", "Warning"),
        "error": bilingual_text("错误", "Error"),
        "success": bilingual_text("成功", "Success"),
    }
    prefix = prefix_map.get(level, bilingual_text("提示", "Info"))
    return "{0}: {1}".format(prefix, bilingual_text(zh, en))


def _is_tty(stream: TextIO, forced: Optional[bool]) -> bool:
    if forced is not None:
        return forced
    isatty = getattr(stream, "isatty", None)
    if callable(isatty):
        try:
            return bool(isatty())
        except ValueError:
            return False
    return False


def _doctor_lines(report: Dict[str, Any]) -> Iterable[str]:
    yield "project_root={0}".format(report.get("project_root", ""))
    yield "config_file={0}".format(report.get("config_file", ""))
    yield ""
    yield bilingual_text("分发自检", "Dispatch Self-check")
    yield "dispatch_probe={0}".format(report.get("dispatch_probe", ""))
    yield "copy_payloads={0} events_registered={1}".format(
        bool(report.get("copy_payloads")),
        int(report.get("events_registered") or 0),
    )
    trace = report.get("dispatch_probe_trace")
    if isinstance(trace, dict):
        yield "first_pass={0}".format(",".join(trace.get("first_pass") or []))
        yield "second_pass={0}".format(",".join(trace.get("second_pass") or []))
        yield "payload_isolated={0}".format(bool(trace.get("payload_isolated")))
    yield ""
    yield bilingual_text("调试日志", "Debug Logs")
    yield "logs_enabled={0} format={1} redaction={2}".format(
        bool(report.get("logs_enabled")),
        report.get("logs_format", ""),
        report.get("logs_redaction", ""),
    )
    yield "logs_active_file={0}".format(report.get("logs_active_file", ""))
    yield "logs_active_size_bytes={0} logs_total_size_bytes={1}".format(
        int(report.get("logs_active_size_bytes") or 0),
        int(report.get("logs_total_size_bytes") or 0),
    )
    yield "logs_rotated_files={0} logs_write_errors={1}".format(
        len(report.get("logs_rotated_files") or []),
        int(report.get("logs_write_errors") or 0),
    )


def render_doctor_text(report: Dict[str, Any]) -> str:
    lines = [bilingual_text("系统诊断", "Doctor Report")]
    lines.extend(_doctor_lines(report))
    return "\n".join(lines)


def render_doctor_panel(report: Dict[str, Any], stream: TextIO, is_tty: Optional[bool] = None) -> None:
    if not _is_tty(stream, is_tty):
        stream.write(render_doctor_text(report) + "\n")
        stream.flush()
        return

    ok = report.get("dispatch_probe") == "ok"
    console = Console(file=stream, highlight=False, soft_wrap=True)
    console.print(
        Panel(
            Text("\n".join(_doctor_lines(report))),
            title=bilingual_text("系统诊断", "Doctor Report"),
            border_style="green" if ok else "red",
            box=box.ROUNDED,
        )
    )


def _log_line(row: Dict[str, Any]) -> str:
    return "{0} {1} {2} event={3} {4} {5}".format(
        row.get("ts_ms", ""),
        str(row.get("level", "")).upper(),
        row.get("kind", ""),
        row.get("event_key", "") or "-",
        row.get("message", ""),
        json.dumps(row.get("data") or {}, ensure_ascii=True, sort_keys=True, default=str),
    )


def render_log_entries(rows: List[Dict[str, Any]], stream: TextIO, is_tty: Optional[bool] = None) -> None:
    if not _is_tty(stream, is_tty):
        for row in rows:
            stream.write(_log_line(row) + "\n")
        stream.flush()
        return

    table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
    table.add_column("ts_ms", style="dim")
    table.add_column("level")
    table.add_column("kind", style="cyan")
    table.add_column("event")
    table.add_column("message")
    for row in rows:
        level = str(row.get("level", ""))
        table.add_row(
            Text(str(row.get("ts_ms", ""))),
            Text(level, style="red" if level == "error" else ""),
            Text(str(row.get("kind", ""))),
            Text(str(row.get("event_key", "") or "-")),
            Text(str(row.get("message", ""))),
        )
    console = Console(file=stream, highlight=False, soft_wrap=True)
    console.print(table)
