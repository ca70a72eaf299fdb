"""Typer CLI entrypoints for emitkit."""

from __future__ import annotations

import json
import sys

import typer

from emitkit.config import (
    ProjectConfigError,
    initialize_project_config,
    load_settings,
    project_config_exists,
    resolve_project_config_root,
)
from emitkit.kernel.runtime import EmitterRuntime
from emitkit.ui.render import render_doctor_panel, render_log_entries, render_notice


app = typer.Typer(
    no_args_is_help=True,
    help="emitkit 事件分发工具 (typed in-process event emitter)",
)


def _missing_config_message() -> str:
    return render_notice(
        "error",
        "缺少项目配置目录：{0}，请先执行 `emitkit init`".format(resolve_project_config_root()),
        "Missing project config directory, run `emitkit init` first",
    )


def _require_project_config() -> None:
    if project_config_exists():
        return
    typer.echo(_missing_config_message(), err=True)
    raise typer.Exit(code=2)


def _normalize_format(output_format: str) -> str:
    normalized = output_format.strip().lower()
    if normalized not in {"json", "text"}:
        typer.echo(
            render_notice(
                "error",
                "不支持的格式：{0}".format(output_format),
                "Unsupported format: {0}".format(output_format),
            ),
            err=True,
        )
        raise typer.Exit(code=2)
    return normalized


def _load_runtime() -> EmitterRuntime:
    _require_project_config()
    try:
        settings = load_settings()
    except ProjectConfigError as exc:
        typer.echo(render_notice("error", str(exc)), err=True)
        raise typer.Exit(code=2)
    return EmitterRuntime(settings)


@app.command("init")
def init_cmd(
    force: bool = typer.Option(
        False,
        "--force",
        help="重建 .emitkit_config（会先删除已有目录） (Recreate config directory)",
    ),
) -> None:
    try:
        config_root = initialize_project_config(force=force)
    except ProjectConfigError as exc:
        typer.echo(render_notice("error", str(exc)), err=True)
        raise typer.Exit(code=2)

    typer.echo(
        render_notice(
            "success",
            "项目配置初始化完成：{0}".format(config_root),
            "Initialized project config at: {0}".format(config_root),
        )
    )


@app.command("doctor")
def doctor_cmd(
    verbose: bool = typer.Option(False, "--verbose", help="显示详细诊断信息 (Show detailed diagnostics)"),
    output_format: str = typer.Option(
        "json",
        "--format",
        help="输出格式：json|text (Output format)",
    ),
) -> None:
    normalized_format = _normalize_format(output_format)
    runtime = _load_runtime()
    try:
        report = runtime.doctor(verbose=verbose)
        if normalized_format == "json":
            typer.echo(json.dumps(report, ensure_ascii=True, indent=2))
        else:
            render_doctor_panel(report, sys.stdout)
    finally:
        runtime.close()
    if report.get("dispatch_probe") != "ok":
        raise typer.Exit(code=1)


@app.command("logs")
def logs_cmd(
    limit: int = typer.Option(20, "--limit", min=1, help="显示最近 N 条记录 (Show last N records)"),
    output_format: str = typer.Option(
        "text",
        "--format",
        help="输出格式：json|text (Output format)",
    ),
) -> None:
    normalized_format = _normalize_format(output_format)
    runtime = _load_runtime()
    try:
        if not runtime.debug_log.enabled:
            typer.echo(
                render_notice("warn", "调试日志已关闭。", "Debug logs are disabled."),
                err=True,
            )
            return
        rows = runtime.debug_log.read_recent(limit)
        if normalized_format == "json":
            typer.echo(json.dumps(rows, ensure_ascii=True, indent=2))
            return
        if not rows:
            typer.echo(render_notice("info", "暂无日志记录。", "No log records yet."))
            return
        render_log_entries(rows, sys.stdout)
    finally:
        runtime.close()


if __name__ == "__main__":
    app()
