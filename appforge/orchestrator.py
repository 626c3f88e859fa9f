"""appforge task orchestrator.

Drives the five-stage generation pipeline of a project:

Stage 1: Master Orchestrator    -- plan the run from the configuration.
Stage 2: Code Generation Agent  -- framework generator + code quality pass.
Stage 3: Security Guardian      -- static scan of the generated files.
Stage 4: Quality Engineer       -- verify lint, format and test artefacts.
Stage 5: Deployment Specialist  -- collect the deployment descriptors.

Stages run strictly one after another.  Every state transition is written
to the task store and broadcast on the notification bus.  Each stage's work
runs through the error recovery manager (retry with backoff inside a
deadline); a stage that still fails marks the project and every unfinished
task as ``error``.

Usage::

    python -m appforge.orchestrator --platform web --framework react --features api
    python -m appforge.orchestrator --platform mobile --framework flutter --estimate-only
"""

from __future__ import annotations

import asyncio
import functools
import re
import sys
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

from appforge.config import Config, QualityConfig
from appforge.cost import estimate_cost
from appforge.generators import GeneratorRegistry, default_registry
from appforge.models import (
    Configuration,
    ConfigurationError,
    FileKind,
    GenerationResult,
    GenerationState,
    Project,
    ProjectStatus,
    Task,
    TaskStatus,
)
from appforge.notifications import (
    ConsoleObserver,
    LogUpdate,
    NotificationBus,
    ProgressUpdate,
    TaskCompleted,
    TaskError,
)
from appforge.quality import CodeQualityEnhancer, quality_scripts
from appforge.recovery import ErrorRecoveryManager, RecoveryError
from appforge.store import JsonTaskStore, MemoryTaskStore, TaskStore
from appforge.utils import (
    console,
    format_duration,
    print_banner,
    print_debug,
    print_error,
    print_stage_header,
    print_success,
    print_summary_table,
    print_warning,
    timestamp,
    write_generated_files,
)

SleepFn = Callable[[float], Awaitable[Any]]

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class StageError(Exception):
    """Raised when a pipeline stage fails irrecoverably."""

    def __init__(self, stage: str, cause: BaseException | str) -> None:
        self.stage = stage
        self.cause = cause
        super().__init__(f"{stage}: {cause}")


# ---------------------------------------------------------------------------
# Stage roster
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Checkpoint:
    """One paced progress step reported after a stage's work succeeded."""

    progress: int
    message: str
    delay_ms: int


@dataclass(frozen=True)
class Stage:
    name: str
    work: str
    checkpoints: tuple[Checkpoint, ...]


STAGES: tuple[Stage, ...] = (
    Stage(
        "Master Orchestrator",
        "plan_project",
        (
            Checkpoint(25, "Analyzing project requirements...", 600),
            Checkpoint(50, "Setting up project structure...", 400),
            Checkpoint(75, "Initializing framework configuration...", 500),
            Checkpoint(100, "Project orchestration complete", 300),
        ),
    ),
    Stage(
        "Code Generation Agent",
        "generate_code",
        (
            Checkpoint(20, "Generating core application files...", 800),
            Checkpoint(40, "Creating component structure...", 700),
            Checkpoint(60, "Implementing feature modules...", 900),
            Checkpoint(80, "Configuring build system...", 600),
            Checkpoint(100, "Code generation complete", 400),
        ),
    ),
    Stage(
        "Security Guardian",
        "review_security",
        (
            Checkpoint(30, "Scanning for security vulnerabilities...", 700),
            Checkpoint(60, "Applying security best practices...", 800),
            Checkpoint(100, "Security audit complete", 500),
        ),
    ),
    Stage(
        "Quality Engineer",
        "check_quality",
        (
            Checkpoint(25, "Setting up testing framework...", 600),
            Checkpoint(50, "Generating test cases...", 700),
            Checkpoint(75, "Running quality checks...", 800),
            Checkpoint(100, "Quality assurance complete", 400),
        ),
    ),
    Stage(
        "Deployment Specialist",
        "prepare_deployment",
        (
            Checkpoint(40, "Configuring deployment pipeline...", 800),
            Checkpoint(80, "Setting up hosting configuration...", 700),
            Checkpoint(100, "Deployment configuration complete", 500),
        ),
    ),
)

STAGES_BY_NAME: dict[str, Stage] = {stage.name: stage for stage in STAGES}


# ---------------------------------------------------------------------------
# Security scan
# ---------------------------------------------------------------------------

SECURITY_RULES: tuple[tuple[str, str, re.Pattern[str]], ...] = (
    (
        "hardcoded-secret",
        "Hard-coded credential",
        re.compile(
            r"(?i)(secret|password|api[_-]?key|access[_-]?token|private[_-]?key)"
            r"\s*[:=]\s*['\"][^'\"\s]{8,}['\"]"
        ),
    ),
    ("eval", "Use of eval()", re.compile(r"\beval\s*\(")),
    (
        "inner-html",
        "innerHTML assigned from an interpolated template",
        re.compile(r"\.innerHTML\s*=\s*`[^`]*\$\{"),
    ),
    (
        "context-isolation",
        "Electron context isolation disabled",
        re.compile(r"contextIsolation\s*:\s*false"),
    ),
    (
        "node-integration",
        "Node integration enabled in a renderer",
        re.compile(r"nodeIntegration\s*:\s*true"),
    ),
    ("csp-disabled", "Content security policy disabled", re.compile(r"\"csp\"\s*:\s*null")),
)


def scan_generated_files(result: GenerationResult) -> list[dict[str, Any]]:
    """Return one finding per rule match across the result's files.

    Each finding is ``{"path", "line", "rule", "description"}``.
    """
    findings: list[dict[str, Any]] = []
    for generated in result.files:
        if generated.kind != FileKind.FILE:
            continue
        for rule, description, pattern in SECURITY_RULES:
            for match in pattern.finditer(generated.content):
                findings.append(
                    {
                        "path": generated.path,
                        "line": generated.content.count("\n", 0, match.start()) + 1,
                        "rule": rule,
                        "description": description,
                    }
                )
    return findings


def missing_quality_artifacts(
    result: GenerationResult, framework: str, quality: QualityConfig, strict: bool
) -> list[str]:
    """List the quality files and manifest scripts absent from *result*."""
    paths = set(result.paths)
    expected: list[str] = []

    if framework == "flutter":
        if quality.enable_lint or strict:
            expected.append("analysis_options.yaml")
        if quality.enable_testing:
            expected.append("test/widget_test.dart")
        return [p for p in expected if p not in paths]

    if quality.enable_lint:
        expected.append(".eslintrc.json")
    if quality.enable_format:
        expected += [".prettierrc.json", ".prettierignore"]
    if quality.enable_testing:
        expected.append("jest.config.js" if framework == "react-native" else "vitest.config.ts")
    missing = [p for p in expected if p not in paths]

    if "package.json" in paths:
        scripts = result.manifest.get("scripts") or {}
        missing += [
            f"script:{name}"
            for name in quality_scripts(quality, framework, strict)
            if name not in scripts
        ]
    return missing


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


@dataclass
class _Run:
    """State owned by one generation or recovery run of a project."""

    project_id: str
    configuration: Configuration
    recovery: ErrorRecoveryManager
    tasks: dict[str, str] = field(default_factory=dict)
    result: Optional[GenerationResult] = None
    closed: set[str] = field(default_factory=set)


class Orchestrator:
    """Sequences the stage roster for projects and reports their progress.

    Args:
        store: Durable record of projects and tasks.
        bus: Receives every progress, log, completion and error event.
        config: Retry, timeout, pacing and quality settings.
        registry: Generator dispatch table.  Defaults to the built-in seven.
        enhancer: Quality pass applied to generator output.
        sleep: Awaitable used for checkpoint pacing and retry backoff.
    """

    def __init__(
        self,
        store: TaskStore,
        bus: NotificationBus,
        config: Config | None = None,
        registry: GeneratorRegistry | None = None,
        enhancer: CodeQualityEnhancer | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self.store = store
        self.bus = bus
        self.config = config or Config()
        self.registry = registry or default_registry()
        self.enhancer = enhancer or CodeQualityEnhancer(self.config.quality)
        self._sleep = sleep
        self._background: set[asyncio.Task[Project]] = set()

    # ------------------------------------------------------------------
    # Creation and queries
    # ------------------------------------------------------------------

    async def create_generation(self, configuration: Configuration) -> tuple[Project, list[Task]]:
        """Create the project record and one ``queued`` task per stage.

        Raises:
            ConfigurationError: Before anything is stored, if no generator
                accepts the configuration.
        """
        self.registry.resolve(configuration)

        estimate = estimate_cost(
            configuration.platform, configuration.framework, configuration.features
        )
        project = await self.store.create_project(
            Project(
                id=str(uuid.uuid4()),
                configuration=configuration,
                status=ProjectStatus.GENERATING,
                estimated_cost=estimate.estimated_cost,
                monthly_hosting_cost=estimate.monthly_hosting_cost,
            )
        )

        tasks = []
        for stage in STAGES:
            tasks.append(
                await self.store.create_task(
                    Task(
                        id=str(uuid.uuid4()),
                        project_id=project.id,
                        stage_name=stage.name,
                        message=f"Initializing {stage.name}...",
                    )
                )
            )
        print_debug("orchestrator", f"Created project {project.id} with {len(tasks)} task(s)")
        return project, tasks

    async def list_tasks(self, project_id: str) -> list[Task]:
        return await self.store.list_tasks(project_id)

    async def overall_progress(self, project_id: str) -> float:
        """Arithmetic mean of the stage progress values, 0 without tasks."""
        tasks = await self.store.list_tasks(project_id)
        if not tasks:
            return 0.0
        return sum(t.progress for t in tasks) / len(tasks)

    async def get_result(self, project_id: str) -> Optional[GenerationResult]:
        return (await self.store.get_project(project_id)).result

    # ------------------------------------------------------------------
    # Running
    # ------------------------------------------------------------------

    async def generate(self, configuration: Configuration) -> Project:
        """Create a project for *configuration* and run it to a terminal status."""
        project, _ = await self.create_generation(configuration)
        return await self.run(project.id)

    def start_generation(self, project_id: str) -> asyncio.Task[Project]:
        """Schedule :meth:`run` on the running loop and return its task."""
        task = asyncio.ensure_future(self.run(project_id))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return task

    async def run(self, project_id: str) -> Project:
        """Drive every stage of *project_id* in order.

        Returns:
            The project record in its terminal status.  Stage failures are
            recorded on the project and its tasks, not raised.
        """
        project = await self.store.get_project(project_id)
        run = await self._new_run(project)
        started = time.monotonic()

        for index, stage in enumerate(STAGES, start=1):
            task_id = run.tasks[stage.name]
            print_stage_header(index, stage.name)
            try:
                await self._execute_stage(run, stage, task_id, retried=True)
            except Exception as exc:
                return await self._fail(run, task_id, StageError(stage.name, exc))

        project = await self._finish(run)
        print_success(
            f"Generated {project.name} in {format_duration(time.monotonic() - started)}"
        )
        return project

    async def recover_project(self, project_id: str, from_stage: str | None = None) -> Project:
        """Re-run the unfinished stages of a project through partial recovery.

        Every stage from *from_stage* onwards (by default the first stage
        that did not complete) is reopened as ``queued`` and executed again,
        one recovery step per stage.  Earlier completed stages are kept.

        Raises:
            RecoveryError: If the project is still generating, or if there is
                nothing to recover.
            KeyError: For an unknown *from_stage*.
        """
        project = await self.store.get_project(project_id)
        if project.status not in (ProjectStatus.ERROR, ProjectStatus.COMPLETED):
            raise RecoveryError(f"Project {project_id} is {project.status.value}, not recoverable")

        tasks = {t.stage_name: t for t in await self.store.list_tasks(project_id)}
        names = [stage.name for stage in STAGES]
        if from_stage is None:
            pending = [n for n in names if tasks[n].status != TaskStatus.COMPLETED]
            if not pending:
                raise RecoveryError(f"Project {project_id} has no failed stages to recover")
            from_stage = pending[0]
        start = names.index(STAGES_BY_NAME[from_stage].name)
        remaining = names[start:]
        last_successful = names[start - 1] if start > 0 else ""

        project = await self.store.update_project(project_id, status=ProjectStatus.GENERATING)
        run = await self._new_run(project)
        for name in remaining:
            await self.store.update_task(
                run.tasks[name],
                status=TaskStatus.QUEUED,
                progress=0,
                message=f"Queued for recovery from {from_stage}",
                metadata=None,
            )

        async def run_step(step: str) -> None:
            await self._execute_stage(run, STAGES_BY_NAME[step], run.tasks[step], retried=False)

        def report(progress: float, message: str) -> None:
            print_debug("recovery", f"{project.name} {progress:.0f}%: {message}")

        try:
            await run.recovery.partial_recovery(
                project_id,
                last_successful,
                remaining,
                run_step,
                on_progress=report,
                project_id=project_id,
            )
        except RecoveryError as exc:
            step = getattr(exc, "step", remaining[0])
            return await self._fail(run, run.tasks[step], StageError(step, exc))

        return await self._finish(run)

    # ------------------------------------------------------------------
    # Stage execution
    # ------------------------------------------------------------------

    async def _new_run(self, project: Project) -> _Run:
        run = _Run(
            project_id=project.id,
            configuration=project.configuration,
            recovery=ErrorRecoveryManager(self.config.retry, self.config.recovery, self._sleep),
            result=project.result,
        )
        run.tasks = {t.stage_name: t.id for t in await self.store.list_tasks(project.id)}
        missing = [s.name for s in STAGES if s.name not in run.tasks]
        if missing:
            raise RecoveryError(f"Project {project.id} has no task for: {', '.join(missing)}")
        return run

    async def _execute_stage(self, run: _Run, stage: Stage, task_id: str, retried: bool) -> None:
        run.closed.discard(task_id)
        await self.store.update_task(
            task_id,
            status=TaskStatus.RUNNING,
            progress=0,
            message=f"{stage.name} is processing...",
        )
        await self.bus.broadcast(ProgressUpdate.of(task_id, 0, f"{stage.name} started"))

        await run.recovery.save_generation_state(
            task_id,
            GenerationState(
                project_id=run.project_id,
                step=stage.name,
                data={"configuration": run.configuration.model_dump(mode="json")},
                files_generated=run.result.paths if run.result else [],
                logs=[f"Starting stage: {stage.name}"],
            ),
        )

        work = functools.partial(getattr(self, f"_{stage.work}"), run, task_id)
        if retried:
            unit = functools.partial(
                run.recovery.retry_generation,
                task_id,
                work,
                functools.partial(self._relay, run, task_id),
            )
        else:
            unit = work
        metadata = await run.recovery.handle_timeout(
            task_id, self.config.recovery.stage_timeout, unit
        )

        scale = self.config.pacing.delay_scale
        for checkpoint in stage.checkpoints:
            delay = checkpoint.delay_ms * scale / 1000
            if delay > 0:
                await self._sleep(delay)
            await self.store.update_task(
                task_id, progress=checkpoint.progress, message=checkpoint.message
            )
            await self.bus.broadcast(
                ProgressUpdate.of(task_id, checkpoint.progress, checkpoint.message)
            )
            if checkpoint.progress % 50 == 0:
                await self._log(run, task_id, checkpoint.message)

        run.closed.add(task_id)
        await self.store.update_task(
            task_id,
            status=TaskStatus.COMPLETED,
            progress=100,
            message=f"{stage.name} completed successfully",
            metadata=metadata,
        )
        await self.bus.broadcast(TaskCompleted.of(task_id, metadata))

    async def _relay(self, run: _Run, task_id: str, progress: float, message: str) -> None:
        # Retry progress is reported as log lines so task progress never goes back.
        await self._log(run, task_id, message)

    async def _log(self, run: _Run, task_id: str, message: str) -> None:
        if task_id in run.closed:
            return
        line = f"[{timestamp()}] {message}"
        await self.store.append_log(task_id, line)
        await self.bus.broadcast(LogUpdate.of(task_id, line))

    async def _fail(self, run: _Run, task_id: str, error: StageError) -> Project:
        """Close the failing task and every unfinished task, then the project."""
        print_error(f"Stage {error}")
        message = f"Generation failed: {error}"
        run.closed.add(task_id)
        await self.store.update_task(task_id, status=TaskStatus.ERROR, message=message)
        await self.bus.broadcast(TaskError.of(task_id, message))

        for task in await self.store.list_tasks(run.project_id):
            if task.status.is_terminal:
                continue
            run.closed.add(task.id)
            reason = f"Generation failed: upstream stage {error.stage} failed"
            await self.store.update_task(task.id, status=TaskStatus.ERROR, message=reason)
            await self.bus.broadcast(TaskError.of(task.id, reason))

        project = await self.store.update_project(run.project_id, status=ProjectStatus.ERROR)
        self._clear(run)
        return project

    async def _finish(self, run: _Run) -> Project:
        project = await self.store.update_project(run.project_id, status=ProjectStatus.COMPLETED)
        self._clear(run)
        return project

    def _clear(self, run: _Run) -> None:
        for task_id in run.tasks.values():
            run.recovery.clear_task_states(task_id)
        run.recovery.clear_task_states(run.project_id)

    def _require_result(self, run: _Run) -> GenerationResult:
        if run.result is None:
            raise ValueError("No generated code available; run the Code Generation Agent first")
        return run.result

    # ------------------------------------------------------------------
    # Stage work
    # ------------------------------------------------------------------

    async def _plan_project(self, run: _Run, task_id: str) -> dict[str, Any]:
        configuration = run.configuration
        project = await self.store.get_project(run.project_id)
        await self._log(
            run,
            task_id,
            f"Planned {len(STAGES)} stages for {configuration.framework} "
            f"on {configuration.platform.value}",
        )
        return {
            "platform": configuration.platform.value,
            "framework": configuration.framework,
            "features": list(configuration.features),
            "stages": [stage.name for stage in STAGES],
            "estimatedCost": project.estimated_cost,
            "monthlyHostingCost": project.monthly_hosting_cost,
        }

    def _build(self, configuration: Configuration) -> GenerationResult:
        result = self.registry.generate(configuration)
        return self.enhancer.enhance(result, configuration.framework, configuration.features)

    async def _generate_code(self, run: _Run, task_id: str) -> dict[str, Any]:
        configuration = run.configuration
        result = await asyncio.to_thread(self._build, configuration)
        if task_id in run.closed:
            return {}

        run.result = result
        await self.store.update_project(run.project_id, result=result)
        await self._log(
            run, task_id, f"Generated {len(result.files)} files for {configuration.framework}"
        )
        return {
            "filesGenerated": len(result.files),
            "framework": configuration.framework,
            "features": list(configuration.features),
        }

    async def _review_security(self, run: _Run, task_id: str) -> dict[str, Any]:
        result = self._require_result(run)
        findings = scan_generated_files(result)
        for finding in findings:
            await self._log(
                run,
                task_id,
                f"{finding['path']}:{finding['line']}: {finding['description']}",
            )
        if findings:
            print_warning(f"Security scan found {len(findings)} issue(s)")
        else:
            await self._log(run, task_id, f"No issues found in {len(result.files)} files")
        return {"filesScanned": len(result.files), "findings": findings}

    async def _check_quality(self, run: _Run, task_id: str) -> dict[str, Any]:
        result = self._require_result(run)
        configuration = run.configuration
        quality = self.config.quality
        strict = configuration.has_feature(quality.strict_feature)
        missing = missing_quality_artifacts(result, configuration.framework, quality, strict)
        if missing:
            raise ValueError(f"Missing quality artefacts: {', '.join(missing)}")

        scripts = sorted((result.manifest.get("scripts") or {}).keys())
        await self._log(run, task_id, f"Quality tooling verified ({len(scripts)} scripts)")
        return {
            "lint": quality.enable_lint,
            "format": quality.enable_format,
            "testing": quality.enable_testing,
            "strict": strict,
            "scripts": scripts,
        }

    async def _prepare_deployment(self, run: _Run, task_id: str) -> dict[str, Any]:
        result = self._require_result(run)
        targets = sorted((result.deployment_descriptors or {}).keys())
        if not targets:
            raise ValueError("No deployment descriptors were generated")
        await self._log(run, task_id, f"Prepared deployment targets: {', '.join(targets)}")
        return {"targets": targets}


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


async def _cli(args: Any, config: Config, configuration: Configuration) -> Project:
    store: TaskStore
    if args.write:
        store = JsonTaskStore(config.state_path)
        await store.load()
        settings = config.save()
        print_success(f"Saved settings to {settings}")
    else:
        store = MemoryTaskStore()

    observer = ConsoleObserver()
    bus = NotificationBus()
    bus.connect(observer)
    orchestrator = Orchestrator(store, bus, config)

    project, tasks = await orchestrator.create_generation(configuration)
    observer.labels.update({t.id: t.stage_name for t in tasks})

    project = await orchestrator.run(project.id)
    if project.status == ProjectStatus.COMPLETED and args.write and project.result:
        target = config.output_dir / configuration.slug
        written = await write_generated_files(project.result, target)
        print_success(f"Wrote {len(written)} files to {target}")

    print_summary_table(
        {
            "Project": project.name,
            "Framework": f"{project.framework} ({project.platform.value})",
            "Status": project.status.value,
            "Files": str(len(project.result.files)) if project.result else "0",
            "Overall progress": f"{await orchestrator.overall_progress(project.id):.0f}%",
        },
        title="Generation Summary",
    )
    return project


def main() -> None:
    """CLI entry point for ``python -m appforge.orchestrator``."""
    import argparse

    parser = argparse.ArgumentParser(
        description="appforge -- generate a project scaffold for a platform and framework",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python -m appforge.orchestrator --platform web --framework react\n"
            "  python -m appforge.orchestrator --platform mobile --framework flutter "
            "--features database,analytics --estimate-only\n"
            "  python -m appforge.orchestrator --platform desktop --framework tauri "
            "--name 'Notes' --write -o ./out\n"
            "  python -m appforge.orchestrator --platform web --framework svelte "
            "--config ./out/config.json --write\n"
        ),
    )
    parser.add_argument("--platform", required=True, help="web, mobile or desktop")
    parser.add_argument("--framework", required=True, help="Framework for the platform")
    parser.add_argument(
        "--features",
        default="",
        help="Comma-separated features (e.g. authentication,api,typescript)",
    )
    parser.add_argument("--name", default="My App", help="Project name (default: My App)")
    parser.add_argument("--description", default="", help="Project description")
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Output directory (default: $APPFORGE_OUTPUT_DIR or ./output)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Settings file written by an earlier --write run (default: from environment)",
    )
    parser.add_argument(
        "--estimate-only",
        action="store_true",
        help="Print the cost estimate and exit",
    )
    parser.add_argument(
        "--no-delay",
        action="store_true",
        help="Disable checkpoint pacing and retry backoff delays",
    )
    parser.add_argument(
        "--write",
        action="store_true",
        help="Write the generated files, task state and settings under the output directory",
    )

    args = parser.parse_args()

    try:
        configuration = Configuration.from_values(
            args.platform,
            args.framework,
            args.features.split(","),
            name=args.name,
            description=args.description,
        )
    except ConfigurationError as exc:
        console.print(f"[bold red]Error:[/bold red] {exc}")
        sys.exit(2)

    if args.estimate_only:
        estimate = estimate_cost(
            configuration.platform, configuration.framework, configuration.features
        )
        print_summary_table(
            {
                "Platform": configuration.platform.value,
                "Framework": configuration.framework,
                "Features": ", ".join(configuration.features) or "(none)",
                "Estimated cost": f"${estimate.estimated_cost / 100:,.2f}",
                "Monthly hosting": f"${estimate.monthly_hosting_cost / 100:,.2f}",
            },
            title="Cost Estimate",
        )
        return

    config = Config.load(Path(args.config)) if args.config else Config.from_env()
    if args.output:
        config.output_dir = Path(args.output)
    if args.no_delay:
        config.pacing.delay_scale = 0
        config.retry.base_delay = 0

    print_banner(
        "appforge",
        [
            f"Project   : {configuration.name}",
            f"Platform  : {configuration.platform.value}",
            f"Framework : {configuration.framework}",
            f"Features  : {', '.join(configuration.features) or '(none)'}",
        ],
    )

    project = asyncio.run(_cli(args, config, configuration))
    if project.status == ProjectStatus.COMPLETED:
        console.print("[bold green]Generation completed successfully![/bold green]")
    else:
        console.print("[bold red]Generation failed.[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
