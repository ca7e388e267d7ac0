"""
Channel Scout CLI - Command line interface for the sync worker and graph jobs.

Usage:
    scout --help                          Show all commands
    scout enqueue @handle                 Queue a YouTube channel sync
    scout enqueue user -p instagram -i    Queue an initial Instagram scrape
    scout worker                          Run the sync worker (fails jobs left pending)
    scout worker --once                   Run the next pending job and exit
    scout rebuild-graph                   Recompute a tenant's topic graph
    scout suggest                         Run channel discovery for a tenant
"""

import asyncio

import typer

app = typer.Typer(
    name="scout",
    help="Channel Scout CLI - sync worker, topic graph and suggestions",
    no_args_is_help=True,
)


# --- Step printer helpers ---


def _print_step(step_num: int, total: int, message: str) -> None:
    """Print a step progress message."""
    typer.echo(f"\n[{step_num}/{total}] {message}...")


def _print_success(message: str) -> None:
    """Print a success message."""
    typer.echo(f"  ✅ {message}")


def _print_warning(message: str) -> None:
    """Print a warning message."""
    typer.echo(f"  ⚠️ {message}")


def _print_error(message: str) -> None:
    """Print an error message to stderr."""
    typer.echo(f"❌ {message}", err=True)


@app.command()
def enqueue(
    handle: str = typer.Argument(..., help="Channel handle, username or URL"),
    platform: str = typer.Option("youtube", "--platform", "-p", help="youtube or instagram"),
    tenant: str = typer.Option("default", "--tenant", "-t", help="Tenant id"),
    lookback_days: int | None = typer.Option(
        None, "--lookback-days", "-d", help="Only items from the last N days"
    ),
    initial: bool = typer.Option(
        False, "--initial", "-i", help="Initial scrape (rebuilds graph when done)"
    ),
):
    """
    Queue a channel sync job for a worker that is already running.

    Start `scout worker` or `scout serve` first: a worker starting up fails
    jobs it finds pending. Use `scout worker --once` to run a queued job
    without a running worker.
    """
    from scout.core.logging import setup_logging
    from scout.stores.jobs import JobSpec
    from scout.worker.factory import get_services

    setup_logging()

    async def run() -> int:
        spec = JobSpec(
            handle=handle,
            platform=platform,
            tenant_id=tenant,
            lookback_days=lookback_days,
            is_initial_scrape=initial,
        )
        return await get_services().jobs.enqueue(spec)

    job_id = asyncio.run(run())
    _print_success(f"Queued job {job_id} for {platform}:{handle} (tenant {tenant})")


@app.command()
def worker(
    once: bool = typer.Option(False, "--once", help="Run at most one pending job and exit"),
):
    """
    Run the sync worker in the foreground (Ctrl+C to stop).

    Starting the loop fails every job left pending or running, as after a
    crash. --once skips that recovery and runs the oldest pending job.
    """
    from scout.core.logging import setup_logging
    from scout.worker.factory import get_services

    setup_logging()

    async def run() -> None:
        services = get_services()
        sync_worker = services.worker

        if once:
            _print_step(1, 1, "Running next pending job")
            ran = await sync_worker.try_run_next()
            _print_success("Ran one job" if ran else "No pending jobs")
            return

        _print_step(1, 1, "Starting worker")
        await sync_worker.start()
        try:
            await asyncio.Event().wait()
        finally:
            await sync_worker.stop()

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        typer.echo("\nStopped.")


@app.command("rebuild-graph")
def rebuild_graph(
    tenant: str = typer.Option("default", "--tenant", "-t", help="Tenant id"),
):
    """Recompute and store a tenant's topic graph."""
    from scout.core.logging import setup_logging
    from scout.worker.factory import get_services

    setup_logging()
    graph = asyncio.run(get_services().rebuild_graph(tenant))

    _print_success(f"Graph for {tenant}: {len(graph.nodes)} topics, {len(graph.edges)} edges")
    categories = [node.name for node in graph.nodes if node.is_category]
    if categories:
        typer.echo(f"  Categories: {', '.join(categories)}")
    for node in sorted(graph.nodes, key=lambda n: (-n.multiplier, n.name))[:10]:
        typer.echo(f"  {node.name:<30} x{node.multiplier:.2f}  ({node.item_count} items)")


@app.command()
def suggest(
    tenant: str = typer.Option("default", "--tenant", "-t", help="Tenant id"),
):
    """Run one channel discovery pass over a tenant's graph."""
    from scout.core.logging import setup_logging
    from scout.worker.factory import get_services

    setup_logging()
    stats = asyncio.run(get_services().run_suggestions(tenant))
    if stats is None:
        _print_error("Suggestions need OPENAI_API_KEY")
        raise typer.Exit(1)

    _print_success(
        f"Searched {stats.topics_searched} topic(s), stored {stats.stored} suggestion(s)"
    )
    if stats.failures:
        _print_warning(f"{stats.failures} failure(s), see logs")


@app.command("init-db")
def init_db():
    """Create missing tables directly (development only; use migrate in production)."""
    from scout.core.database import create_all

    asyncio.run(create_all())
    _print_success("Tables created")


@app.command()
def migrate():
    """Run database migrations (alembic upgrade head)."""
    import subprocess

    result = subprocess.run(["alembic", "upgrade", "head"], check=False)
    raise typer.Exit(result.returncode)


@app.command()
def serve(
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable hot reload"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to run on"),
):
    """Start the API server (sync worker and schedules run inside it)."""
    import subprocess

    cmd = ["uvicorn", "scout.main:app", "--host", "0.0.0.0", "--port", str(port)]
    if reload:
        cmd.append("--reload")

    subprocess.run(cmd, check=False)


if __name__ == "__main__":
    app()
