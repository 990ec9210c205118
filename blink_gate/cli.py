from typing import Optional
import typer
import uvicorn
import yaml

from blink_gate.app.config import load_config
from blink_gate.app.utils import setup_logging
from blink_gate.models import LivenessError, Verdict
from blink_gate.pipeline.frame_source import read_trace, run_session
from blink_gate.pipeline.liveness_pipeline import LivenessSession


app = typer.Typer(name="blink-gate")


def _load(config: str):
    try:
        return load_config(config)
    except LivenessError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)


@app.command()
def api(host: Optional[str] = None, port: Optional[int] = None, config: str = ""):
    """Run the FastAPI liveness service."""
    cfg = _load(config)
    setup_logging(cfg.log_level)
    from blink_gate.api.server import create_app

    uvicorn.run(
        create_app(cfg),
        host=host or cfg.api.host,
        port=port or cfg.api.port,
        reload=False,
    )


@app.command()
def replay(trace: str, interval_ms: Optional[float] = None, config: str = ""):
    """Replay a JSON-Lines landmark trace through a fresh liveness session."""
    cfg = _load(config)
    setup_logging(cfg.log_level)
    session = LivenessSession(cfg)
    step = interval_ms if interval_ms is not None else cfg.frames.interval_ms
    last = None
    try:
        for i, res in enumerate(run_session(session, read_trace(trace, step))):
            typer.echo(
                f"{i:5d}  {res.verdict.value:<9} blinks={res.blink_count} facing={res.is_facing_camera}"
            )
            last = res
    except LivenessError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)
    if last is not None and last.verdict == Verdict.LIVE:
        typer.echo("Live face detected")
        raise typer.Exit(code=0)
    typer.echo("Liveness not confirmed")
    raise typer.Exit(code=1)


@app.command("show-config")
def show_config(config: str = ""):
    """Print the effective configuration."""
    cfg = _load(config)
    typer.echo(yaml.safe_dump(cfg.to_dict(), sort_keys=False))


if __name__ == "__main__":
    app()
