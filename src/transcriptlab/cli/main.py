from __future__ import annotations

import shutil
from pathlib import Path
from typing import Optional

import typer

from transcriptlab.core.transcript import UploadedFile, detect_delimiter, extract, owned_artifact

app = typer.Typer(help="Transcript Lab: vendor CSV transcript extraction and analysis API")


@app.command("extract")
def extract_cmd(
    input: Path = typer.Argument(..., exists=True, dir_okay=False, help="Conversation export (.csv)"),
    out: Optional[Path] = typer.Option(None, help="Output .txt path (default: <input stem>.txt beside input)"),
) -> None:
    """Flatten a vendor-export CSV into a plain-text conversation."""
    original = UploadedFile(filename=input.name, path=input, content_type="text/csv")
    processed = extract(original)

    if processed is original:
        typer.echo(f"No transcript extracted from {input}", err=True)
        raise typer.Exit(code=1)

    target = out or input.with_name(processed.filename)
    with owned_artifact(original, processed) as artifact:
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(artifact.path, target)
    typer.echo(str(target))


@app.command("detect-delimiter")
def detect_delimiter_cmd(
    input: Path = typer.Argument(..., exists=True, dir_okay=False, help="Delimited text file"),
) -> None:
    """Print the delimiter that best splits the first line of INPUT."""
    with input.open("r", encoding="utf-8-sig", errors="replace") as f:
        first_line = f.readline().rstrip("\r\n")
    d = detect_delimiter(first_line)
    typer.echo("TAB" if d == "\t" else d)


@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, help="Bind host (default: TRANSCRIPTLAB_API_HOST or 0.0.0.0)"),
    port: Optional[int] = typer.Option(None, help="Bind port (default: TRANSCRIPTLAB_API_PORT or 8000)"),
) -> None:
    """Run the HTTP API with uvicorn."""
    from transcriptlab.api.main import run

    run(host=host, port=port)


if __name__ == "__main__":
    app()
