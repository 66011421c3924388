"""docrag init — set up config files and the local document store.

Creates:
  ~/.docrag/config.yaml   — global defaults (created once, mode 0o600)
  docrag.yaml             — per-project overrides (left alone if present)
  <storage.root>/         — local document store
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from docrag.cli.errors import err_config
from docrag.config import ConfigError, ensure_global_config, load_config

console = Console()

_DEFAULT_PROJECT_DIR = Path(".")

_PROJECT_TEMPLATE = """\
# docrag project configuration. Overrides ~/.docrag/config.yaml.
# API keys never go here: export DOCRAG_API_KEY (backend) or the provider key.

chunking:
  chunk_size: 300
  overlap: 100

search:
  top_k: 5
  threshold: 0.7

storage:
  root: .docrag
"""


def init_cmd(
    project_dir: Annotated[
        Path,
        typer.Argument(help="Directory to initialize. Defaults to current directory."),
    ] = _DEFAULT_PROJECT_DIR,
) -> None:
    """Create the global config, a project docrag.yaml and the document store."""
    project_dir = project_dir.resolve()
    project_dir.mkdir(parents=True, exist_ok=True)

    cfg_path = ensure_global_config()
    console.print(f"  [green]✓[/] {cfg_path} (global config)")

    project_cfg = project_dir / "docrag.yaml"
    if project_cfg.exists():
        console.print(f"  [dim]·[/] {project_cfg} already exists, left unchanged")
    else:
        project_cfg.write_text(_PROJECT_TEMPLATE, encoding="utf-8")
        console.print(f"  [green]✓[/] {project_cfg}")

    try:
        cfg = load_config(project_dir)
    except ConfigError as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1) from exc

    # Relative storage roots resolve against the project, not the caller's CWD.
    root = Path(cfg.storage.root)
    if not root.is_absolute():
        root = project_dir / root
    root.mkdir(parents=True, exist_ok=True)
    console.print(f"  [green]✓[/] {root} (document store)")

    console.print("\n[bold green]✓ docrag initialized.[/]")
    console.print("\nNext steps:")
    console.print("  1. docrag ingest <file>...   (embed documents)")
    console.print("  2. docrag search \"<query>\"   (find similar chunks)")
