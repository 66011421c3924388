"""docrag rich error messages — actionable feedback.

Every error shown to the user must contain:
  1. What went wrong (clear cause)
  2. The exact action the user should take to fix it

Usage:
    from docrag.cli.errors import err_api_unreachable
    console.print(err_api_unreachable(url, exc))
    raise typer.Exit(1)
"""

from __future__ import annotations


def err_no_api_key(provider: str) -> str:
    """No API key for *provider* in direct mode."""
    env_var = f"{provider.upper()}_API_KEY"
    return (
        f"[red]Error:[/] No API key for '{provider}'.\n"
        f"  Set:  export {env_var}=sk-...\n"
        "  Or switch to the backend:  api.mode: backend"
    )


def err_api_unreachable(base_url: str, detail: str) -> str:
    """The backend could not be reached at all."""
    return (
        f"[red]Error:[/] Cannot reach backend at '{base_url}': {detail}\n"
        "  Check that the backend is running, or set:  export DOCRAG_API_URL=http://host:port"
    )


def err_api_failed(status: int | None, message: str) -> str:
    """The backend answered with an error."""
    status_txt = f"HTTP {status}" if status is not None else "API error"
    hint = "  Check DOCRAG_API_KEY." if status in (401, 403) else "  Retry the command; the run was not saved."
    return f"[red]Error:[/] {status_txt}: {message}\n{hint}"


def err_unsupported_file(path: str, reason: str) -> str:
    """File rejected by upload validation."""
    return (
        f"[red]Error:[/] {reason}: '{path}'\n"
        "  Convert it to .txt .md .csv .json .pdf .doc or .docx within upload.max_file_size."
    )


def err_extraction_failed(path: str, message: str) -> str:
    return (
        f"[red]Error:[/] Could not read '{path}': {message}\n"
        "  Convert the file to .txt or .docx and ingest it again."
    )


def err_empty_document(path: str) -> str:
    return (
        f"[yellow]Skipped:[/] '{path}' has no usable text after cleaning.\n"
        "  Check that the file is not empty or image-only."
    )


def err_dimension_mismatch(model: str) -> str:
    """Stored embeddings were made with a different model than the query."""
    return (
        "[red]Error:[/] Embedding model mismatch between query and stored documents.\n"
        f"  Current model:  {model}\n"
        "  Re-ingest your documents or set embedding.model to the model they were built with."
    )


def err_no_documents() -> str:
    return (
        "[yellow]No documents with embeddings found.[/]\n"
        "  Run:  docrag ingest PATH"
    )


def err_document_not_found(document_id: str) -> str:
    return (
        f"[yellow]Document not found:[/] '{document_id}'.\n"
        "  Run:  docrag status  to see all stored documents."
    )


def err_config(message: str) -> str:
    return f"[red]Config error:[/] {message}"
