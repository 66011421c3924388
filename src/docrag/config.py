"""docrag configuration loader.

Priority (high → low):
  1. CLI flags           (handled at call site — not in this module)
  2. Environment variables  (DOCRAG_API_URL, DOCRAG_EMBEDDING_MODEL, DOCRAG_STORAGE_ROOT)
  3. Per-project docrag.yaml
  4. Global ~/.docrag/config.yaml
  5. Hardcoded defaults

Config files must never contain API keys; the backend key is read from
DOCRAG_API_KEY and provider keys from their usual environment variables.
All YAML reads use yaml.safe_load() — never yaml.load().
"""

from __future__ import annotations

import os
import re
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_GLOBAL_CONFIG_DIR: Path = Path.home() / ".docrag"
_GLOBAL_CONFIG_PATH: Path = _GLOBAL_CONFIG_DIR / "config.yaml"
_PROJECT_CONFIG_NAME: str = "docrag.yaml"

API_KEY_ENV = "DOCRAG_API_KEY"

# Fields that suggest an API key — forbidden in every config file.
# Does NOT match legitimate config keys like max_tokens.
_API_KEY_RE: re.Pattern[str] = re.compile(
    r"api[_\-]?(?:key|secret)"  # api_key, api-key, api_secret, apikey
    r"|_token$"                  # github_token, access_token, auth_token (suffix)
    r"|^token$"                  # exactly "token" (standalone)
    r"|_secret$"                 # my_secret, client_secret (suffix)
    r"|^secret$"                 # exactly "secret" (standalone)
    r"|passw(?:ord|d)"           # password, passwd
    r"|credential",              # credential, credentials
    re.IGNORECASE,
)

# Known top-level sections — unknown keys produce a warning
_KNOWN_SECTIONS: frozenset[str] = frozenset(
    ["api", "embedding", "chunking", "search", "upload", "storage"]
)

_API_MODES: frozenset[str] = frozenset(["backend", "direct"])


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """Raised when a config file contains an invalid or forbidden value."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class ApiCfg:
    """Remote API configuration (docrag.yaml: api:).

    Attributes:
        base_url: Chat backend root URL.
        timeout: Request timeout in seconds.
        mode: 'backend' (HTTP embeddings endpoint) or 'direct' (LiteLLM).
        provider: LiteLLM provider prefix used in direct mode.
    """

    base_url: str = "http://localhost:8000"
    timeout: float = 30.0
    mode: str = "backend"  # backend | direct
    provider: str = "openai"


@dataclass
class EmbeddingCfg:
    """Embedding model configuration (docrag.yaml: embedding:)."""

    model: str = "text-embedding-3-small"
    max_tokens: int = 8000
    batch_size: int = 10


@dataclass
class ChunkingCfg:
    """Chunk sizes in characters (docrag.yaml: chunking:)."""

    chunk_size: int = 300
    overlap: int = 100
    min_chunk_size: int = 100
    max_chunk_size: int = 1200


@dataclass
class SearchCfg:
    """Similarity search defaults (docrag.yaml: search:)."""

    top_k: int = 5
    threshold: float = 0.7
    include_metadata: bool = True


@dataclass
class UploadCfg:
    """Upload limits (docrag.yaml: upload:)."""

    max_file_size: int = 10 * 1024 * 1024


@dataclass
class StorageCfg:
    """Local document store (docrag.yaml: storage:)."""

    root: str = ".docrag"
    namespace: str = "local"


@dataclass
class DocragConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    api: ApiCfg = field(default_factory=ApiCfg)
    embedding: EmbeddingCfg = field(default_factory=EmbeddingCfg)
    chunking: ChunkingCfg = field(default_factory=ChunkingCfg)
    search: SearchCfg = field(default_factory=SearchCfg)
    upload: UploadCfg = field(default_factory=UploadCfg)
    storage: StorageCfg = field(default_factory=StorageCfg)
    api_key: str = ""  # from DOCRAG_API_KEY only


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _check_no_api_keys(data: dict[str, Any], source: Path) -> None:
    """Raise ConfigError if *data* contains any API-key-like key names."""

    def _scan(obj: Any, path: str) -> None:
        if isinstance(obj, dict):
            for k, v in obj.items():
                full = f"{path}.{k}" if path else k
                if _API_KEY_RE.search(str(k)):
                    raise ConfigError(
                        f"Config '{source}' contains a forbidden key '{full}'.\n"
                        f"  API keys must be set via environment variables, not config files.\n"
                        f"  Remove '{full}' from {source.name} and use:\n"
                        f"    export {API_KEY_ENV}=<value>"
                    )
                _scan(v, full)

    _scan(data, "")


def _warn_unknown_keys(data: dict[str, Any], source: Path) -> None:
    """Emit a UserWarning for unrecognised top-level keys."""
    for key in data:
        if key not in _KNOWN_SECTIONS:
            warnings.warn(
                f"Unknown config key '{key}' in '{source}' — ignored.",
                UserWarning,
                stacklevel=4,
            )


def _read_yaml(path: Path) -> dict[str, Any]:
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config '{path}' must be a YAML mapping.")
    return raw


# ---------------------------------------------------------------------------
# Merge + build
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict that is *base* deep-merged with *override*."""
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _cfg_from_dict(data: dict[str, Any]) -> DocragConfig:
    """Build a *DocragConfig* from a merged raw YAML dict."""
    cfg = DocragConfig()

    try:
        if "api" in data:
            a = data["api"]
            cfg.api = ApiCfg(
                base_url=str(a.get("base_url", cfg.api.base_url)),
                timeout=float(a.get("timeout", cfg.api.timeout)),
                mode=str(a.get("mode", cfg.api.mode)),
                provider=str(a.get("provider", cfg.api.provider)),
            )

        if "embedding" in data:
            e = data["embedding"]
            cfg.embedding = EmbeddingCfg(
                model=str(e.get("model", cfg.embedding.model)),
                max_tokens=int(e.get("max_tokens", cfg.embedding.max_tokens)),
                batch_size=int(e.get("batch_size", cfg.embedding.batch_size)),
            )

        if "chunking" in data:
            c = data["chunking"]
            cfg.chunking = ChunkingCfg(
                chunk_size=int(c.get("chunk_size", cfg.chunking.chunk_size)),
                overlap=int(c.get("overlap", cfg.chunking.overlap)),
                min_chunk_size=int(c.get("min_chunk_size", cfg.chunking.min_chunk_size)),
                max_chunk_size=int(c.get("max_chunk_size", cfg.chunking.max_chunk_size)),
            )

        if "search" in data:
            s = data["search"]
            cfg.search = SearchCfg(
                top_k=int(s.get("top_k", cfg.search.top_k)),
                threshold=float(s.get("threshold", cfg.search.threshold)),
                include_metadata=bool(s.get("include_metadata", cfg.search.include_metadata)),
            )

        if "upload" in data:
            u = data["upload"]
            cfg.upload = UploadCfg(
                max_file_size=int(u.get("max_file_size", cfg.upload.max_file_size)),
            )

        if "storage" in data:
            st = data["storage"]
            cfg.storage = StorageCfg(
                root=str(st.get("root", cfg.storage.root)),
                namespace=str(st.get("namespace", cfg.storage.namespace)),
            )
    except (AttributeError, TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid config value: {exc}") from exc

    if cfg.api.mode not in _API_MODES:
        raise ConfigError(
            f"api.mode must be one of {', '.join(sorted(_API_MODES))}, got '{cfg.api.mode}'."
        )

    _check_ranges(cfg)
    return cfg


def _check_ranges(cfg: DocragConfig) -> None:
    """Raise ConfigError for values the pipeline would reject later."""
    c = cfg.chunking
    if c.min_chunk_size < 1:
        raise ConfigError(f"chunking.min_chunk_size must be >= 1, got {c.min_chunk_size}.")
    if not c.min_chunk_size <= c.chunk_size <= c.max_chunk_size:
        raise ConfigError(
            "chunking sizes must satisfy min_chunk_size <= chunk_size <= max_chunk_size, "
            f"got {c.min_chunk_size} / {c.chunk_size} / {c.max_chunk_size}."
        )
    if c.overlap < 0:
        raise ConfigError(f"chunking.overlap must be >= 0, got {c.overlap}.")
    if cfg.embedding.batch_size < 1:
        raise ConfigError(f"embedding.batch_size must be >= 1, got {cfg.embedding.batch_size}.")
    if cfg.search.top_k < 1:
        raise ConfigError(f"search.top_k must be >= 1, got {cfg.search.top_k}.")
    if not -1.0 <= cfg.search.threshold <= 1.0:
        raise ConfigError(f"search.threshold must be in [-1, 1], got {cfg.search.threshold}.")
    if cfg.upload.max_file_size < 1:
        raise ConfigError(f"upload.max_file_size must be >= 1, got {cfg.upload.max_file_size}.")
    ns = cfg.storage.namespace
    if not ns or "/" in ns or ns in (".", ".."):
        raise ConfigError(f"storage.namespace '{ns}' is not a valid folder name.")


def _apply_env_overrides(cfg: DocragConfig) -> DocragConfig:
    """Apply DOCRAG_* environment variable overrides."""
    if url := os.environ.get("DOCRAG_API_URL"):
        cfg.api.base_url = url
    if model := os.environ.get("DOCRAG_EMBEDDING_MODEL"):
        cfg.embedding.model = model
    if root := os.environ.get("DOCRAG_STORAGE_ROOT"):
        cfg.storage.root = root
    cfg.api_key = os.environ.get(API_KEY_ENV, "")
    return cfg


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    project_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> DocragConfig:
    """Load and return a merged *DocragConfig*.

    Applies layers in order: global → per-project → env vars.
    CLI flag overrides must be applied by the caller after this function.

    Args:
        project_dir: Directory to search for *docrag.yaml*. Defaults to CWD.
        global_config_path: Override the global config path (for testing).

    Raises:
        ConfigError: If a config file contains API-key-like fields, is not a
            mapping, or holds a value of the wrong type.
    """
    global_path = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    search_dir = project_dir if project_dir is not None else Path.cwd()

    merged: dict[str, Any] = {}

    # Layer 1: global config
    if global_path.exists():
        raw_global = _read_yaml(global_path)
        _check_no_api_keys(raw_global, global_path)
        _warn_unknown_keys(raw_global, global_path)
        merged = _deep_merge(merged, raw_global)

    # Layer 2: per-project config
    project_cfg_path = search_dir / _PROJECT_CONFIG_NAME
    if project_cfg_path.exists():
        raw_project = _read_yaml(project_cfg_path)
        _check_no_api_keys(raw_project, project_cfg_path)
        _warn_unknown_keys(raw_project, project_cfg_path)
        merged = _deep_merge(merged, raw_project)

    cfg = _cfg_from_dict(merged)

    # Layer 3: env var overrides
    return _apply_env_overrides(cfg)


def ensure_global_config(
    global_config_path: Path | None = None,
) -> Path:
    """Create ``~/.docrag/config.yaml`` with defaults if it does not exist.

    Creates parent directory with mode 0o700 and the config file with
    mode 0o600 (owner-readable only).

    Args:
        global_config_path: Override path (for testing).

    Returns:
        Path to the global config file.
    """
    target = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    target.parent.mkdir(mode=0o700, parents=True, exist_ok=True)

    if not target.exists():
        content = (
            "# docrag global configuration — defaults only.\n"
            "# NEVER store API keys here — use environment variables:\n"
            f"#   export {API_KEY_ENV}=...\n"
            "#   export OPENAI_API_KEY=sk-...   (api.mode: direct)\n"
            "\n"
            "api:\n"
            "  base_url: http://localhost:8000\n"
            "  mode: backend\n"
            "\n"
            "embedding:\n"
            "  model: text-embedding-3-small\n"
            "  batch_size: 10\n"
        )
        target.write_text(content, encoding="utf-8")
        target.chmod(0o600)

    return target
