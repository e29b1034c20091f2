"""
novelctx.core.config -- Configuration for the context engine.

Supports loading from YAML and programmatic construction.  The config
describes one novel directory, the overall token budget and how it is
shared between categories; it builds the matching ``Budget``,
``ContentStore`` and ``ContextAssembler``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict

import yaml

from novelctx.budget.allocator import Budget
from novelctx.budget.weights import CategoryWeights
from novelctx.core.errors import ConfigurationError

if TYPE_CHECKING:
    import logging

    from novelctx.assembly.assembler import ContextAssembler
    from novelctx.content.store import ContentStore


@dataclass
class Config:
    """
    Central configuration object.

    Construct directly, via ``Config.from_yaml(path)``, or via
    ``Config.from_data_dir(path)`` for quick bootstrap.
    """

    # -- storage ------------------------------------------------------------
    data_dir: Path = field(default_factory=lambda: Path("./novel"))

    # -- total budget -------------------------------------------------------
    token_budget: int = 128_000

    # -- context budget shares (must sum to 1.0 with extra_shares) ----------
    plan_share: float = 0.15
    character_share: float = 0.10
    worldview_share: float = 0.10
    chapters_share: float = 0.60
    index_share: float = 0.05
    extra_shares: Dict[str, float] = field(default_factory=dict)

    # -- runtime ------------------------------------------------------------
    assemble_workers: int = 1  # >1 fetches categories on a thread pool
    lock_timeout: float = 5.0  # seconds to wait for a write lock

    # -- logging ------------------------------------------------------------
    structured_logging: bool = False  # emit JSON log lines when True
    log_level: str = "INFO"

    # -----------------------------------------------------------------------
    # Derived paths (all relative to data_dir)
    # -----------------------------------------------------------------------

    @property
    def worldview_path(self) -> Path:
        return self.data_dir / "worldview.md"

    @property
    def character_path(self) -> Path:
        return self.data_dir / "character.md"

    @property
    def planner_path(self) -> Path:
        return self.data_dir / "planner.json"

    @property
    def index_path(self) -> Path:
        return self.data_dir / "index.json"

    @property
    def title_path(self) -> Path:
        return self.data_dir / "title"

    def chapter_path(self, number: int) -> Path:
        return self.data_dir / f"chapter_{number}.json"

    # -----------------------------------------------------------------------
    # Construction helpers
    # -----------------------------------------------------------------------

    def __post_init__(self) -> None:
        # normalise data_dir to an absolute Path
        self.data_dir = Path(self.data_dir).resolve()

        if (
            isinstance(self.token_budget, bool)
            or not isinstance(self.token_budget, int)
            or self.token_budget <= 0
        ):
            raise ConfigurationError(
                f"token_budget must be a positive integer, got {self.token_budget!r}"
            )
        if self.assemble_workers < 1:
            raise ConfigurationError(
                f"assemble_workers must be >= 1, got {self.assemble_workers!r}"
            )
        if self.lock_timeout <= 0:
            raise ConfigurationError(f"lock_timeout must be > 0, got {self.lock_timeout!r}")

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """Load configuration from a YAML file.

        Any key in the YAML that matches a Config field is applied.
        Unknown keys are silently ignored so the file can carry
        application-level settings alongside novelctx config.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")

        # pull the novelctx section if nested, else use top-level
        data = raw.get("novelctx", raw)
        if not isinstance(data, dict):
            raise ConfigurationError(f"'novelctx' section in {path} must be a mapping")

        if "data_dir" in data:
            data["data_dir"] = Path(data["data_dir"])

        # filter to known fields only
        known = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in known}

        return cls(**filtered)

    @classmethod
    def from_data_dir(cls, data_dir: str | Path, **overrides: Any) -> "Config":
        """Quick constructor -- just point at a novel directory."""
        return cls(data_dir=Path(data_dir), **overrides)

    def ensure_directories(self) -> None:
        """Create the novel directory if it doesn't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

    # -----------------------------------------------------------------------
    # Builders
    # -----------------------------------------------------------------------

    def weights(self) -> CategoryWeights:
        """Category weights from the share fields, extras last."""
        pairs = [
            ("plan", self.plan_share),
            ("character", self.character_share),
            ("worldview", self.worldview_share),
            ("chapters", self.chapters_share),
            ("index", self.index_share),
        ]
        pairs.extend(self.extra_shares.items())
        return CategoryWeights(pairs)

    def budget(self) -> Budget:
        return Budget(self.token_budget, self.weights())

    def build_store(self) -> "ContentStore":
        from novelctx.content.store import ContentStore

        return ContentStore.for_directory(self.data_dir, lock_timeout=self.lock_timeout)

    def build_assembler(self, store: "ContentStore | None" = None) -> "ContextAssembler":
        from novelctx.assembly.assembler import ContextAssembler

        return ContextAssembler(
            store if store is not None else self.build_store(),
            max_workers=self.assemble_workers,
        )

    def configure_logging(self) -> "logging.Logger":
        from novelctx.core.logging import configure_logging

        return configure_logging(structured=self.structured_logging, level=self.log_level)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data_dir": str(self.data_dir),
            "token_budget": self.token_budget,
            "plan_share": self.plan_share,
            "character_share": self.character_share,
            "worldview_share": self.worldview_share,
            "chapters_share": self.chapters_share,
            "index_share": self.index_share,
            "extra_shares": dict(self.extra_shares),
            "assemble_workers": self.assemble_workers,
            "lock_timeout": self.lock_timeout,
            "structured_logging": self.structured_logging,
            "log_level": self.log_level,
        }
