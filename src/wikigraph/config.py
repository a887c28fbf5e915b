"""Configuration: frozen Config resolved from arguments and environment."""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from urllib.parse import urlsplit

from dotenv import load_dotenv

from wikigraph.errors import ConfigurationError
from wikigraph.graph import DEFAULT_MAX_DEPTH
from wikigraph.retry import RetryPolicy

load_dotenv()

DEFAULT_API_URL = "https://en.wikipedia.org/w/api.php"

_API_URL_ENV_VAR = "WIKIGRAPH_API_URL"
_USER_AGENT_ENV_VAR = "WIKIGRAPH_USER_AGENT"


def _default_user_agent() -> str:
    from wikigraph import __version__

    return f"wikigraph/{__version__} (https://pypi.org/project/wikigraph/)"


@dataclass(frozen=True)
class Config:
    """Immutable configuration for the MediaWiki client and the CLI.

    Unset endpoint fields are auto-resolved from the environment.

    Example:
        config = Config(api_url="https://fr.wikipedia.org/w/api.php")
    """

    #: Auto-resolved from ``WIKIGRAPH_API_URL`` when *None*.
    api_url: str | None = None
    #: Auto-resolved from ``WIKIGRAPH_USER_AGENT`` when *None*.
    user_agent: str | None = None
    timeout_s: float = 10.0
    #: Upper bound on HTTP requests in flight at once.
    request_concurrency: int = 8
    max_depth: int = DEFAULT_MAX_DEPTH
    retry: RetryPolicy = field(default_factory=RetryPolicy)

    def __post_init__(self) -> None:
        """Auto-resolve endpoint settings and validate configuration."""
        if self.api_url is None:
            object.__setattr__(
                self, "api_url", os.environ.get(_API_URL_ENV_VAR) or DEFAULT_API_URL
            )
        if self.user_agent is None:
            object.__setattr__(
                self,
                "user_agent",
                os.environ.get(_USER_AGENT_ENV_VAR) or _default_user_agent(),
            )

        parts = urlsplit(self.api_url or "")
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ConfigurationError(
                f"api_url must be an http(s) URL, got {self.api_url!r}",
                hint=f"Set {_API_URL_ENV_VAR} or pass api_url='https://<host>/w/api.php'.",
            )
        if not (self.user_agent or "").strip():
            raise ConfigurationError(
                "user_agent must not be empty",
                hint="Wikimedia APIs reject anonymous clients; describe your tool and a contact.",
            )
        if self.timeout_s <= 0:
            raise ConfigurationError(
                f"timeout_s must be > 0, got {self.timeout_s}",
                hint="This is the per-request HTTP timeout in seconds.",
            )
        if self.request_concurrency < 1:
            raise ConfigurationError(
                f"request_concurrency must be ≥ 1, got {self.request_concurrency}",
                hint="This controls how many API requests run in parallel.",
            )
        if self.max_depth < 0:
            raise ConfigurationError(
                f"max_depth must be ≥ 0, got {self.max_depth}",
                hint="This bounds how many hops a search explores.",
            )

    def __str__(self) -> str:
        """Return a compact, developer-friendly representation."""
        return (
            f"Config(api_url={self.api_url!r}, timeout_s={self.timeout_s}, "
            f"request_concurrency={self.request_concurrency}, max_depth={self.max_depth})"
        )

    __repr__ = __str__
