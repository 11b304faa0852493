from typing import Any, Callable

import sentry_sdk

from .config import Config

# Probes and the session hook's per-refresh account lookup.
UNSAMPLED_PATHS = ("/health", "/api/accounts/provider/")


def traces_sampler(sample_rate: float) -> Callable[[Any], float]:
    def sample(ctx: Any) -> float:
        path = ctx.get("asgi_scope", {}).get("path")
        if path is not None and path.startswith(UNSAMPLED_PATHS):
            return 0.0
        return sample_rate

    return sample


def setup_tracing(config: Config) -> None:
    if config.sentry_dsn is None or config.sentry_environment is None:
        return
    sentry_sdk.init(
        dsn=config.sentry_dsn,
        environment=config.sentry_environment,
        profiles_sample_rate=config.sentry_traces_sample_rate,
        traces_sampler=traces_sampler(config.sentry_traces_sample_rate),
    )
