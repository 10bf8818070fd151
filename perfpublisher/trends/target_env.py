"""Graphs of the target environment's hosts during a load test build.

Alongside the per-assertion trend graphs, a build links to graphs of the
servers it put under load: CPU, memory and swap of the application
server pool, its garbage collector, and the MSP (oracle) and MongoDB
hosts.  Metric paths are ``<brand>.<env>.host.<pool>.*...``; the graphed
window is the build's own run time widened by a buffer on each side.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from urllib.parse import quote_plus

from perfpublisher.config import PublisherConfig
from perfpublisher.trends.brand import resolve_brand_environment
from perfpublisher.trends.templates import fill_template
from perfpublisher.trends.url_builder import GRAPHITE_DATE_FORMAT, TrendGraphLink

GRAPH_START_BUFFER_MINUTES = -10
GRAPH_END_BUFFER_MINUTES = 10

_CPU_IDLE = "aggregation-cpu-average.cpu-idle"


def _cpu_target(host: str, mode: str) -> str:
    return (
        f"${{brand}}.${{env}}.host.{host}.*.aggregation-cpu-average.cpu-{{{mode}%2C}}"
        f".value%2Ccolor%28${{brand}}.${{env}}.host.{host}.*.{_CPU_IDLE}"
    )


# (name, target template) in display order.
TARGET_ENV_TARGETS: tuple[tuple[str, str], ...] = (
    ("pool_cpu_user_usage", _cpu_target("${pool}", "user")),
    ("pool_cpu_system_usage", _cpu_target("${pool}", "system")),
    ("pool_cpu_iowait_usage", _cpu_target("${pool}", "wait")),
    ("pool_ram_usage",
     "${brand}.${env}.host.${pool}.*.memory.memory-{used%2C}.value%2Ccolor%28"
     "${brand}.${env}.host.${pool}.*.memory.memory-buffered"),
    ("pool_swap_usage",
     "${brand}.${env}.host.${pool}.*.swap.swap-{used%2C}.value%2Ccolor%28"
     "${brand}.${env}.host.${pool}.*.swap.swap-used"),
    ("gc_mark_sweep_heap_usage",
     "${brand}.${env}.host.${pool}.*.app.GarbageCollectorSentinel."
     "ConcurrentMarkSweep.heapUsagePercentage"),
    ("gc_mark_sweep_collection_time",
     "${brand}.${env}.host.${pool}.*.app.GarbageCollectorSentinel."
     "ConcurrentMarkSweep.collectionTime"),
    ("gc_par_new_collection_time",
     "${brand}.${env}.host.${pool}.*.app.GarbageCollectorSentinel.ParNew.collectionTime"),
    ("gc_par_new_heap_usage",
     "${brand}.${env}.host.${pool}.*.app.GarbageCollectorSentinel.ParNew.heapUsagePercentage"),
    ("msp_cpu_user_usage", _cpu_target("oracle", "user")),
    ("msp_cpu_system_usage", _cpu_target("oracle", "system")),
    ("msp_cpu_wait_usage", _cpu_target("oracle", "wait")),
    ("msp_load_avg", "${brand}.${env}.host.oracle.*.load.load.*term"),
    ("mongodb_cpu_user_usage", _cpu_target("mongodb", "user")),
    ("mongodb_cpu_system_usage", _cpu_target("mongodb", "system")),
    ("mongodb_cpu_wait_usage", _cpu_target("mongodb", "wait")),
    ("mongodb_load_avg", "${brand}.${env}.host.mongodb.*.load.load.*term"),
)

TARGET_ENV_RENDER_OPTIONS = (
    "width=586&height=308&lineMode=connected&from=${fromDateTime}"
    "&until=${untilDateTime}&title=${title}&bgcolor=FFFFFF&fgcolor=000000"
)


@dataclass(frozen=True)
class TargetEnvBuildInfo:
    """The build whose target environment is graphed."""

    brand: str
    environment: str
    pool: str
    build_start: datetime
    build_duration: timedelta = timedelta(0)

    @property
    def graph_start_time(self) -> datetime:
        return self.build_start + timedelta(minutes=GRAPH_START_BUFFER_MINUTES)

    @property
    def graph_end_time(self) -> datetime:
        return (
            self.build_start
            + self.build_duration
            + timedelta(minutes=GRAPH_END_BUFFER_MINUTES)
        )


def pool_short_name(pool: str, server_pools: dict[str, str]) -> str:
    """Map a pool's long name to its short metric name, if one is known."""
    return server_pools.get(pool.lower(), pool)


def fill_target(
    target: str,
    brand: str,
    env: str,
    pool: str,
    server_pools: dict[str, str] | None = None,
) -> str:
    """Fill a target template with brand, environment and pool."""
    return fill_template(target, {
        "brand": brand,
        "env": env,
        "pool": pool_short_name(pool, server_pools or {}),
    })


def build_target_env_links(
    info: TargetEnvBuildInfo,
    config: PublisherConfig | None = None,
) -> list[TrendGraphLink]:
    """Build one graph link per target environment metric.

    Args:
        info: Brand, environment, pool and run time of the build.
        config: Publisher configuration (render root, pool names).

    Returns:
        Links in TARGET_ENV_TARGETS order, named after the metric.
    """
    config = config or PublisherConfig()
    window = {
        "fromDateTime": quote_plus(info.graph_start_time.strftime(GRAPHITE_DATE_FORMAT)),
        "untilDateTime": quote_plus(info.graph_end_time.strftime(GRAPHITE_DATE_FORMAT)),
    }
    links: list[TrendGraphLink] = []
    for name, target in TARGET_ENV_TARGETS:
        filled = fill_target(target, info.brand, info.environment, info.pool, config.server_pools)
        options = fill_template(TARGET_ENV_RENDER_OPTIONS, {**window, "title": name})
        links.append(TrendGraphLink(
            url=f"{config.graphite_url}target={filled}&{options}",
            display_name=name,
        ))
    return links


def target_env_links_for_project(
    project_name: str,
    pool: str,
    build_start: datetime,
    build_duration: timedelta,
    config: PublisherConfig | None = None,
) -> list[TrendGraphLink]:
    """Build target environment links from a build's project name.

    Returns an empty list when the project's brand/environment cannot be
    resolved.
    """
    config = config or PublisherConfig()
    brand_env = resolve_brand_environment(
        project_name, config.brands, config.primary_brand,
    )
    if not brand_env.recognized:
        return []
    info = TargetEnvBuildInfo(
        brand=brand_env.brand,
        environment=brand_env.environment,
        pool=pool,
        build_start=build_start,
        build_duration=build_duration,
    )
    return build_target_env_links(info, config)
