"""Brand and environment resolution from build project names.

Load test projects are named ``<suite>-[<brand>-]<environment>[-<rest>]``,
for example ``Web_Performance_Tests-kappa-apiserver_OAuth2Simulation``
(primary brand, environment ``kappa``) or
``Web_Performance_Tests-tp-lnp-checkout`` (brand ``tp``, environment
``lnp``).  Metrics of the primary brand live under the bare environment
name; every other brand's metrics live under ``<brand>-<environment>``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from perfpublisher.errors import UnrecognizedBrandOrEnvironment

UNRECOGNIZED = "unrecognized"

_ENV_TOKEN_RE = re.compile(r"\w+", re.ASCII)


@dataclass(frozen=True)
class BrandEnvironment:
    """Brand and environment a project's load tests ran against."""

    brand: str
    environment: str
    primary: bool = False

    @property
    def recognized(self) -> bool:
        return self.brand != UNRECOGNIZED

    @property
    def environment_key(self) -> str | None:
        """Environment segment used in metric paths, None if unrecognized."""
        if not self.recognized:
            return None
        if self.primary:
            return self.environment
        return f"{self.brand}-{self.environment}"


UNRECOGNIZED_BRAND_ENVIRONMENT = BrandEnvironment(brand=UNRECOGNIZED, environment="")


def parse_project_name(
    project_name: str | None,
    brands: dict[str, str] | set[str],
    primary_brand: str,
) -> BrandEnvironment:
    """Parse brand and environment out of a project name.

    Args:
        project_name: Build project name.
        brands: Known brand short names (keys are used if a dict).
        primary_brand: Brand assumed when the name carries none.

    Returns:
        The resolved BrandEnvironment.

    Raises:
        UnrecognizedBrandOrEnvironment: If the name does not follow the
            naming convention.
    """
    if not project_name:
        raise UnrecognizedBrandOrEnvironment(project_name)

    known = {b.lower() for b in brands}
    primary = primary_brand.lower()
    tokens = [t.strip() for t in project_name.split("-")]
    if len(tokens) < 2:
        raise UnrecognizedBrandOrEnvironment(project_name)

    brand = primary
    env_index = 1
    if tokens[1].lower() in known and len(tokens) > 2:
        brand = tokens[1].lower()
        env_index = 2

    environment = tokens[env_index]
    if not _ENV_TOKEN_RE.fullmatch(environment):
        raise UnrecognizedBrandOrEnvironment(project_name)

    return BrandEnvironment(
        brand=brand,
        environment=environment,
        primary=(brand == primary),
    )


def resolve_brand_environment(
    project_name: str | None,
    brands: dict[str, str] | set[str],
    primary_brand: str,
) -> BrandEnvironment:
    """Resolve brand and environment, never raising.

    Returns UNRECOGNIZED_BRAND_ENVIRONMENT when the project name cannot
    be parsed.
    """
    try:
        return parse_project_name(project_name, brands, primary_brand)
    except UnrecognizedBrandOrEnvironment:
        return UNRECOGNIZED_BRAND_ENVIRONMENT
