"""Graphite render URL templates for assertion trend graphs.

A trend graph plots, for one request of one simulation, the asserted
statistic and its threshold over time, the KO percentage on the right
axis, and a vertical marker wherever a release branch was cut.  Each
line is a ``target=`` sub-template; the render options come last.
Placeholders use ``${name}`` syntax and are filled in a single pass by
:func:`fill_template`.
"""

from __future__ import annotations

from dataclasses import dataclass
from string import Template

KO_TARGET = (
    "target=alias(color(secondYAxis(summarize(load.summary.${env}.${simName}."
    "${reqName}.ko.percent,%221day%22,%22max%22))%2C%22red%22)"
    "%2C%22percent%20KOs%22)"
)
PERFORMANCE_STAT_TARGET = (
    "target=alias(summarize(load.summary.${env}.${simName}.${reqName}.all."
    "${assertName},%221day%22,%22${performanceStatSummarizeMethod}%22)"
    "%2C%22${assertDescr}%22)"
)
PERFORMANCE_ASSERT_THRESHOLD_TARGET = (
    "target=alias(summarize(load.summary.${env}.${simName}.${reqName}.all."
    "expected.${assertName},%221day%22,%22${performanceStatSummarizeMethod}"
    "%22)%2C%22performance+assert+threshold%22)"
)
RELEASE_BRANCH_TARGET = (
    "target=alias(color(lineWidth(drawAsInfinite(integral(sfly.releng.branch.*))"
    "%2C1)%2C%22yellow%22)%2C%22Release%20Branch%20Created%22)"
)
RENDER_OPTIONS = (
    "width=586&height=308&lineMode=connected&from=${fromDateTime}"
    "&title=${reqName}+-+${assertDescr}&vtitle=${performanceMetricLabel}"
    "&vtitleRight=Percentage_KOs&bgcolor=FFFFFF&fgcolor=000000&yMaxRight=100"
    "&yMinRight=0&hideLegend=false&uniqueLegend=true"
)


@dataclass(frozen=True)
class TrendURLTemplate:
    """The sub-templates making up one trend graph URL."""

    root_url: str
    ko_target: str = KO_TARGET
    performance_stat_target: str = PERFORMANCE_STAT_TARGET
    threshold_target: str = PERFORMANCE_ASSERT_THRESHOLD_TARGET
    release_marker_target: str = RELEASE_BRANCH_TARGET
    render_options: str = RENDER_OPTIONS

    def parts(self) -> tuple[str, ...]:
        """Return the sub-templates in URL order."""
        return (
            self.ko_target,
            self.performance_stat_target,
            self.threshold_target,
            self.release_marker_target,
            self.render_options,
        )

    def combined(self) -> str:
        """Return the full, still unfilled, URL template."""
        return self.root_url + "&".join(self.parts())


def fill_template(template: str, values: dict[str, str]) -> str:
    """Substitute ``${name}`` placeholders in *template*.

    Placeholders without a value are left as they are.  Values are
    inserted verbatim, so they must already be URL-encoded.
    """
    return Template(template).safe_substitute(values)
