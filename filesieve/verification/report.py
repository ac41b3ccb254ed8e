#!/usr/bin/env python3
"""Plain-text rendering of verification reports using Jinja2.

Example:
    >>> print(render_report(result.verification))
    Truth score: 0.9825 (threshold 0.95) PASS
    ...
"""

from typing import Optional

import jinja2

from filesieve.verification.service import VerificationReport

REPORT_TEMPLATE = """\
Truth score: {{ "%.4f"|format(report.truth_score) }} (threshold {{ report.threshold }}) \
{{ "PASS" if report.meets_threshold else "FAIL" }}
Files: {{ summary.total_files }} total, {{ summary.included_files }} included, \
{{ summary.excluded_files }} excluded
Configuration:
  include patterns: {{ configuration.include_patterns }}
  exclude patterns: {{ configuration.exclude_patterns }}
  size filters: {{ "yes" if configuration.has_size_filters else "no" }}
  content type filters: {{ "yes" if configuration.has_content_type_filters else "no" }}
Metrics:
{% for name, value in metrics.items() %}\
  {{ "%-20s"|format(name) }} {{ "%.4f"|format(value) }}
{% endfor %}\
Generated: {{ report.timestamp }}
"""

_environment: Optional[jinja2.Environment] = None


def _get_environment() -> jinja2.Environment:
    global _environment
    if _environment is None:
        _environment = jinja2.Environment(
            undefined=jinja2.StrictUndefined, keep_trailing_newline=True, autoescape=False
        )
    return _environment


def render_report(report: VerificationReport, template: str = REPORT_TEMPLATE) -> str:
    """Render ``report`` as text.

    Args:
        report: Verification report
        template: Jinja2 template source; receives ``report``, ``summary``,
            ``configuration`` and ``metrics`` (a name to value dict)

    Returns:
        Rendered text

    Raises:
        jinja2.TemplateError: If a custom template is invalid
    """
    data = report.to_dict()
    return _get_environment().from_string(template).render(
        report=report,
        summary=report.summary,
        configuration=report.summary.configuration,
        metrics=data["metrics"],
    )
