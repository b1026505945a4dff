"""Decision prompt rendering with Jinja2.

The prompt summarises the agent's view of the ledger: the most recent events,
the known agents and the agent's own last event hash, then asks for the next
event description.

Template variables:

- ``events``         : list[Event]           -- most recent first
- ``agents``         : list[AgentInfo]       -- sorted by public key
- ``last_event_hash``: str | None            -- the agent's previous event
- ``max_chars``      : int                   -- requested description length
"""

from __future__ import annotations

from datetime import UTC
from typing import TYPE_CHECKING

import jinja2

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from bu_agent.ledger.models import AgentInfo, Event

DECISION_TEMPLATE = """\
Current Blockchain Universe state:

Recent events ({{ events | length }}):
{% for event in events -%}
{{ loop.index }}. [{{ event.data.type }}] {{ event.data.description }} - {{ event.data.timestamp }}
{% endfor %}
Known agents ({{ agents | length }}):
{% for agent in agents -%}
- Agent {{ agent.pub_key[:16] }} (last seen: {{ agent.last_seen | rfc3339 }})
{% endfor %}
{%- if last_event_hash %}
My last event hash: {{ last_event_hash }}
{% endif %}
What should be the next event in the Blockchain Universe? \
Provide a brief description (max {{ max_chars }} characters) for the event."""

_env = jinja2.Environment(autoescape=False, keep_trailing_newline=False)  # noqa: S701
_env.filters["rfc3339"] = lambda moment: moment.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
_template = _env.from_string(DECISION_TEMPLATE)


def render_decision_prompt(
    events: Sequence[Event],
    agents: Mapping[str, AgentInfo],
    *,
    last_event_hash: str | None = None,
    max_chars: int = 100,
) -> str:
    """Render the decision prompt from a ledger snapshot."""
    return _template.render(
        events=list(events),
        agents=[agents[key] for key in sorted(agents)],
        last_event_hash=last_event_hash,
        max_chars=max_chars,
    )
