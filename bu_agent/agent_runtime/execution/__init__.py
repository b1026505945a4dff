"""Decision pipeline for the agent runtime.

- **prompt**: Decision prompt rendering (ledger snapshot -> Jinja2 template)
- **loop**: Periodic decision loop (tick -> make_decision, failures skipped)
"""
