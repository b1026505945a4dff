"""Agent runtime: configuration, LLM client, decision loop and HTTP API."""
