"""Agent endpoints: the registry of known agents and this agent's stats."""

from __future__ import annotations

from fastapi import APIRouter

from bu_agent.agent_runtime.deps import Agent, Store
from bu_agent.agent_runtime.routers.schemas import AgentStats
from bu_agent.ledger.models import AgentInfo

router = APIRouter(tags=["agents"])


@router.get("/agents/list", response_model=list[AgentInfo])
async def list_agents(store: Store) -> list[AgentInfo]:
    """List every agent seen on the ledger, most recently active first."""
    agents = store.get_agents().values()
    return sorted(agents, key=lambda info: info.last_seen, reverse=True)


@router.get("/agent/stats", response_model=AgentStats)
async def agent_stats(agent: Agent) -> dict:
    return agent.stats()
