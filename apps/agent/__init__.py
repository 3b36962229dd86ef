from .agent import AgentBuilder, ProfilingAgent

__all__ = ["AgentBuilder", "ProfilingAgent"]
