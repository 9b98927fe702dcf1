"""Service layer: the command-line entry point built on :class:`AgentClient`."""
