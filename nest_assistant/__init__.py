"""
Nest Assistant - Python package.

This package contains:
- The action schema registry exposed to the model as tools
- Session grounding context for project lists and tasks
- LLM conversation sessions via function-calling
- The action dispatcher and result synthesizer
- The ProjectAssistant orchestrator and FastAPI API
"""

__version__ = "0.1.0"

__all__ = [
    "models",
    "tools",
    "context",
    "llm",
    "dispatcher",
    "synthesizer",
    "orchestrator",
    "project_client",
    "notifications",
    "config",
    "errors",
    "api",
]
