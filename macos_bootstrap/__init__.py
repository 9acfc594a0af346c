"""macOS developer-workstation bootstrap (Python-first, state-driven).

Core design goals:
- State-driven and resumable
- Idempotent steps
- Explicit per-step error policy (fatal vs warn-and-continue)
- Declarative package and preference manifests
- Centralized logging
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
