"""Build orchestration module.

This module handles:
- Composing live-build commands
- Running them in the build directory
- Sequencing clean, configure and build
- Renaming and relocating the produced image
"""

from hackeros_builder.builds.orchestrator import BuildRunResult, run

__all__ = ["BuildRunResult", "run"]

# Access submodules via hackeros_builder.builds.runner, .artifacts, etc.
