"""stm — project/task consistency and notification core for the task manager client."""

from stm.config import VERSION as __version__

__all__ = ["__version__"]
