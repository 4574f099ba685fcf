from .mongo import close, connect, enable_profiling

__all__ = ["close", "connect", "enable_profiling"]
