from .routes import bp as profiler_blueprint

__all__ = ["profiler_blueprint"]
