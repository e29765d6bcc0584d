class PerfScriptError(RuntimeError):
    """A dump could not be read."""
