"""JobGraph: static map of background-job invocations for Ruby codebases."""

__version__ = "0.3.0"
