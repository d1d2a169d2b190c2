"""End-to-end tooling for the Stackdriver-backed Kubernetes Custom Metrics API adapter."""

__version__ = "0.1.0"
