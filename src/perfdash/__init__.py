"""Read-only dashboard for kube-burner style performance results."""

__version__ = "0.1.0"
