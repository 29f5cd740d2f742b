"""kubesh - open a root shell on a Kubernetes node."""

__version__ = "0.1.0"
