"""Infrastructure layer for the ML API service.

This package contains implementations of domain interfaces
that interact with external systems (XGBoost, file storage, Kubernetes
manifests, HTTP API).
"""
