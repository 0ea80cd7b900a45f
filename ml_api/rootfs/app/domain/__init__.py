"""Domain layer for the ML API service.

This package contains the core logic for training, prediction and
deployment configuration, following Domain-Driven Design (DDD) principles.

The domain layer is pure Python with no external dependencies on
Flask, XGBoost, Kubernetes or any infrastructure concerns.
"""
