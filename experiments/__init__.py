"""Convenience exports for the experiments package."""

from .experiment import Experiment, RoutingConfiguration, RunResult

__all__ = ["Experiment", "RoutingConfiguration", "RunResult"]
