"""CORS policy engine: policy construction, matching and the decision pipeline."""

from corsgate.cors.engine import (
    CorsHost,
    Decision,
    DecisionAction,
    DecisionReason,
    RequestFacts,
    apply,
    evaluate,
)
from corsgate.cors.policy import CorsConfig, PolicyConfig, PolicyResult, build_policy

__all__ = [
    "CorsConfig",
    "CorsHost",
    "Decision",
    "DecisionAction",
    "DecisionReason",
    "PolicyConfig",
    "PolicyResult",
    "RequestFacts",
    "apply",
    "build_policy",
    "evaluate",
]
