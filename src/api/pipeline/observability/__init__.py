"""Observability for the tenant isolation pipeline."""

from pipeline.observability.pipeline_probe import (
    DefaultPipelineProbe,
    PipelineProbe,
)

__all__ = ["DefaultPipelineProbe", "PipelineProbe"]
