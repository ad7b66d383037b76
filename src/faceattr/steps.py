"""Processing step registry with per-step timing."""

import time
from dataclasses import dataclass, field
from functools import wraps
from typing import List, Optional


@dataclass
class ProcessingStep:
    """Describes a single step of the attribute pipeline.

    Attributes:
        name: Short identifier for the step (e.g., "render", "preprocess").
        description: Human-readable description of what this step does.
        backend: Library or model used by the step.
        input_type: Description of input data type.
        output_type: Description of output data type.
        depends_on: Names of steps that must run first.
        method_name: Name of the method implementing this step.
    """

    name: str
    description: str
    backend: Optional[str] = None
    input_type: str = "Any"
    output_type: str = "Any"
    depends_on: List[str] = field(default_factory=list)
    method_name: Optional[str] = None

    def __str__(self) -> str:
        backend_str = f" ({self.backend})" if self.backend else ""
        return f"{self.name}: {self.description}{backend_str}"


def processing_step(
    name: str,
    description: str = "",
    backend: Optional[str] = None,
    input_type: str = "Any",
    output_type: str = "Any",
    depends_on: Optional[List[str]] = None,
):
    """Register a method as a pipeline step.

    When the owning object has a ``_step_timings`` dict (not None), the
    elapsed time of each call is stored there in milliseconds under ``name``.

    Example:
        class AttributePipeline:
            @processing_step("preprocess", backend="OpenCV", depends_on=["render"])
            def _preprocess(self, annotated):
                return preprocess(annotated)
    """

    def decorator(func):
        step_info = ProcessingStep(
            name=name,
            description=description or func.__doc__ or "",
            backend=backend,
            input_type=input_type,
            output_type=output_type,
            depends_on=depends_on or [],
            method_name=func.__name__,
        )

        @wraps(func)
        def wrapper(self, *args, **kwargs):
            timings = getattr(self, "_step_timings", None)
            if timings is None:
                return func(self, *args, **kwargs)
            start = time.perf_counter_ns()
            try:
                return func(self, *args, **kwargs)
            finally:
                timings[name] = (time.perf_counter_ns() - start) / 1_000_000

        wrapper._step_info = step_info
        return wrapper

    return decorator


def get_processing_steps(cls_or_instance) -> List[ProcessingStep]:
    """Return the registered steps of a class or instance in dependency order."""
    cls = cls_or_instance if isinstance(cls_or_instance, type) else type(cls_or_instance)
    steps = [
        attr._step_info
        for attr in vars(cls).values()
        if callable(attr) and hasattr(attr, "_step_info")
    ]
    return _topological_sort_steps(steps)


def _topological_sort_steps(steps: List[ProcessingStep]) -> List[ProcessingStep]:
    by_name = {s.name: s for s in steps}
    result = []
    visited = set()
    temp_mark = set()

    def visit(step: ProcessingStep):
        if step.name in temp_mark:
            raise ValueError(f"Circular dependency detected involving {step.name}")
        if step.name in visited:
            return
        temp_mark.add(step.name)
        for dep_name in step.depends_on:
            if dep_name in by_name:
                visit(by_name[dep_name])
        temp_mark.remove(step.name)
        visited.add(step.name)
        result.append(step)

    for step in steps:
        visit(step)

    return result


__all__ = ["ProcessingStep", "processing_step", "get_processing_steps"]
