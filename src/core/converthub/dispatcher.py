from __future__ import annotations

import concurrent.futures
import threading
import time
from typing import Any, Mapping

from .formats import normalize_input
from .models import SUCCESS_MARKER, ConversionOutcome, ConversionRequest, Failure, Success
from .registry import ConverterDescriptor, ConverterRegistry


class ConversionError(RuntimeError):
    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code


class ConverterDispatcher:
    """Selects one converter per request and runs it under a deadline.

    Converters that are not re-entrant declare ``max_parallel``; their permits
    are shared by every job using this dispatcher.
    """

    def __init__(self, registry: ConverterRegistry, *, timeout_s: float = 300.0) -> None:
        self._registry = registry
        self._timeout_s = float(timeout_s)
        self._permits: dict[str, threading.BoundedSemaphore] = {
            descriptor.name: threading.BoundedSemaphore(descriptor.max_parallel)
            for descriptor in registry.all_backends()
            if descriptor.max_parallel
        }

    @property
    def registry(self) -> ConverterRegistry:
        return self._registry

    def select(self, input_format: str, output_format: str, requested_backend: str | None = None) -> str:
        input_format = normalize_input(input_format)
        output_format = normalize_input(output_format)
        candidates = self._registry.backends_supporting_pair(input_format, output_format)
        if requested_backend:
            if requested_backend not in self._registry:
                raise ConversionError("UNKNOWN_CONVERTER", f"Unknown converter: {requested_backend}")
            if requested_backend not in candidates:
                raise ConversionError(
                    "CONVERTER_MISMATCH",
                    f"Converter {requested_backend} does not support {input_format} -> {output_format}",
                )
            return requested_backend
        if not candidates:
            raise ConversionError("NO_CONVERTER", f"No converter supports {input_format} -> {output_format}")
        return min(candidates, key=self._registry.priority_of)

    def convert(self, request: ConversionRequest) -> ConversionOutcome:
        input_format = normalize_input(request.input_format)
        output_format = normalize_input(request.output_format)
        try:
            name = self.select(input_format, output_format, request.requested_backend)
            descriptor = self._registry.get(name)
            if descriptor is None:
                raise ConversionError("UNKNOWN_CONVERTER", f"Unknown converter: {name}")
            timeout_s = self._effective_timeout(request.options)
        except ConversionError as exc:
            return Failure(reason=str(exc), code=exc.code)

        options = {**request.options, "timeout_s": timeout_s}
        try:
            value = self._invoke(
                descriptor,
                (request.input_path, input_format, output_format, request.output_path, options),
                timeout_s,
            )
        except ConversionError as exc:
            return Failure(reason=str(exc), code=exc.code, converter=name)
        except Exception as exc:
            return Failure(reason=str(exc) or type(exc).__name__, code="CONVERTER_ERROR", converter=name)

        if value == SUCCESS_MARKER:
            return Success(converter=name)
        return Failure(reason=str(value), code="CONVERTER_FAILED", converter=name)

    def _effective_timeout(self, options: Mapping[str, Any]) -> float:
        candidate = self._timeout_s
        requested = options.get("timeout_s")
        if requested is not None:
            try:
                candidate = min(candidate, float(requested))
            except (TypeError, ValueError) as exc:
                raise ConversionError("INVALID_OPTIONS", f"Invalid timeout_s option: {requested!r}") from exc
        return max(candidate, 0.0)

    def _invoke(self, descriptor: ConverterDescriptor, args: tuple[Any, ...], timeout_s: float) -> Any:
        started = time.monotonic()
        permit = self._permits.get(descriptor.name)
        # Waiting for a permit counts against the same deadline as the call itself.
        if permit is not None and not permit.acquire(timeout=timeout_s):
            raise ConversionError(
                "TIMEOUT", f"Timed out after {timeout_s:g}s waiting for a free {descriptor.name} slot"
            )
        remaining = max(timeout_s - (time.monotonic() - started), 0.0)

        def _call() -> Any:
            try:
                return descriptor.convert(*args)
            finally:
                if permit is not None:
                    permit.release()

        executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=1, thread_name_prefix=f"convert-{descriptor.name}"
        )
        try:
            future = executor.submit(_call)
        except RuntimeError:
            if permit is not None:
                permit.release()
            raise
        try:
            return future.result(timeout=remaining)
        except concurrent.futures.TimeoutError as exc:
            raise ConversionError(
                "TIMEOUT", f"Conversion with {descriptor.name} exceeded {timeout_s:g}s"
            ) from exc
        finally:
            executor.shutdown(wait=False)


__all__ = ["ConversionError", "ConverterDispatcher"]
