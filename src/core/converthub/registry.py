"""Format capability registry.

The registry is an immutable, ordered table of converter descriptors. The order
of the table is the selection priority used by the dispatcher when several
converters can satisfy the same input/output pair. Every aggregate view is
derived from the table on demand.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Sequence

from .formats import normalize_input


ConvertFunc = Callable[[str, str, str, str, Mapping[str, Any]], str]


class UnsupportedFormatError(LookupError):
    """Raised when no registered converter accepts an extension."""


@dataclass(frozen=True, slots=True)
class ConverterDescriptor:
    name: str
    inputs: frozenset[str]
    outputs: frozenset[str]
    convert: ConvertFunc = field(compare=False, repr=False)
    max_parallel: int | None = None
    description: str = ""
    is_available: Callable[[], bool] = field(default=lambda: True, compare=False, repr=False)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Converter name must not be empty")
        if not self.inputs or not self.outputs:
            raise ValueError(f"Converter {self.name!r} must declare at least one input and one output")
        if self.max_parallel is not None and self.max_parallel < 1:
            raise ValueError(f"Converter {self.name!r} max_parallel must be positive")


def flatten_formats(groups: Mapping[str, Iterable[str]]) -> frozenset[str]:
    return frozenset(normalize_input(ext) for values in groups.values() for ext in values)


class ConverterRegistry:
    def __init__(self, descriptors: Sequence[ConverterDescriptor]) -> None:
        seen: set[str] = set()
        for descriptor in descriptors:
            if descriptor.name in seen:
                raise ValueError(f"Duplicate converter name: {descriptor.name}")
            seen.add(descriptor.name)
        self._descriptors: tuple[ConverterDescriptor, ...] = tuple(descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    def __contains__(self, name: object) -> bool:
        return any(descriptor.name == name for descriptor in self._descriptors)

    def all_backends(self) -> tuple[ConverterDescriptor, ...]:
        return self._descriptors

    def names(self) -> tuple[str, ...]:
        return tuple(descriptor.name for descriptor in self._descriptors)

    def get(self, name: str) -> ConverterDescriptor | None:
        for descriptor in self._descriptors:
            if descriptor.name == name:
                return descriptor
        return None

    def priority_of(self, name: str) -> int:
        return self.names().index(name)

    def backends_supporting_input(self, extension: str) -> set[str]:
        return {descriptor.name for descriptor in self._descriptors if extension in descriptor.inputs}

    def backends_supporting_pair(self, input_extension: str, output_extension: str) -> set[str]:
        return {
            name
            for name in self.backends_supporting_input(input_extension)
            if output_extension in self.get(name).outputs  # type: ignore[union-attr]
        }

    def supported_inputs(self) -> list[str]:
        return sorted({ext for descriptor in self._descriptors for ext in descriptor.inputs})

    def supported_outputs(self) -> list[str]:
        return sorted({ext for descriptor in self._descriptors for ext in descriptor.outputs})

    def inputs_by_converter(self) -> dict[str, list[str]]:
        return self._inverse(lambda descriptor: descriptor.inputs)

    def outputs_by_converter(self) -> dict[str, list[str]]:
        return self._inverse(lambda descriptor: descriptor.outputs)

    def _inverse(self, selector: Callable[[ConverterDescriptor], frozenset[str]]) -> dict[str, list[str]]:
        mapping: dict[str, list[str]] = {}
        for descriptor in self._descriptors:
            for ext in sorted(selector(descriptor)):
                names = mapping.setdefault(ext, [])
                if descriptor.name not in names:
                    names.append(descriptor.name)
        return mapping

    def possible_targets(self, input_extension: str) -> dict[str, list[str]]:
        return {
            descriptor.name: sorted(descriptor.outputs)
            for descriptor in self._descriptors
            if input_extension in descriptor.inputs
        }

    def capability_matrix(self) -> dict[str, object]:
        return {
            "converters": {
                descriptor.name: {
                    "inputs": sorted(descriptor.inputs),
                    "outputs": sorted(descriptor.outputs),
                }
                for descriptor in self._descriptors
            },
            "supportedInputs": self.supported_inputs(),
            "supportedOutputs": self.supported_outputs(),
            "inputsByConverter": self.inputs_by_converter(),
            "outputsByConverter": self.outputs_by_converter(),
        }

    def targets_for(self, raw_extension: str) -> dict[str, object]:
        targets = self.possible_targets(normalize_input(raw_extension))
        if not targets:
            raise UnsupportedFormatError(f"No converters support the format: {raw_extension}")
        flat = sorted({ext for outputs in targets.values() for ext in outputs})
        return {
            "from": raw_extension,
            "availableTargets": flat,
            "converterTargets": targets,
        }


def order_descriptors(
    descriptors: Sequence[ConverterDescriptor],
    *,
    enabled: Sequence[str] = (),
    priority: Sequence[str] = (),
) -> list[ConverterDescriptor]:
    known = {descriptor.name for descriptor in descriptors}
    unknown = [name for name in (*enabled, *priority) if name not in known]
    if unknown:
        raise ValueError(f"Unknown converters in configuration: {', '.join(sorted(set(unknown)))}")
    selected = [descriptor for descriptor in descriptors if not enabled or descriptor.name in enabled]
    rank = {name: index for index, name in enumerate(priority)}
    return sorted(selected, key=lambda descriptor: rank.get(descriptor.name, len(rank)))


__all__ = [
    "ConvertFunc",
    "ConverterDescriptor",
    "ConverterRegistry",
    "UnsupportedFormatError",
    "flatten_formats",
    "order_descriptors",
]
