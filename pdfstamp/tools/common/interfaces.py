"""Core interfaces and context objects shared by pdfstamp tools."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ...core.config import Settings
from ...core.model import Template
from ...core.validator import parse_template


@dataclass
class PipelineContext:
    """Holds shared execution state for a tool invocation."""

    template: Template | None = None
    inputs: list[dict[str, str]] | None = None
    document: bytes | None = None
    settings: Settings = field(default_factory=Settings)
    resources: dict[str, Any] = field(default_factory=dict)
    config: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.template is not None and not isinstance(self.template, Template):
            self.template = parse_template(self.template)

    def ensure_template(self) -> Template:
        if self.template is None:
            raise ValueError("PipelineContext requires a template")
        return self.template

    def ensure_inputs(self) -> list[dict[str, str]]:
        if self.inputs is None:
            raise ValueError("PipelineContext requires resolved inputs")
        return self.inputs

    def ensure_document(self) -> bytes:
        if self.document is None:
            raise ValueError("PipelineContext requires document bytes")
        return self.document

    def with_updates(
        self,
        *,
        inputs: list[dict[str, str]] | None = None,
        document: bytes | None = None,
        config: dict[str, Any] | None = None,
    ) -> "PipelineContext":
        data = PipelineContext(
            template=self.template,
            inputs=inputs if inputs is not None else self.inputs,
            document=document if document is not None else self.document,
            settings=self.settings,
            resources=dict(self.resources),
            config=dict(self.config),
        )
        if config:
            data.config.update(config)
        return data


class BaseTool:
    """Base class for all pluggable pdfstamp tools."""

    name: str

    def __init__(self, context: PipelineContext) -> None:
        self.context = context

    def run(self) -> Any:  # pragma: no cover - to be implemented by subclasses
        raise NotImplementedError

    async def arun(self) -> Any:
        """Awaitable entry point; synchronous tools simply delegate to :meth:`run`."""

        return self.run()

