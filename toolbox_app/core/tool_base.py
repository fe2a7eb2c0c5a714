from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Type

from pydantic import BaseModel


@dataclass(frozen=True)
class ToolMeta:
    id: str
    name: str
    category: str
    version: str
    description: str


class ToolBase(Protocol):
    """
    Tool contract.

    Tools declare an `InputModel` (Pydantic) so hosts can validate inputs and report
    field errors. run_batch() is headless and returns a JSON-ready dict with an "ok" flag;
    run() is what a host calls and may simply delegate to run_batch(); overrides adjust the
    tool's settings for that call.
    """
    meta: ToolMeta
    InputModel: Optional[Type[BaseModel]]

    def default_inputs(self) -> Dict[str, Any]:
        ...

    def run_batch(self, inputs: Dict[str, Any]) -> Dict[str, Any]:
        ...

    def run(self, inputs: Dict[str, Any], overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        ...
