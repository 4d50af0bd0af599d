"""
WPT manifest reader.

Loads MANIFEST.json and yields the testharness and reftest entries together
with the per-test extras the runner reads.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, ValidationError as PydanticValidationError

from ..core.exceptions import ManifestError
from ..core.logging_config import get_logger


class TestExtras(BaseModel):
    """Per-test manifest extras. Unknown keys are kept but not used."""

    __test__ = False

    model_config = ConfigDict(extra="allow")

    timeout: Optional[Literal["long", "normal"]] = None
    testdriver: bool = False
    jsshell: bool = False


@dataclass(frozen=True)
class TestharnessItem:
    __test__ = False

    url: str
    extras: TestExtras


@dataclass(frozen=True)
class RefTestItem:
    url: str
    references: List[Tuple[str, str]] = field(default_factory=list)
    extras: TestExtras = field(default_factory=TestExtras)


class ManifestReader:
    """Reads the items of a WPT MANIFEST.json."""

    def __init__(self, path: Union[str, Path]):
        """
        Load a manifest.

        Args:
            path: Path to MANIFEST.json

        Raises:
            ManifestError: If the file cannot be read or is not a manifest
        """
        self.path = Path(path)
        self.logger = get_logger(__name__)

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                self.manifest: Dict[str, Any] = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ManifestError(
                f"Failed to read manifest {self.path}: {e}", manifest_path=str(self.path)
            ) from e

        if not isinstance(self.manifest, dict) or not isinstance(
            self.manifest.get("items"), dict
        ):
            raise ManifestError(
                f"Manifest {self.path} has no items", manifest_path=str(self.path)
            )

        self.logger.debug(f"Loaded manifest {self.path}")

    @property
    def items(self) -> Dict[str, Any]:
        return self.manifest["items"]

    def _entries(self, item_type: str) -> Iterator[Tuple[str, list]]:
        for file, tests in self.items.get(item_type, {}).items():
            for entry in tests:
                if not isinstance(entry, list) or not entry:
                    raise ManifestError(
                        f"Malformed {item_type} entry in {file}: {entry!r}",
                        manifest_path=str(self.path),
                    )
                yield file, entry

    def _extras(self, file: str, raw: Any) -> TestExtras:
        try:
            return TestExtras.model_validate(raw or {})
        except PydanticValidationError as e:
            raise ManifestError(
                f"Malformed extras in {file}: {e}", manifest_path=str(self.path)
            ) from e

    def testharness(self) -> Iterator[TestharnessItem]:
        """Yield every testharness test in manifest order."""
        for file, entry in self._entries("testharness"):
            extras = entry[1] if len(entry) > 1 else {}
            yield TestharnessItem(url=entry[0], extras=self._extras(file, extras))

    def reftests(self) -> Iterator[RefTestItem]:
        """Yield every reftest in manifest order."""
        for file, entry in self._entries("reftest"):
            if len(entry) < 2:
                raise ManifestError(
                    f"Reftest entry in {file} has no references: {entry!r}",
                    manifest_path=str(self.path),
                )
            references = [(ref[0], ref[1]) for ref in entry[1]]
            extras = entry[2] if len(entry) > 2 else {}
            yield RefTestItem(
                url=entry[0], references=references, extras=self._extras(file, extras)
            )
