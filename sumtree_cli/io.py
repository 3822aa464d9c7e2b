"""
CLI File IO

Read leaf files and proof bundles, write proof bundles.

Leaf file format: a JSON array of {"id": str, "value": int} objects.
Proof bundle format: ProofBundle (proof + root) as JSON.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from sumtree.crypto.field import PrimeField
from sumtree.merkle.models import Leaf
from sumtree.schemas.canonical import dumps_canonical
from sumtree.schemas.errors import ErrorCodes, SumTreeError, SumTreeException
from sumtree.schemas.transport import LeafInput, ProofBundle


class SumTreeIOError(SumTreeException):
    """Error reading or writing CLI files."""

    def __init__(self, message: str, path: Path, code: str = ErrorCodes.FILE_ERROR) -> None:
        super().__init__(message=message, code=code, details={"path": str(path)})


_LEAF_ROWS = TypeAdapter(list[LeafInput])


def _read_json_file(path: Path) -> Any:
    if not path.exists():
        raise SumTreeIOError(f"File not found: {path}", path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise SumTreeIOError(f"Invalid JSON in {path}: {e}", path) from e


def load_leaves(path: str | Path, field: PrimeField) -> list[Leaf]:
    """
    Load leaves from a JSON leaf file.

    Raises:
        SumTreeIOError: If the file is missing, not JSON, or rows are invalid
    """
    path = Path(path)
    data = _read_json_file(path)
    try:
        rows = _LEAF_ROWS.validate_python(data)
    except ValidationError as e:
        raise SumTreeIOError(
            f"Invalid leaf file {path}: {e}", path, ErrorCodes.SCHEMA_VALIDATION_ERROR
        ) from e
    try:
        return [row.to_leaf(field) for row in rows]
    except ValueError as e:
        raise SumTreeIOError(
            f"Invalid leaf file {path}: {e}", path, ErrorCodes.SCHEMA_VALIDATION_ERROR
        ) from e


def load_bundle(path: str | Path) -> ProofBundle:
    """
    Load a proof bundle written by `sumtree prove`.

    Raises:
        SumTreeIOError: If the file is missing, not JSON, or not a bundle
    """
    path = Path(path)
    data = _read_json_file(path)
    try:
        return ProofBundle.model_validate(data)
    except ValidationError as e:
        raise SumTreeIOError(
            f"Invalid proof bundle {path}: {e}", path, ErrorCodes.SCHEMA_VALIDATION_ERROR
        ) from e


def dump_bundle(bundle: ProofBundle) -> str:
    """Serialize a bundle to canonical JSON."""
    return dumps_canonical(bundle.to_dict())


def save_bundle(bundle: ProofBundle, path: str | Path) -> Path:
    """Write a bundle to `path`, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_bundle(bundle), encoding="utf-8")
    return path


def print_error(error: Exception, output_json: bool) -> None:
    """
    Report a command failure.

    With JSON output the error is printed to stdout as a SumTreeError;
    otherwise a one-line message goes to stderr.
    """
    if not output_json:
        print(f"Error: {error}", file=sys.stderr)
        return

    if isinstance(error, SumTreeException):
        model = error.to_error_model()
    else:
        model = SumTreeError(code=ErrorCodes.SCHEMA_VALIDATION_ERROR, message=str(error))
    print(json.dumps(model.model_dump(), indent=2))
