"""Generation failure taxonomy.

Adapters and the poller raise these internally and fold them into
Result objects at their boundary; nothing here reaches a caller of the
orchestrator.
"""

from __future__ import annotations

import enum


class ErrorKind(str, enum.Enum):
    DISPATCH = "dispatch_error"              # transport / non-2xx status
    RESPONSE_SHAPE = "response_shape"        # missing or malformed field
    MISSING_ARTIFACT = "missing_artifact"    # terminal success, no location
    OPERATION_FAILED = "operation_failed"    # backend says no
    OPERATION_TIMEOUT = "operation_timeout"  # we gave up waiting


class GenerationError(Exception):
    kind: ErrorKind = ErrorKind.DISPATCH


class DispatchError(GenerationError):
    kind = ErrorKind.DISPATCH


class ResponseShapeError(GenerationError):
    kind = ErrorKind.RESPONSE_SHAPE


class MissingArtifactError(ResponseShapeError):
    kind = ErrorKind.MISSING_ARTIFACT


class OperationFailed(GenerationError):
    kind = ErrorKind.OPERATION_FAILED


class OperationTimeout(GenerationError):
    kind = ErrorKind.OPERATION_TIMEOUT
