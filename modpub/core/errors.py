"""Error codes for CLI exit status.

These values are used as process exit codes and should remain stable.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for the publish command.

    - 0: Success
    - 1: User error (bad flags, invalid arguments)
    - 2: Environment error (not a mod directory, unreadable version, bad config)
    - 3: Build error (MSBuild or nuget pack failed outside the pipeline)
    - 4: Network error (remote unreachable)
    - 5: I/O error (file not found, permission denied)
    - 6: Publish failed (a pipeline task reported a failure)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5
    PUBLISH_FAILED = 6
