"""Process exit codes.

The CLI maps every failure of a release run onto one of these codes so that
CI pipelines can tell a bad invocation from a GitHub outage.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for ``ghrel`` commands.

    Values are part of the CLI contract and must stay stable:
    - 0: Success (including a skipped pre-release)
    - 1: User error (missing tag, unmapped file extension, missing asset file)
    - 2: Environment error (gh missing, not authenticated, bad config file)
    - 3: Conflict (release exists and the run was told to fail)
    - 4: Network error (a GitHub API call failed)
    - 5: I/O error (local file could not be read)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    CONFLICT = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
