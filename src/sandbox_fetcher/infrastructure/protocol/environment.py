"""
Environment wire protocol.

The agent hands the fetcher its whole configuration through environment
variables. Descriptors travel in ``MESOS_EXECUTOR_URIS`` as
space-separated tokens, one per descriptor, in order::

    token        := value "+" exec_bit extract_flag
    exec_bit     := "0" | "1"
    extract_flag := "N" | "X"

The value may itself contain ``+``; the flags are always the two
characters after the last one.
"""

from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional

from sandbox_fetcher.domain.value_objects import FetchRequest, ResourceDescriptor
from sandbox_fetcher.errors import ConfigurationError

URIS_KEY = "MESOS_EXECUTOR_URIS"
WORK_DIRECTORY_KEY = "MESOS_WORK_DIRECTORY"
USER_KEY = "MESOS_USER"
FRAMEWORKS_HOME_KEY = "MESOS_FRAMEWORKS_HOME"
HADOOP_HOME_KEY = "HADOOP_HOME"

PROTOCOL_KEYS = (
    URIS_KEY,
    WORK_DIRECTORY_KEY,
    USER_KEY,
    FRAMEWORKS_HOME_KEY,
    HADOOP_HOME_KEY,
)

TOKEN_SEPARATOR = " "
FLAG_SEPARATOR = "+"

_EXEC_BITS = {"0": False, "1": True}
_EXTRACT_FLAGS = {"N": False, "X": True}


def encode_token(descriptor: ResourceDescriptor) -> str:
    """Encode one descriptor as ``<value>+<execBit><extractLetter>``."""
    value = descriptor.value
    if not value or any(ch.isspace() for ch in value):
        raise ConfigurationError(
            "Resource value cannot be encoded",
            detail="values must be non-empty and contain no whitespace",
            uri=value,
        )
    exec_bit = "1" if descriptor.executable else "0"
    extract_flag = "X" if descriptor.should_extract else "N"
    return f"{value}{FLAG_SEPARATOR}{exec_bit}{extract_flag}"


def decode_token(token: str) -> ResourceDescriptor:
    """
    Decode one token back into a descriptor.

    Raises:
        ConfigurationError: If the token does not follow the grammar
    """
    value, separator, flags = token.rpartition(FLAG_SEPARATOR)
    if not separator or not value:
        raise ConfigurationError(
            "Malformed resource token",
            detail="expected '<value>+<execBit><extractLetter>'",
            token=token,
        )
    if len(flags) != 2 or flags[0] not in _EXEC_BITS or flags[1] not in _EXTRACT_FLAGS:
        raise ConfigurationError(
            "Malformed resource flags",
            detail=f"flags '{flags}' must be one of [01] followed by one of [NX]",
            token=token,
        )
    return ResourceDescriptor(
        value=value,
        executable=_EXEC_BITS[flags[0]],
        extract=_EXTRACT_FLAGS[flags[1]],
    )


def encode_environment(
    descriptors: Iterable[ResourceDescriptor],
    work_directory,
    user: Optional[str] = None,
    frameworks_home: Optional[str] = None,
    hadoop_home: Optional[str] = None,
) -> Dict[str, str]:
    """
    Build the fetcher environment for a list of descriptors.

    ``MESOS_USER`` is emitted whenever a user is supplied. The home
    directories are only emitted when non-empty.
    """
    environment = {
        URIS_KEY: TOKEN_SEPARATOR.join(encode_token(d) for d in descriptors),
        WORK_DIRECTORY_KEY: str(work_directory),
    }
    if user is not None:
        environment[USER_KEY] = user
    if frameworks_home:
        environment[FRAMEWORKS_HOME_KEY] = frameworks_home
    if hadoop_home:
        environment[HADOOP_HOME_KEY] = hadoop_home
    return environment


def encode_request(request: FetchRequest) -> Dict[str, str]:
    return encode_environment(
        request.descriptors,
        request.work_directory,
        user=request.user,
        frameworks_home=request.frameworks_home,
        hadoop_home=request.hadoop_home,
    )


def decode_environment(environ: Mapping[str, str]) -> FetchRequest:
    """
    Decode a fetcher environment into a FetchRequest.

    Raises:
        ConfigurationError: On missing required keys or malformed tokens
    """
    for key in (URIS_KEY, WORK_DIRECTORY_KEY):
        if key not in environ:
            raise ConfigurationError(
                "Missing required environment variable",
                detail=f"{key} is not set",
                key=key,
            )

    work_directory = environ[WORK_DIRECTORY_KEY]
    if not work_directory:
        raise ConfigurationError(
            "Work directory is empty",
            detail=f"{WORK_DIRECTORY_KEY} must name a directory",
            key=WORK_DIRECTORY_KEY,
        )

    descriptors = tuple(decode_token(token) for token in environ[URIS_KEY].split())

    return FetchRequest(
        descriptors=descriptors,
        work_directory=Path(work_directory),
        user=environ.get(USER_KEY) or None,
        frameworks_home=environ.get(FRAMEWORKS_HOME_KEY) or None,
        hadoop_home=environ.get(HADOOP_HOME_KEY) or None,
    )
