"""Starting, stopping and inspecting the benchmark's Docker container."""

from __future__ import annotations

import logging
import os
import subprocess
import time
from collections.abc import Iterable
from dataclasses import dataclass, field

log = logging.getLogger(__name__)

RETRIES = 10
RETRY_DELAY = 6.0
CONTAINER_NAME = "crud-bench"


@dataclass(frozen=True)
class DockerParams:
    """Container image and default arguments for a datastore."""

    image: str
    pre_args: str
    post_args: str


@dataclass
class Arguments:
    """An ordered list of command-line arguments."""

    items: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.items = list(self.items)

    def add(self, args: Iterable[str]) -> None:
        """Append each argument as given."""
        self.items.extend(str(a) for a in args)

    def append(self, args: str) -> None:
        """Split a space-separated string and append its non-empty parts."""
        self.add(a for a in args.split(" ") if a)

    def __iter__(self):
        return iter(self.items)

    def __str__(self) -> str:
        return " ".join(self.items)


class DockerError(Exception):
    """A docker command failed."""


class Container:
    """A running benchmark container; stops it when leaving a ``with`` block."""

    def __init__(self, image: str) -> None:
        self.image = image

    def __enter__(self) -> Container:
        return self

    def __exit__(self, *exc_info) -> None:
        try:
            self.stop()
        except DockerError as exc:
            log.debug("Failed to stop container: %s", exc)

    @classmethod
    def start(cls, image: str, pre: str, post: str, privileged: bool) -> Container:
        """Start the container, retrying before giving up."""
        log.info("Starting Docker image '%s'", image)
        for attempt in range(1, RETRIES + 1):
            args = Arguments(["run"])
            args.append(pre)
            extra_pre = os.environ.get("DOCKER_PRE_ARGS")
            if extra_pre is not None:
                args.append(extra_pre)
            if privileged:
                args.add(["--privileged"])
            args.add(["--rm"])
            args.add(["--quiet"])
            args.add(["--pull", "always"])
            args.add(["--name", CONTAINER_NAME])
            args.add(["--net", "host"])
            args.add(["-d", image])
            args.append(post)
            extra_post = os.environ.get("DOCKER_POST_ARGS")
            if extra_post is not None:
                args.append(extra_post)
            try:
                cls.execute(args)
            except DockerError as exc:
                if attempt == RETRIES:
                    log.error("Docker command failure: `docker %s`", args)
                    log.error("%s", exc)
                    raise DockerError(
                        f"Docker command failure: `docker {args}`: {exc}"
                    ) from exc
                log.debug("Docker command failure: `docker %s`", args)
                log.debug("%s", exc)
                time.sleep(RETRY_DELAY)
            else:
                break
        return cls(image)

    @staticmethod
    def stop() -> str:
        """Stop the benchmark container."""
        log.info("Stopping Docker container '%s'", CONTAINER_NAME)
        return Container.execute(
            Arguments(["container", "stop", "--time", "300", CONTAINER_NAME])
        )

    @staticmethod
    def logs() -> str:
        """Return the benchmark container's logs."""
        log.info("Logging Docker container '%s'", CONTAINER_NAME)
        return Container.execute(Arguments(["container", "logs", CONTAINER_NAME]))

    @staticmethod
    def execute(args: Iterable[str]) -> str:
        """Run ``docker`` with the arguments and return its trimmed output."""
        args = args if isinstance(args, Arguments) else Arguments(list(args))
        print(f"Running command: `docker {args}`")
        output = subprocess.run(["docker", *args], capture_output=True, check=False)
        if output.returncode != 0:
            raise DockerError(output.stderr.decode("utf-8").strip())
        return output.stdout.decode("utf-8").strip()