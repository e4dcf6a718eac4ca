import subprocess
from unittest import mock

import pytest

from crudbench.docker import Arguments, Container, DockerError, DockerParams


def _done(returncode=0, stdout=b"", stderr=b""):
    return subprocess.CompletedProcess(["docker"], returncode, stdout=stdout, stderr=stderr)


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch):
    monkeypatch.delenv("DOCKER_PRE_ARGS", raising=False)
    monkeypatch.delenv("DOCKER_POST_ARGS", raising=False)


def test_arguments_append_skips_empty_parts():
    args = Arguments(["run"])
    args.append("  -p  1:1 ")
    assert args.items == ["run", "-p", "1:1"]
    assert str(args) == " ".join(args.items)


def test_docker_params_holds_values():
    params = DockerParams(image="arangodb", pre_args="-p 1:1", post_args="")
    assert (params.image, params.pre_args, params.post_args) == ("arangodb", "-p 1:1", "")


def test_execute_returns_trimmed_stdout():
    with mock.patch("crudbench.docker.subprocess.run", return_value=_done(stdout=b" out \n")) as run:
        assert Container.execute(Arguments(["ps"])) == "out"
    assert run.call_args.args[0] == ["docker", "ps"]


def test_execute_failure_raises_with_stderr():
    with mock.patch("crudbench.docker.subprocess.run", return_value=_done(1, stderr=b" boom\n")):
        with pytest.raises(DockerError) as info:
            Container.execute(["ps"])
    assert str(info.value) == "boom"


def test_start_builds_run_command():
    with mock.patch("crudbench.docker.subprocess.run", return_value=_done()) as run:
        container = Container.start("arangodb", "-p 8529:8529", "--flag x", privileged=True)
    assert container.image == "arangodb"
    assert run.call_args.args[0] == [
        "docker", "run", "-p", "8529:8529", "--privileged", "--rm", "--quiet",
        "--pull", "always", "--name", "crud-bench", "--net", "host",
        "-d", "arangodb", "--flag", "x",
    ]


def test_start_includes_environment_arguments(monkeypatch):
    monkeypatch.setenv("DOCKER_PRE_ARGS", "-e A=1")
    monkeypatch.setenv("DOCKER_POST_ARGS", "--extra")
    with mock.patch("crudbench.docker.subprocess.run", return_value=_done()) as run:
        container = Container.start("img", "", "", privileged=False)
    assert container.image == "img"
    command = run.call_args.args[0]
    assert command[:4] == ["docker", "run", "-e", "A=1"]
    assert command[-1] == "--extra"
    assert "--privileged" not in command


def test_start_retries_then_raises():
    with mock.patch("crudbench.docker.subprocess.run", return_value=_done(1, stderr=b"no")) as run, \
            mock.patch("crudbench.docker.time.sleep") as sleep:
        with pytest.raises(DockerError):
            Container.start("img", "", "", privileged=False)
    assert run.call_count == 10
    assert sleep.call_count == 9


def test_start_recovers_after_failure():
    results = [_done(1, stderr=b"no"), _done()]
    with mock.patch("crudbench.docker.subprocess.run", side_effect=results) as run, \
            mock.patch("crudbench.docker.time.sleep") as sleep:
        container = Container.start("img", "", "", privileged=False)
    assert container.image == "img"
    assert run.call_count == 2
    assert sleep.call_count == 1


def test_stop_and_logs_commands():
    with mock.patch("crudbench.docker.subprocess.run", return_value=_done(stdout=b"done")) as run:
        assert Container.stop() == "done"
        assert run.call_args.args[0] == ["docker", "container", "stop", "--time", "300", "crud-bench"]
        Container.logs()
        assert run.call_args.args[0] == ["docker", "container", "logs", "crud-bench"]


def test_context_manager_stops_container():
    with mock.patch("crudbench.docker.subprocess.run", return_value=_done(1, stderr=b"gone")) as run:
        with Container("img") as container:
            assert container.image == "img"
    assert run.call_args.args[0][1:3] == ["container", "stop"]