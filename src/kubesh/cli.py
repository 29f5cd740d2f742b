"""Typer CLI for kubesh."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, NoReturn

import typer

from kubesh.buildinfo import BuildInfo
from kubesh.cluster import ClusterClientError, KubernetesClusterClient
from kubesh.config import load_settings
from kubesh.exceptions import KubeshError
from kubesh.nodeshell import (
    PodLifecycleManager,
    Session,
    SessionBridge,
    close_best_effort,
    close_now,
)
from kubesh.prompt import select_node

BUILD_INFO = BuildInfo.current()

app = typer.Typer(
    name="kubesh",
    help="Login to a node in k8s cluster.",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version information and exit."""
    if value:
        typer.echo(f"kubesh {BUILD_INFO.version}")
        raise typer.Exit()


def _fail(error: Exception) -> NoReturn:
    typer.echo(f"Error: {error}", err=True)
    raise typer.Exit(1)


@app.command()
def main(
    node: Annotated[
        str | None,
        typer.Argument(
            help="Node to log in to. Prompts for one when omitted.",
            show_default=False,
        ),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="kubesh config file path (default ~/.config/kubesh.yaml).",
        ),
    ] = None,
    kubeconfig: Annotated[
        str | None,
        typer.Option(
            "--kubeconfig",
            help=(
                "kubeconfig file path "
                "(default from env $KUBECONFIG and ~/.kube/config)."
            ),
        ),
    ] = None,
    keep: Annotated[
        bool,
        typer.Option("--keep", "-k", help="Don't delete shell pod after exit."),
    ] = False,
    kill: Annotated[
        bool,
        typer.Option("--kill", "-K", help="Kill shell pod."),
    ] = False,
    insecure: Annotated[
        bool,
        typer.Option(
            "--insecure",
            "-i",
            help="Allow insecure connection to cluster.",
        ),
    ] = False,
    build_info: Annotated[
        bool,
        typer.Option("--build-info", help="Show build info."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show kubesh version and exit.",
        ),
    ] = False,
) -> None:
    """Login to a node in k8s cluster."""
    if build_info:
        for line in BUILD_INFO.lines():
            typer.echo(line)
        return

    try:
        cluster = KubernetesClusterClient.from_kubeconfig(
            kubeconfig=kubeconfig,
            insecure=insecure,
        )
        if node is None:
            node = select_node(cluster)
        settings = load_settings(config_path)

        if kill:
            session = Session.for_node(node, settings, cluster)
            close_now(session)
            typer.echo(f"Pod {session.display_name} deleted.", err=True)
            return

        session = PodLifecycleManager(cluster).ensure_running(node, settings)
    except (KubeshError, ClusterClientError) as e:
        _fail(e)
    except KeyboardInterrupt:
        raise typer.Exit(130) from None

    try:
        SessionBridge().run(session)
    except KubeshError as e:
        _fail(e)
    finally:
        if not keep:
            close_best_effort(session)
