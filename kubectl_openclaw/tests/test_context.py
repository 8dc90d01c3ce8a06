import argparse

import pytest

from kubectl_openclaw import context
from kubectl_openclaw.context import CliConfig, build_config, resolve_namespace

KUBECONFIG = """\
apiVersion: v1
kind: Config
clusters:
- name: dev
  cluster:
    server: https://127.0.0.1:6443
users:
- name: dev-user
  user:
    token: abc
contexts:
- name: dev
  context:
    cluster: dev
    user: dev-user
    namespace: {namespace}
current-context: dev
"""


@pytest.fixture
def kubeconfig(tmp_path):
    def _write(namespace: str) -> str:
        path = tmp_path / "config"
        path.write_text(KUBECONFIG.format(namespace=namespace), encoding="utf-8")
        return str(path)

    return _write


def test_namespace_from_active_context(kubeconfig):
    assert resolve_namespace(kubeconfig("team-a")) == "team-a"


def test_namespace_falls_back_to_default(kubeconfig, monkeypatch, tmp_path):
    monkeypatch.setattr(
        context, "SERVICE_ACCOUNT_NAMESPACE_FILE", str(tmp_path / "missing")
    )
    assert resolve_namespace(kubeconfig('""')) == "default"


def test_namespace_from_service_account(monkeypatch, tmp_path):
    sa = tmp_path / "namespace"
    sa.write_text("in-cluster-ns\n", encoding="utf-8")
    monkeypatch.setattr(context, "SERVICE_ACCOUNT_NAMESPACE_FILE", str(sa))

    assert resolve_namespace(str(tmp_path / "no-such-kubeconfig")) == "in-cluster-ns"


def test_explicit_namespace_wins(kubeconfig):
    cfg = CliConfig(kubeconfig=kubeconfig("team-a"), namespace="prod")
    assert cfg.target_namespace() == "prod"


def test_build_config_from_args():
    args = argparse.Namespace(
        kubeconfig="",
        namespace="prod",
        all_namespaces=True,
        output="yaml",
        verbose=True,
        request_timeout=5.0,
    )
    cfg = build_config(args)

    assert cfg == CliConfig(
        kubeconfig=None,
        namespace="prod",
        all_namespaces=True,
        output="yaml",
        verbose=True,
        request_timeout=5.0,
    )


def test_build_config_defaults_for_missing_args():
    cfg = build_config(argparse.Namespace())
    assert cfg == CliConfig()


def test_build_config_rejects_unknown_output():
    with pytest.raises(ValueError):
        build_config(argparse.Namespace(output="xml"))


def test_malformed_kubeconfig_falls_back_to_default(monkeypatch, tmp_path):
    path = tmp_path / "config"
    path.write_text("clusters: [\n", encoding="utf-8")
    monkeypatch.setattr(
        context, "SERVICE_ACCOUNT_NAMESPACE_FILE", str(tmp_path / "missing")
    )

    assert resolve_namespace(str(path)) == "default"
