import sys, os
import pytest
from kubernetes import client as k8s

# Ensure project root (parent of tests directory) is on sys.path for imports when
# test execution occurs in environments that don't automatically include it.
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from kubegen.util import logging as log  # noqa: E402


@pytest.fixture(autouse=True)
def quiet_logging():
    log.configure_logging('ERROR', 'text')
    yield
    log.configure_logging('INFO', 'text')


def make_service(name='api'):
    return k8s.V1Service(
        metadata=k8s.V1ObjectMeta(name=name, labels={'app': name}),
        spec=k8s.V1ServiceSpec(
            selector={'app': name},
            ports=[k8s.V1ServicePort(port=80, target_port=8080)],
        ),
        status=k8s.V1ServiceStatus(load_balancer=k8s.V1LoadBalancerStatus()),
    )


def _pod_template(name):
    return k8s.V1PodTemplateSpec(
        metadata=k8s.V1ObjectMeta(labels={'app': name}),
        spec=k8s.V1PodSpec(containers=[
            k8s.V1Container(
                name=name,
                image='nginx:1.25',
                resources=k8s.V1ResourceRequirements(),
                security_context=k8s.V1SecurityContext(run_as_user=1000),
            ),
        ]),
    )


def make_deployment(name='api', replicas=2):
    return k8s.V1Deployment(
        metadata=k8s.V1ObjectMeta(name=name),
        spec=k8s.V1DeploymentSpec(
            replicas=replicas,
            selector=k8s.V1LabelSelector(match_labels={'app': name}),
            strategy=k8s.V1DeploymentStrategy(),
            template=_pod_template(name),
        ),
        status=k8s.V1DeploymentStatus(),
    )


def make_daemon_set(name='agent'):
    return k8s.V1DaemonSet(
        metadata=k8s.V1ObjectMeta(name=name),
        spec=k8s.V1DaemonSetSpec(
            selector=k8s.V1LabelSelector(match_labels={'app': name}),
            template=_pod_template(name),
        ),
    )


def make_config_map(name='settings'):
    return k8s.V1ConfigMap(metadata=k8s.V1ObjectMeta(name=name), data={'key': 'value'})


@pytest.fixture
def service():
    return make_service()


@pytest.fixture
def deployment():
    return make_deployment()
