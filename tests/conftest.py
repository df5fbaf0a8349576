import copy

import pytest
from helpers.fakes import HOST_RESPONSE, METRICBEAT_RESPONSE, FakeElasticsearch


@pytest.fixture
def metricbeat_response():
    return copy.deepcopy(METRICBEAT_RESPONSE)


@pytest.fixture
def host_response():
    return copy.deepcopy(HOST_RESPONSE)


@pytest.fixture
def fake_es():
    return FakeElasticsearch()
