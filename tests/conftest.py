import pytest

from densela import config


@pytest.fixture(autouse=True)
def reset_config():
    yield
    config.reset_default_symmetry_thresholds()
    config.reset_default_positivity_thresholds()
    config.reset_default_decomposition()
