import sys, os

import pytest

# Ensure project root is on path for module imports
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if PROJECT_ROOT not in sys.path:
	sys.path.insert(0, PROJECT_ROOT)

from discount_engine.config import Config, reset_config  # noqa: E402

_ENV_KEYS = ("DISCOUNT_CONFIG_PATH", "MIN_DISCOUNT", "MAX_DISCOUNT", "RESIDUAL_POLICY")


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch):
	"""Keep developer env vars and the cached global config out of tests."""
	for key in _ENV_KEYS:
		monkeypatch.delenv(key, raising=False)
	reset_config()
	yield
	reset_config()


@pytest.fixture
def default_config():
	return Config()


@pytest.fixture
def varied_agents():
	return [
		{"id": "A1", "performanceScore": 90, "seniorityMonths": 18, "targetAchievedPercent": 85, "activeClients": 12},
		{"id": "A2", "performanceScore": 70, "seniorityMonths": 6, "targetAchievedPercent": 60, "activeClients": 8},
		{"id": "A3", "performanceScore": 95, "seniorityMonths": 36, "targetAchievedPercent": 98, "activeClients": 15},
		{"id": "A4", "performanceScore": 55, "seniorityMonths": 2, "targetAchievedPercent": 40, "activeClients": 5},
	]


@pytest.fixture
def identical_agents():
	return [
		{"id": f"A{i}", "performanceScore": 80, "seniorityMonths": 12, "targetAchievedPercent": 80, "activeClients": 10}
		for i in (1, 2, 3)
	]
