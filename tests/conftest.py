"""Shared fixtures for scoring engine tests.

Tests run against the bundled catalog and weight tables unless a test injects
its own; module caches are cleared around every test.
"""

import sys
from pathlib import Path

import pytest

# Add the repo root to path so tests can import media_matrix without installing
sys.path.insert(0, str(Path(__file__).parent.parent))

from media_matrix.schemas.answers import AnswerSet  # noqa: E402
from media_matrix.scorers import clear_caches  # noqa: E402
from media_matrix.scorers.criteria_catalog import get_catalog  # noqa: E402
from media_matrix.scorers.weight_registry import get_weight_tables  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_caches(monkeypatch):
    """Every test starts from the bundled configuration."""
    monkeypatch.delenv("MEDIA_MATRIX_CATALOG", raising=False)
    monkeypatch.delenv("MEDIA_MATRIX_WEIGHTS", raising=False)
    clear_caches()
    yield
    clear_caches()


@pytest.fixture
def catalog():
    return get_catalog()


@pytest.fixture
def weight_tables():
    return get_weight_tables()


@pytest.fixture
def portal_social_form():
    """Flat questionnaire form for a portal + social proposal."""
    return {
        "portal_existence": "diario",
        "portal_audience": "250.000",
        "demographic_rs_portal": "65",
        "privileged_visibility": "premium",
        "real_reach_portal": "auditado",
        "portal_formats": "2",
        "bonus_portal": "ate_30",
        "cpm": "18,50",
        "cpc": "1.2",
        "complementary_formats": "1",
        "crossposting": "2",
        "branded_content_text": "sim",
        "social_formats": "3",
        "real_reach_social": "historico",
        "bonus_social": "nenhuma",
        "social_followers_channels": ["Instagram", "Facebook"],
        "followers_Instagram": "1.000",
        "avg_reach_Instagram": "10",
        "demographic_rs_social_Instagram": "80",
        "followers_Facebook": "3.000",
        "avg_reach_Facebook": "20",
        "demographic_rs_social_Facebook": "60",
    }


@pytest.fixture
def portal_social_answers(portal_social_form):
    return AnswerSet.from_form(portal_social_form)
