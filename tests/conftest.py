"""Shared test fixtures for Wiki Trust tests."""

from __future__ import annotations

from datetime import datetime

import pytest
from helpers import NOW, make_profile, make_revision

from wiki_trust.models import CountInfo, Revision, UserProfile


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def first_revision_old() -> Revision:
    return make_revision(user="Creator", days=900, comment="create page")


@pytest.fixture
def sample_profiles() -> dict[str, UserProfile]:
    return {
        "admin": make_profile("Admin", edit_count=120, groups=("sysop",)),
        "veteran": make_profile("Veteran", edit_count=8000),
        "reviewer": make_profile("Reviewer", edit_count=150, groups=("autoreviewer",)),
        "regular": make_profile("Regular", edit_count=500),
        "newbie": make_profile("Newbie", edit_count=10, registered_days_ago=20),
        "ghost": make_profile("Ghost", missing=True),
    }


@pytest.fixture
def capped_count() -> CountInfo:
    return CountInfo(count=30000, capped=True)
