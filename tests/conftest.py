"""
Pytest Configuration and Shared Fixtures.

This module contains fixtures available to all tests.
"""

from __future__ import annotations

import random
from pathlib import Path
from typing import Dict, List

import pytest

from dicom_workbench.adapters.mock_gateway import MockRemoteGateway
from dicom_workbench.adapters.settings_store import InMemorySettingsStore
from dicom_workbench.config.models import WorkbenchConfig
from dicom_workbench.domain.entities import TagIdentifier, TagRow
from dicom_workbench.observability.observability_manager import ObservabilityManager
from dicom_workbench.settings.preferences import Preferences


@pytest.fixture(autouse=True)
def set_random_seed():
    """Ensure all tests are deterministic."""
    random.seed(42)
    yield


@pytest.fixture
def project_root() -> Path:
    """Repository root holding config/default.yaml."""
    return Path(__file__).parent.parent


@pytest.fixture
def mock_gateway() -> MockRemoteGateway:
    """Mock backend with 24 generated records under /data/study."""
    return MockRemoteGateway(seed=42)


@pytest.fixture
def settings_store() -> InMemorySettingsStore:
    return InMemorySettingsStore()


@pytest.fixture
def preferences(settings_store: InMemorySettingsStore) -> Preferences:
    """Preferences with no pins by default."""
    return Preferences(settings_store, default_pins=[])


@pytest.fixture
def default_config() -> WorkbenchConfig:
    return WorkbenchConfig()


@pytest.fixture
def observability() -> ObservabilityManager:
    """Observability manager with console rendering."""
    return ObservabilityManager(use_json=False)


@pytest.fixture
def patient_name() -> TagIdentifier:
    return TagIdentifier.of(0x0010, 0x0010)


@pytest.fixture
def patient_id() -> TagIdentifier:
    return TagIdentifier.of(0x0010, 0x0020)


@pytest.fixture
def modality() -> TagIdentifier:
    return TagIdentifier.of(0x0008, 0x0060)


@pytest.fixture
def sample_rows() -> List[TagRow]:
    """Tag rows of one record, deliberately out of order."""
    return [
        TagRow(group=0x0010, element=0x0020, name="PatientID", vr="LO", value="PID-0001"),
        TagRow(group=0x0008, element=0x0060, name="Modality", vr="CS", value="CT"),
        TagRow(group=0x0028, element=0x0010, name="Rows", vr="US", value="512"),
        TagRow(group=0x0010, element=0x0010, name="PatientName", vr="PN", value="DOE^JOHN"),
        TagRow(group=0x0008, element=0x0080, name="InstitutionName", vr="LO", value="CITY HOSPITAL"),
        TagRow(group=0x0010, element=0x0030, name="PatientBirthDate", vr="DA", value="19700101"),
    ]


@pytest.fixture
def small_records() -> Dict[str, List[TagRow]]:
    """Three records under /data/small with known values."""

    def record(name: str, modality_value: str) -> List[TagRow]:
        return [
            TagRow(group=0x0010, element=0x0010, name="PatientName", vr="PN", value=name),
            TagRow(group=0x0008, element=0x0060, name="Modality", vr="CS", value=modality_value),
        ]

    return {
        "/data/small/a.dcm": record("DOE^JOHN", "CT"),
        "/data/small/b.dcm": record("DOE^JANE", "CT"),
        "/data/small/c.dcm": record("SMITH^ALAN", "MR"),
    }
