import pytest

from outline_toolkit.core.services.history_service import HistoryService
from outline_toolkit.core.services.structure_editing_service import StructureEditingService


@pytest.fixture
def structure_editing_service(sequential_ids):
    # Deterministic ids so new-node assertions stay readable
    return StructureEditingService(id_factory=sequential_ids)


@pytest.fixture
def history_service():
    return HistoryService(max_history=50)
