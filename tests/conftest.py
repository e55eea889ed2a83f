from __future__ import annotations

import pytest
from PySide6.QtCore import QCoreApplication

from stepscene.controller.session import EditorSession
from stepscene.controller.store import StepGraphStore
from stepscene.model.io import ModelLibrary


@pytest.fixture(scope="session", autouse=True)
def qt_app():
    # The store is a QObject; keep one core application alive for its signals.
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def store() -> StepGraphStore:
    return StepGraphStore()


@pytest.fixture
def library(tmp_path) -> ModelLibrary:
    return ModelLibrary(str(tmp_path / "saved_models.h5"))


@pytest.fixture
def session(store: StepGraphStore, library: ModelLibrary) -> EditorSession:
    return EditorSession(store, library)


@pytest.fixture
def recorder(store: StepGraphStore):
    """Collects every signal the store emits, in order."""
    events: list[tuple] = []
    store.graph_changed.connect(lambda: events.append(("graph",)))
    store.selection_changed.connect(lambda node_id: events.append(("selection", node_id)))
    store.viewer_mode_changed.connect(lambda enabled: events.append(("viewer", enabled)))
    return events
